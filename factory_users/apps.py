from django.apps import AppConfig


class FactoryUsersConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'factory_users'
    verbose_name = 'Factory users'
