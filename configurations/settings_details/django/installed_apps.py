BASE_APPS = [
    'whitenoise.runserver_nostatic',
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
]
THIRD_PARTY_APPS = [
    'rest_framework',
    "corsheaders",
    'rest_framework_simplejwt',
    "django_extensions",
]
PROJECT_APPS = [
    'factory_users.apps.FactoryUsersConfig',
    'work_orders.apps.WorkOrdersConfig',
    'stock.apps.StockConfig',
]
