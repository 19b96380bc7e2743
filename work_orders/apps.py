# work_orders/apps.py
from django.apps import AppConfig
from django.db.models.signals import post_save


class WorkOrdersConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'work_orders'

    def ready(self):
        from work_orders.models import WorkOrder
        from work_orders.signals import log_work_order_created
        post_save.connect(log_work_order_created, sender=WorkOrder, dispatch_uid='work_order_created_log')
