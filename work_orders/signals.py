# work_orders/signals.py
from work_orders.models import WorkOrderLog


def log_work_order_created(sender, created, instance, raw=False, **kwargs):
    if not created or raw:
        return
    if instance.rejected_from_id:
        description = f"Split from {instance.rejected_from.work_order_no} after quality rejection"
    else:
        description = f"{instance.quantity} x {instance.tool_code or instance.drawing_no or 'item'}"
    WorkOrderLog.objects.create(
        work_order=instance,
        performed_by=instance.created_by,
        log_type=WorkOrderLog.LogTypeChoices.CREATED,
        quantity=instance.quantity,
        description=description,
    )
