from django.core.validators import MinValueValidator
from django.db import models

from configurations.base_features.constants import SYSTEM_PERFORMER
from configurations.base_features.db.base_model import BaseModel, VersionedModel
from work_orders.lifecycle import STAGE_CHOICES, WorkOrderStatus, is_work_order_open


class WorkOrder(VersionedModel):
    work_order_no = models.CharField(max_length=100, unique=True)
    drawing_no = models.CharField(max_length=100, blank=True)
    customer_name = models.CharField(max_length=255, blank=True)
    po_number = models.CharField(max_length=100, blank=True)
    tool_code = models.CharField(max_length=100, blank=True)
    tool_description = models.TextField(blank=True)
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    price_per_unit = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    total_price = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    machine = models.CharField(max_length=100, blank=True)
    # minutes of machine time per unit
    cycle_time = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    korv_per_unit = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    total_korv = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    coating_required = models.BooleanField(default=False)
    coating_type = models.CharField(max_length=100, blank=True)
    marking_required = models.BooleanField(default=False)
    status = models.CharField(max_length=40, choices=WorkOrderStatus.choices, default=WorkOrderStatus.PLANNING_REQUIRED)
    created_by = models.CharField(max_length=150, default=SYSTEM_PERFORMER)
    rejected_from = models.ForeignKey('self', on_delete=models.SET_NULL, null=True, blank=True, related_name='rejections')

    factory_planning_at = models.DateTimeField(null=True, blank=True)
    factory_planning_by = models.CharField(max_length=150, blank=True)
    factory_planning_notes = models.TextField(blank=True)
    production_completed_at = models.DateTimeField(null=True, blank=True)
    production_completed_by = models.CharField(max_length=150, blank=True)
    production_notes = models.TextField(blank=True)
    marking_completed_at = models.DateTimeField(null=True, blank=True)
    marking_completed_by = models.CharField(max_length=150, blank=True)
    marking_notes = models.TextField(blank=True)
    sent_to_coating_at = models.DateTimeField(null=True, blank=True)
    sent_to_coating_by = models.CharField(max_length=150, blank=True)
    coating_completed_at = models.DateTimeField(null=True, blank=True)
    coating_completed_by = models.CharField(max_length=150, blank=True)
    coating_notes = models.TextField(blank=True)
    ready_for_dispatch_at = models.DateTimeField(null=True, blank=True)
    ready_for_dispatch_by = models.CharField(max_length=150, blank=True)
    dispatched_at = models.DateTimeField(null=True, blank=True)
    dispatched_by = models.CharField(max_length=150, blank=True)
    dispatch_notes = models.TextField(blank=True)

    quality_accepted_at = models.DateTimeField(null=True, blank=True)
    quality_accepted_by = models.CharField(max_length=150, blank=True)
    quality_notes = models.TextField(blank=True)
    quality_partial_qty = models.PositiveIntegerField(null=True, blank=True)
    quality_rejected_at = models.DateTimeField(null=True, blank=True)
    quality_rejected_by = models.CharField(max_length=150, blank=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status']),
            models.Index(fields=['tool_code']),
        ]

    def __str__(self):
        return self.work_order_no

    @property
    def is_open(self):
        return is_work_order_open(self.status)


class WorkOrderLog(BaseModel):
    class LogTypeChoices(models.TextChoices):
        CREATED = 'Created'
        STAGE_COMPLETED = 'Stage Completed'
        QUALITY_ACCEPTED = 'Quality Accepted'
        QUALITY_REJECTED = 'Quality Rejected'

    work_order = models.ForeignKey(WorkOrder, on_delete=models.CASCADE, related_name='logs')
    performed_by = models.CharField(max_length=150, default=SYSTEM_PERFORMER)
    log_type = models.CharField(max_length=50, choices=LogTypeChoices.choices)
    stage = models.CharField(max_length=50, choices=STAGE_CHOICES, blank=True)
    quantity = models.PositiveIntegerField(null=True, blank=True)
    description = models.TextField(blank=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.work_order_id} {self.log_type}"
