from django.contrib import admin
from work_orders.lifecycle import LOCKED_FIELDS, STAGES, has_lifecycle_progress
from work_orders.models import WorkOrder, WorkOrderLog


class WorkOrderLogInline(admin.TabularInline):
    """Read-only audit trail inside the work order page"""
    model = WorkOrderLog
    extra = 0
    can_delete = False
    fields = ('created_at', 'log_type', 'stage', 'quantity', 'performed_by', 'description')
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(WorkOrder)
class WorkOrderAdmin(admin.ModelAdmin):
    list_display = ['work_order_no', 'tool_code', 'customer_name', 'quantity', 'status', 'marking_required', 'coating_required', 'created_at']
    list_filter = ['status', 'marking_required', 'coating_required', 'created_at']
    search_fields = ['work_order_no', 'tool_code', 'customer_name', 'po_number']
    # lifecycle columns only change through the work order service
    readonly_fields = [
        'status', 'version', 'rejected_from', 'created_at', 'updated_at',
        *[name for stage in STAGES for name in (stage.at_field, stage.by_field)],
        'quality_accepted_at', 'quality_accepted_by', 'quality_partial_qty',
        'quality_rejected_at', 'quality_rejected_by',
    ]
    inlines = [WorkOrderLogInline]

    def get_readonly_fields(self, request, obj=None):
        readonly = list(super().get_readonly_fields(request, obj))
        if obj is not None and has_lifecycle_progress(obj):
            readonly.extend(LOCKED_FIELDS)
        return readonly

    def save_model(self, request, obj, form, change):
        if change:
            WorkOrder.objects.compare_and_swap(obj, form.changed_data)
        else:
            obj.created_by = request.user.username
            super().save_model(request, obj, form, change)


@admin.register(WorkOrderLog)
class WorkOrderLogAdmin(admin.ModelAdmin):
    list_display = ['work_order', 'log_type', 'stage', 'quantity', 'performed_by', 'created_at']
    list_filter = ['log_type', 'stage', 'created_at']
    search_fields = ['work_order__work_order_no', 'performed_by', 'description']
    readonly_fields = ['created_at', 'updated_at']
    list_select_related = ['work_order']
