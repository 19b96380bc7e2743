from django.contrib import admin
from django.utils.html import format_html
from .models import StockItem, StockMovement


class StockMovementInline(admin.TabularInline):
    model = StockMovement
    fk_name = 'item'
    extra = 0
    can_delete = False
    fields = ('created_at', 'action', 'qty', 'reason', 'work_order', 'performed_by', 'reversed_at')
    readonly_fields = fields
    ordering = ('-created_at',)

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(StockItem)
class StockItemAdmin(admin.ModelAdmin):
    list_display = ['item_code', 'item_name', 'group_code', 'get_quantity', 'unit', 'location', 'last_updated']
    list_filter = ['group_code', 'status']
    search_fields = ['item_code', 'item_name', 'location', 'machine']
    readonly_fields = ['quantity', 'version', 'last_updated', 'created_at', 'updated_at']
    inlines = [StockMovementInline]

    def get_quantity(self, obj):
        """Highlight items that ran out"""
        return format_html(
            '<span style="color: {};">{}</span>',
            'red' if obj.quantity <= 0 else 'green',
            obj.quantity,
        )
    get_quantity.short_description = 'Quantity'

    def has_add_permission(self, request):
        # items are created through the ledger so the opening balance is recorded
        return False

    def save_model(self, request, obj, form, change):
        if change:
            # quantity is owned by the ledger, only the edited columns are written
            StockItem.objects.compare_and_swap(obj, form.changed_data)
        else:
            super().save_model(request, obj, form, change)


@admin.register(StockMovement)
class StockMovementAdmin(admin.ModelAdmin):
    list_display = ['item', 'action', 'qty', 'target_type', 'work_order', 'performed_by', 'reversed_at', 'created_at']
    list_filter = ['action', 'target_type', 'created_at']
    search_fields = ['item__item_code', 'item__item_name', 'reason', 'performed_by']
    list_select_related = ['item', 'work_order']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
