from django.db.models import Count
from django.http import HttpResponse

from configurations.base_features.constants import SERVER_VERSION
from configurations.base_features.views.base_api_view import BaseAPIView
from stock.models import StockItem
from work_orders.lifecycle import is_work_order_open
from work_orders.models import WorkOrder, WorkOrderLog


def index(request):
    return HttpResponse(f"Factory backend {SERVER_VERSION}")


class DashboardApiView(BaseAPIView):
    """Counters for the dashboard landing page."""
    model_class = WorkOrder
    http_method_names = ['get']

    def list(self, params, *args, **kwargs):
        by_status = (
            WorkOrder.objects.values("status")
            .annotate(count=Count("id"))
            .order_by("status")
        )
        work_orders_by_status = {row["status"]: row["count"] for row in by_status}
        recent_logs = WorkOrderLog.objects.select_related("work_order").order_by("-created_at")[:10]
        response = {
            "work_orders_by_status": work_orders_by_status,
            "open_work_orders_count": sum(
                count for status, count in work_orders_by_status.items() if is_work_order_open(status)
            ),
            "stock_items_count": StockItem.objects.count(),
            "out_of_stock_count": StockItem.objects.filter(quantity__lte=0).count(),
            "recent_activity": [
                f"{log.performed_by} {log.log_type.lower()} {log.work_order.work_order_no}"
                for log in recent_logs
            ],
        }
        return self.format_response(data=response, status_code=200)
