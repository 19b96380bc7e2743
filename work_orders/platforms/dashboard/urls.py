from django.urls import path
from work_orders.platforms.dashboard.views import *


urlpatterns = [
path('work_order', WorkOrderDashboardView.as_view(), name='DashboardWorkOrder'),
path('work_order/open', WorkOrderOpenDashboardView.as_view(), name='DashboardWorkOrderOpen'),
path('work_order/<str:pk>', WorkOrderDashboardView.as_view(), name='DashboardWorkOrderDetails'),
path('work_order/<str:pk>/stages', WorkOrderStagesDashboardView.as_view(), name='DashboardWorkOrderStages'),
path('work_order/<str:pk>/complete-stage', WorkOrderCompleteStageDashboardView.as_view(), name='DashboardWorkOrderCompleteStage'),
path('work_order/<str:pk>/accept-quality', WorkOrderAcceptQualityDashboardView.as_view(), name='DashboardWorkOrderAcceptQuality'),
path('work_order/<str:pk>/reject-quality', WorkOrderRejectQualityDashboardView.as_view(), name='DashboardWorkOrderRejectQuality'),
path('work_order_log', WorkOrderLogDashboardView.as_view(), name='DashboardWorkOrderLog'),
]
