from django.urls import path
from work_orders.platforms.api.views import *


urlpatterns = [
path('work_order', WorkOrderApiView.as_view(), name='WorkOrder'),
path('work_order/open', WorkOrderOpenApiView.as_view(), name='WorkOrderOpen'),
path('work_order/<str:pk>', WorkOrderApiView.as_view(), name='WorkOrderDetails'),
path('work_order/<str:pk>/stages', WorkOrderStagesApiView.as_view(), name='WorkOrderStages'),
path('work_order/<str:pk>/complete-stage', WorkOrderCompleteStageApiView.as_view(), name='WorkOrderCompleteStage'),
path('work_order/<str:pk>/accept-quality', WorkOrderAcceptQualityApiView.as_view(), name='WorkOrderAcceptQuality'),
path('work_order/<str:pk>/reject-quality', WorkOrderRejectQualityApiView.as_view(), name='WorkOrderRejectQuality'),

path('work_order_log', WorkOrderLogApiView.as_view(), name='WorkOrderLog'),
path('work_order_log/<str:pk>', WorkOrderLogApiView.as_view(), name='WorkOrderLogDetails'),
]
