from work_orders.platforms.base.views import *
from work_orders.platforms.api.serializers import *


class WorkOrderApiView(WorkOrderBaseView):
    serializer_class = WorkOrderApiSerializer


class WorkOrderOpenApiView(WorkOrderOpenBaseView):
    serializer_class = WorkOrderApiSerializer


class WorkOrderStagesApiView(WorkOrderStagesBaseView):
    serializer_class = WorkOrderApiSerializer


class WorkOrderCompleteStageApiView(WorkOrderCompleteStageBaseView):
    serializer_class = WorkOrderApiSerializer


class WorkOrderAcceptQualityApiView(WorkOrderAcceptQualityBaseView):
    serializer_class = WorkOrderApiSerializer


class WorkOrderRejectQualityApiView(WorkOrderRejectQualityBaseView):
    serializer_class = WorkOrderApiSerializer


class WorkOrderLogApiView(WorkOrderLogBaseView):
    serializer_class = WorkOrderLogApiSerializer
