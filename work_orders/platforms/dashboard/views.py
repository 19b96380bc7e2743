from work_orders.platforms.base.views import *


class WorkOrderDashboardView(WorkOrderBaseView):
    pass


class WorkOrderOpenDashboardView(WorkOrderOpenBaseView):
    pass


class WorkOrderStagesDashboardView(WorkOrderStagesBaseView):
    pass


class WorkOrderCompleteStageDashboardView(WorkOrderCompleteStageBaseView):
    pass


class WorkOrderAcceptQualityDashboardView(WorkOrderAcceptQualityBaseView):
    pass


class WorkOrderRejectQualityDashboardView(WorkOrderRejectQualityBaseView):
    pass


class WorkOrderLogDashboardView(WorkOrderLogBaseView):
    pass
