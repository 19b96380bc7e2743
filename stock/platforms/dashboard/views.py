from stock.platforms.base.views import *


class StockItemDashboardView(StockItemBaseView):
    pass


class StockIssueDashboardView(StockIssueBaseView):
    pass


class StockAddDashboardView(StockAddBaseView):
    pass


class StockAdjustDashboardView(StockAdjustBaseView):
    pass


class StockReconcileDashboardView(StockReconcileBaseView):
    pass


class StockMovementDashboardView(StockMovementBaseView):
    pass


class StockMovementReverseDashboardView(StockMovementReverseBaseView):
    pass
