from stock.platforms.base.views import *
from stock.platforms.api.serializers import *


class StockItemApiView(StockItemBaseView):
    serializer_class = StockItemApiSerializer


class StockIssueApiView(StockIssueBaseView):
    serializer_class = StockItemApiSerializer


class StockAddApiView(StockAddBaseView):
    serializer_class = StockItemApiSerializer


class StockAdjustApiView(StockAdjustBaseView):
    serializer_class = StockItemApiSerializer


class StockReconcileApiView(StockReconcileBaseView):
    serializer_class = StockItemApiSerializer


class StockMovementApiView(StockMovementBaseView):
    serializer_class = StockMovementApiSerializer


class StockMovementReverseApiView(StockMovementReverseBaseView):
    serializer_class = StockMovementApiSerializer
