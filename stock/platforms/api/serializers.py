from stock.platforms.base.serializers import *


class StockItemApiSerializer(StockItemBaseSerializer):
    pass


class StockMovementApiSerializer(StockMovementBaseSerializer):
    pass
