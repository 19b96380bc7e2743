from work_orders.platforms.base.serializers import *


class WorkOrderApiSerializer(WorkOrderBaseSerializer):
    pass


class WorkOrderLogApiSerializer(WorkOrderLogBaseSerializer):
    pass
