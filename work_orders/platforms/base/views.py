from django.conf import settings

from configurations.base_features.constants import ROLE_ADMIN, ROLE_MANAGER
from configurations.base_features.views.base_api_view import BaseAPIView
from work_orders.platforms.base.serializers import *
from work_orders.services import work_order_service


class WorkOrderBaseView(BaseAPIView):
    serializer_class = WorkOrderBaseSerializer
    model_class = WorkOrder
    write_roles = [ROLE_ADMIN, ROLE_MANAGER]

    def destroy(self, request, pk, *args, **kwargs):
        instance = self.get_instance(pk)
        if instance.logs.exclude(log_type=WorkOrderLog.LogTypeChoices.CREATED).exists():
            # orders with lifecycle history stay for traceability
            return self.format_response(
                errors={"error": f"Work order {instance.work_order_no} has lifecycle history and cannot be deleted"},
                status_code=409,
            )
        instance.delete()
        return self.format_response(data={}, status_code=204)


class WorkOrderOpenBaseView(BaseAPIView):
    """Open work orders for pickers, filtered by ?search="""
    serializer_class = WorkOrderBaseSerializer
    model_class = WorkOrder
    http_method_names = ['get']

    def get(self, request, *args, **kwargs):
        try:
            self.authorize_user(request)
            query = OpenWorkOrderQueryBaseSerializer(data=request.query_params)
            query.is_valid(raise_exception=True)
            limit = min(query.validated_data.get('limit', settings.OPEN_WORK_ORDER_LIST_LIMIT),
                        settings.OPEN_WORK_ORDER_LIST_LIMIT)
            work_orders = work_order_service.list_open_work_orders(
                search=query.validated_data['search'], limit=limit)
            return self.format_response(data=self.get_serialized_objects(work_orders, many=True), status_code=200)
        except Exception as e:
            return self.handle_exception(e)


class WorkOrderStagesBaseView(BaseAPIView):
    serializer_class = WorkOrderBaseSerializer
    model_class = WorkOrder
    http_method_names = ['get']

    def get(self, request, pk=None, *args, **kwargs):
        try:
            user = self.authorize_user(request)
            work_order = self.get_instance(pk)
            data = {
                "work_order": str(work_order.id),
                "work_order_no": work_order.work_order_no,
                "status": work_order.status,
                "version": work_order.version,
                "stages": work_order_service.get_stage_timeline(work_order, user),
            }
            return self.format_response(data=data, status_code=200)
        except Exception as e:
            return self.handle_exception(e)


class WorkOrderActionBaseView(BaseAPIView):
    """POST-only endpoint that runs one lifecycle operation on the work order `pk`"""
    serializer_class = WorkOrderBaseSerializer
    model_class = WorkOrder
    input_serializer_class = None
    http_method_names = ['post']

    def post(self, request, pk=None, *args, **kwargs):
        try:
            user = self.authorize_user(request)
            input_serializer = self.input_serializer_class(data=request.data)
            input_serializer.is_valid(raise_exception=True)
            return self.perform_action(pk, user, input_serializer.validated_data)
        except Exception as e:
            return self.handle_exception(e)

    def perform_action(self, pk, user, validated_data):
        raise NotImplementedError


class WorkOrderCompleteStageBaseView(WorkOrderActionBaseView):
    input_serializer_class = CompleteStageBaseSerializer

    def perform_action(self, pk, user, validated_data):
        result = work_order_service.complete_stage(
            pk,
            validated_data['stage'],
            user,
            note=validated_data.get('note') or None,
            expected_version=validated_data.get('expected_version'),
        )
        data = self.get_serialized_objects(result.work_order)
        data['completed_stages'] = result.completed_stages
        return self.format_response(data=data, status_code=200)


class WorkOrderAcceptQualityBaseView(WorkOrderActionBaseView):
    input_serializer_class = AcceptQualityBaseSerializer

    def perform_action(self, pk, user, validated_data):
        work_order = work_order_service.accept_quality(
            pk,
            user,
            note=validated_data.get('note') or None,
            partial_qty=validated_data.get('partial_qty'),
            expected_version=validated_data.get('expected_version'),
        )
        return self.format_response(data=self.get_serialized_objects(work_order), status_code=200)


class WorkOrderRejectQualityBaseView(WorkOrderActionBaseView):
    input_serializer_class = RejectQualityBaseSerializer

    def perform_action(self, pk, user, validated_data):
        result = work_order_service.reject_quality(
            pk,
            user,
            note=validated_data.get('note') or None,
            rejected_qty=validated_data.get('rejected_qty'),
            expected_version=validated_data.get('expected_version'),
        )
        data = {
            "work_order": self.get_serialized_objects(result.work_order),
            "rejected_work_order": self.get_serialized_objects(result.rejected_work_order),
            "rejected_qty": result.rejected_qty,
            "remaining_qty": result.remaining_qty,
        }
        return self.format_response(data=data, status_code=201)


class WorkOrderLogBaseView(BaseAPIView):
    serializer_class = WorkOrderLogBaseSerializer
    model_class = WorkOrderLog
    http_method_names = ['get']
