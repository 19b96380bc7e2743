from configurations.base_features.constants import ROLE_ADMIN, ROLE_MANAGER
from configurations.base_features.views.base_api_view import BaseAPIView
from stock.platforms.base.serializers import *
from stock.services import stock_ledger


class StockItemBaseView(BaseAPIView):
    serializer_class = StockItemBaseSerializer
    model_class = StockItem
    write_roles = [ROLE_ADMIN, ROLE_MANAGER]

    def list(self, params, *args, **kwargs):
        query = self.request.query_params
        items = stock_ledger.list_stock(
            group_code=query.get('group_code'),
            search=query.get('search', ''),
            limit=int(query['limit']) if query.get('limit', '').isdigit() else None,
        )
        return self.format_response(data=self.get_serialized_objects(items, many=True), status_code=200)

    def destroy(self, request, pk, *args, **kwargs):
        instance = self.get_instance(pk)
        if instance.movements.exists():
            return self.format_response(
                errors={"error": f"Stock item {instance.item_code} has ledger history and cannot be deleted"},
                status_code=409,
            )
        instance.delete()
        return self.format_response(data={}, status_code=204)


class StockActionBaseView(BaseAPIView):
    """POST-only endpoint running one ledger operation on the item `pk`"""
    serializer_class = StockItemBaseSerializer
    model_class = StockItem
    input_serializer_class = None
    http_method_names = ['post']

    def post(self, request, pk=None, *args, **kwargs):
        try:
            user = self.authorize_user(request)
            input_serializer = self.input_serializer_class(data=request.data)
            input_serializer.is_valid(raise_exception=True)
            result = self.perform_action(pk, user, input_serializer.validated_data)
            data = {
                "item": self.get_serialized_objects(result.item),
                "movement": StockMovementBaseSerializer(result.movement).data,
            }
            return self.format_response(data=data, status_code=201)
        except Exception as e:
            return self.handle_exception(e)

    def perform_action(self, pk, user, validated_data):
        raise NotImplementedError


class StockIssueBaseView(StockActionBaseView):
    input_serializer_class = IssueStockBaseSerializer

    def perform_action(self, pk, user, validated_data):
        return stock_ledger.issue_stock(
            pk,
            validated_data['qty'],
            reason=validated_data.get('reason', ''),
            work_order_id=validated_data.get('work_order'),
            performer=user,
        )


class StockAddBaseView(StockActionBaseView):
    input_serializer_class = AddStockBaseSerializer

    def perform_action(self, pk, user, validated_data):
        return stock_ledger.add_stock(pk, validated_data['qty'], reason=validated_data.get('reason', ''), performer=user)


class StockAdjustBaseView(StockActionBaseView):
    input_serializer_class = AdjustStockBaseSerializer
    allowed_roles = [ROLE_ADMIN, ROLE_MANAGER]

    def perform_action(self, pk, user, validated_data):
        return stock_ledger.adjust_stock(
            pk, validated_data['new_qty'], reason=validated_data.get('reason', ''), performer=user)


class StockReconcileBaseView(BaseAPIView):
    """GET reports ledger drift for an item, POST resets the item to its ledger total"""
    serializer_class = StockItemBaseSerializer
    model_class = StockItem
    http_method_names = ['get', 'post']
    write_roles = [ROLE_ADMIN, ROLE_MANAGER]

    @staticmethod
    def _balance_data(balance):
        return {
            "item": balance.item_id,
            "item_code": balance.item_code,
            "stored_quantity": balance.stored_quantity,
            "ledger_quantity": balance.ledger_quantity,
            "drift": balance.drift,
            "movement_count": balance.movement_count,
            "is_consistent": balance.is_consistent,
        }

    def get(self, request, pk=None, *args, **kwargs):
        try:
            self.authorize_user(request)
            return self.format_response(data=self._balance_data(stock_ledger.ledger_balance(pk)), status_code=200)
        except Exception as e:
            return self.handle_exception(e)

    def post(self, request, pk=None, *args, **kwargs):
        try:
            user = self.authorize_user(request)
            balance = stock_ledger.reconcile(pk, performer=user)
            return self.format_response(data=self._balance_data(balance), status_code=200)
        except Exception as e:
            return self.handle_exception(e)


class StockMovementBaseView(BaseAPIView):
    serializer_class = StockMovementBaseSerializer
    model_class = StockMovement
    http_method_names = ['get']

    def list(self, params, *args, **kwargs):
        query = MovementQueryBaseSerializer(data=self.request.query_params)
        query.is_valid(raise_exception=True)
        movements = stock_ledger.list_stock_movements(
            work_order_id=query.validated_data.get('work_order'),
            item_id=query.validated_data.get('item'),
            limit=query.validated_data.get('limit'),
        )
        return self.format_response(data=self.get_serialized_objects(movements, many=True), status_code=200)


class StockMovementReverseBaseView(BaseAPIView):
    serializer_class = StockMovementBaseSerializer
    model_class = StockMovement
    http_method_names = ['post']
    allowed_roles = [ROLE_ADMIN, ROLE_MANAGER]

    def post(self, request, pk=None, *args, **kwargs):
        try:
            user = self.authorize_user(request)
            result = stock_ledger.reverse_issue_movement(pk, performer=user)
            data = {
                "item": StockItemBaseSerializer(result.restored).data,
                "compensating": self.get_serialized_objects(result.compensating),
                "original": self.get_serialized_objects(result.original),
            }
            return self.format_response(data=data, status_code=201)
        except Exception as e:
            return self.handle_exception(e)
