from rest_framework import serializers

from configurations.base_features.serializers.base_serializer import BaseSerializer
from stock.models import StockItem, StockMovement
from stock.services import stock_ledger


class StockItemBaseSerializer(BaseSerializer):
    opening_qty = serializers.DecimalField(max_digits=12, decimal_places=3, write_only=True, required=False)

    class Meta:
        model = StockItem
        fields = '__all__'
        read_only_fields = ('id', 'created_at', 'updated_at', 'quantity', 'version', 'last_updated')

    def mod_create(self, validated_data):
        opening_qty = validated_data.pop('opening_qty', 0)
        result = stock_ledger.create_stock_item(
            opening_qty=opening_qty,
            performer=self.get_performer_name(),
            **validated_data,
        )
        return result.item

    def mod_update(self, instance, validated_data):
        validated_data.pop('opening_qty', None)
        for name, value in validated_data.items():
            setattr(instance, name, value)
        return StockItem.objects.compare_and_swap(instance, list(validated_data.keys()))


class StockMovementBaseSerializer(BaseSerializer):
    class Meta:
        model = StockMovement
        fields = '__all__'

    def mod_to_representation(self, instance):
        response = super().mod_to_representation(instance)
        response['item_code'] = instance.item.item_code
        response['item_name'] = instance.item.item_name
        response['group_code'] = instance.item.group_code
        response['work_order_no'] = instance.work_order.work_order_no if instance.work_order_id else None
        response['is_reversed'] = instance.is_reversed
        return response


class IssueStockBaseSerializer(serializers.Serializer):
    qty = serializers.DecimalField(max_digits=12, decimal_places=3)
    reason = serializers.CharField(required=False, allow_blank=True, default='')
    work_order = serializers.UUIDField(required=False, allow_null=True)


class AddStockBaseSerializer(serializers.Serializer):
    qty = serializers.DecimalField(max_digits=12, decimal_places=3)
    reason = serializers.CharField(required=False, allow_blank=True, default='')


class AdjustStockBaseSerializer(serializers.Serializer):
    new_qty = serializers.DecimalField(max_digits=12, decimal_places=3)
    reason = serializers.CharField(required=False, allow_blank=True, default='')


class MovementQueryBaseSerializer(serializers.Serializer):
    work_order = serializers.UUIDField(required=False)
    item = serializers.UUIDField(required=False)
    limit = serializers.IntegerField(required=False, min_value=1)
