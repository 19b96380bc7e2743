from rest_framework import serializers

from configurations.base_features.serializers.base_serializer import BaseSerializer
from work_orders.korv import calculate_total_korv, minutes_to_korv
from work_orders.exceptions import WorkOrderLockedError
from work_orders.lifecycle import LOCKED_FIELDS, STAGES, has_lifecycle_progress
from work_orders.models import *
from work_orders.services import work_order_service

LIFECYCLE_FIELDS = (
    'status', 'version', 'rejected_from', 'created_by',
    *[name for stage in STAGES for name in (stage.at_field, stage.by_field)],
    'quality_accepted_at', 'quality_accepted_by', 'quality_notes', 'quality_partial_qty',
    'quality_rejected_at', 'quality_rejected_by',
)


class WorkOrderBaseSerializer(BaseSerializer):
    class Meta:
        model = WorkOrder
        fields = '__all__'
        read_only_fields = ('id', 'created_at', 'updated_at', 'total_korv', 'total_price', *LIFECYCLE_FIELDS)

    def validate(self, attrs):
        attrs = super().validate(attrs)
        if attrs.get('korv_per_unit') is None and attrs.get('cycle_time') is not None:
            attrs['korv_per_unit'] = minutes_to_korv(attrs['cycle_time'])
        return attrs

    @staticmethod
    def _fill_totals(instance):
        if instance.korv_per_unit is not None:
            instance.total_korv = calculate_total_korv(instance.korv_per_unit, instance.quantity)
        if instance.price_per_unit is not None:
            instance.total_price = instance.price_per_unit * instance.quantity

    def mod_create(self, validated_data):
        instance = WorkOrder(created_by=self.get_performer_name(), **validated_data)
        self._fill_totals(instance)
        instance.save()
        return instance

    def mod_update(self, instance, validated_data):
        changed = [name for name in LOCKED_FIELDS
                   if name in validated_data and validated_data[name] != getattr(instance, name)]
        if changed and has_lifecycle_progress(instance):
            # the version check below refuses a stage completed after this read
            raise WorkOrderLockedError(instance.work_order_no, changed)
        for name, value in validated_data.items():
            setattr(instance, name, value)
        self._fill_totals(instance)
        WorkOrder.objects.compare_and_swap(instance, [*validated_data.keys(), 'total_korv', 'total_price'])
        return instance

    def mod_to_representation(self, instance):
        response = super().mod_to_representation(instance)
        response['rejected_from_no'] = instance.rejected_from.work_order_no if instance.rejected_from_id else None
        response['is_open'] = instance.is_open
        response['stages'] = work_order_service.get_stage_timeline(instance, self.get_user())
        return response


class WorkOrderLogBaseSerializer(BaseSerializer):
    class Meta:
        model = WorkOrderLog
        fields = '__all__'

    def mod_to_representation(self, instance):
        response = super().mod_to_representation(instance)
        response['work_order_no'] = instance.work_order.work_order_no
        return response


class CompleteStageBaseSerializer(serializers.Serializer):
    stage = serializers.CharField(max_length=50)
    note = serializers.CharField(required=False, allow_blank=True, default='')
    expected_version = serializers.IntegerField(required=False, min_value=1)


class AcceptQualityBaseSerializer(serializers.Serializer):
    note = serializers.CharField(required=False, allow_blank=True, default='')
    partial_qty = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    expected_version = serializers.IntegerField(required=False, min_value=1)


class RejectQualityBaseSerializer(serializers.Serializer):
    note = serializers.CharField(required=False, allow_blank=True, default='')
    rejected_qty = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    expected_version = serializers.IntegerField(required=False, min_value=1)


class OpenWorkOrderQueryBaseSerializer(serializers.Serializer):
    search = serializers.CharField(required=False, allow_blank=True, default='')
    limit = serializers.IntegerField(required=False, min_value=1)
