"""
Work order lifecycle service.

Every mutation runs inside one transaction: the row is locked, validated
against the stage table, written with a version compare-and-swap, and an
audit row is appended. A refused or conflicting operation leaves nothing behind.
"""
import logging
from dataclasses import dataclass
from typing import List

from django.conf import settings
from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from configurations.base_features.exceptions.base_exceptions import (
    ConcurrencyConflictException,
    InvalidQuantityError,
    LocalBaseException,
)
from configurations.base_features.helpers.text_helpers import performer_name
from work_orders.exceptions import StageNotAuthorizedError, WorkOrderClosedError
from work_orders.korv import calculate_total_korv
from work_orders.lifecycle import (
    QUALITY_ROLES,
    TERMINAL_STATUSES,
    LEGACY_CLOSED_STATUSES,
    WorkOrderStatus,
    active_stages,
    can_complete,
    derive_status,
    is_work_order_open,
    plan_stage_completion,
)
from work_orders.models import WorkOrder, WorkOrderLog

logger = logging.getLogger(__name__)

# fields a rejection order inherits from the order it was split from
REJECTION_COPY_FIELDS = (
    'drawing_no', 'customer_name', 'po_number', 'tool_code', 'tool_description',
    'price_per_unit', 'machine', 'cycle_time', 'korv_per_unit',
    'coating_required', 'coating_type', 'marking_required', 'created_by',
)
DEFAULT_REJECTION_REASON = 'Quality issue'


@dataclass
class StageCompletionResult:
    work_order: WorkOrder
    completed_stages: List[str]
    status: str


@dataclass
class RejectionResult:
    work_order: WorkOrder
    rejected_work_order: WorkOrder
    rejected_qty: int
    remaining_qty: int


class WorkOrderService:
    """Stage completion and quality decisions for work orders"""

    @staticmethod
    def _lock(work_order_id, expected_version=None) -> WorkOrder:
        work_order = WorkOrder.objects.get_for_update_or_404(id=work_order_id)
        if expected_version is not None and int(expected_version) != work_order.version:
            raise ConcurrencyConflictException(
                model='WorkOrder', pk=work_order.pk, expected_version=expected_version)
        return work_order

    @staticmethod
    def _ensure_quality_access(work_order, performer, action):
        if not is_work_order_open(work_order.status):
            raise WorkOrderClosedError(work_order.work_order_no, work_order.status)
        role = getattr(performer, 'role', None)
        if role not in QUALITY_ROLES:
            raise StageNotAuthorizedError(action, role)

    @staticmethod
    def _log(work_order, log_type, performer, description='', stage='', quantity=None):
        return WorkOrderLog.objects.create(
            work_order=work_order,
            performed_by=performer_name(performer),
            log_type=log_type,
            stage=stage,
            quantity=quantity,
            description=description,
        )

    @staticmethod
    def _recalculate_totals(work_order):
        if work_order.korv_per_unit is not None:
            work_order.total_korv = calculate_total_korv(work_order.korv_per_unit, work_order.quantity)
        if work_order.price_per_unit is not None:
            work_order.total_price = work_order.price_per_unit * work_order.quantity

    def complete_stage(self, work_order_id, stage_key, performer, note=None, expected_version=None) -> StageCompletionResult:
        """
        Complete one stage of a work order.

        Args:
            work_order_id: WorkOrder UUID
            stage_key: key from the stage table, e.g. 'marking_completed'
            performer: the FactoryUser completing the stage, its role is checked
            note: optional free text stored in the stage's notes column
            expected_version: version the caller last saw, if it wants to detect edits

        Returns:
            StageCompletionResult with the refreshed work order
        """
        try:
            with transaction.atomic():
                work_order = self._lock(work_order_id, expected_version)
                transition = plan_stage_completion(work_order, stage_key, getattr(performer, 'role', None))

                now = timezone.now()
                by = performer_name(performer)
                changed = ['status']
                for stage in transition.completed_stages:
                    setattr(work_order, stage.at_field, now)
                    setattr(work_order, stage.by_field, by)
                    changed += [stage.at_field, stage.by_field]
                if note and transition.stage.notes_field:
                    existing = getattr(work_order, transition.stage.notes_field)
                    setattr(work_order, transition.stage.notes_field, f"{existing}\n{note}" if existing else note)
                    changed.append(transition.stage.notes_field)
                work_order.status = transition.next_status

                WorkOrder.objects.compare_and_swap(work_order, changed)
                completed = [stage.key for stage in transition.completed_stages]
                self._log(
                    work_order, WorkOrderLog.LogTypeChoices.STAGE_COMPLETED, performer,
                    description=note or f"{transition.stage.label} completed",
                    stage=transition.stage.key,
                )
        except LocalBaseException as e:
            e.log(level="warning")
            raise

        logger.info(
            "Work order %s: %s completed by %s, status now %s",
            work_order.work_order_no, ", ".join(completed), by, work_order.status,
        )
        return StageCompletionResult(work_order=work_order, completed_stages=completed, status=work_order.status)

    def accept_quality(self, work_order_id, performer, note=None, partial_qty=None, expected_version=None) -> WorkOrder:
        """Record the quality decision. A partial quantity is recorded on the same order."""
        try:
            with transaction.atomic():
                work_order = self._lock(work_order_id, expected_version)
                self._ensure_quality_access(work_order, performer, 'quality')

                if partial_qty is not None:
                    partial_qty = self._validate_quantity(partial_qty, work_order.quantity)
                    work_order.status = WorkOrderStatus.PARTIALLY_ACCEPTED
                    work_order.quality_partial_qty = partial_qty
                else:
                    work_order.status = WorkOrderStatus.QUALITY_DONE
                    work_order.quality_partial_qty = None
                work_order.quality_accepted_at = timezone.now()
                work_order.quality_accepted_by = performer_name(performer)
                work_order.quality_notes = note or ''

                WorkOrder.objects.compare_and_swap(work_order, [
                    'status', 'quality_partial_qty', 'quality_accepted_at', 'quality_accepted_by', 'quality_notes',
                ])
                self._log(
                    work_order, WorkOrderLog.LogTypeChoices.QUALITY_ACCEPTED, performer,
                    description=note or '', quantity=partial_qty or work_order.quantity,
                )
        except LocalBaseException as e:
            e.log(level="warning")
            raise

        logger.info("Work order %s quality accepted (%s)", work_order.work_order_no, work_order.status)
        return work_order

    def reject_quality(self, work_order_id, performer, note=None, rejected_qty=None, expected_version=None) -> RejectionResult:
        """
        Split the rejected units off into a new `<work_order_no>_r` order that
        restarts at planning. The original keeps the remaining units, or is marked
        Rejected when nothing remains. Both rows are written in one transaction.
        """
        try:
            with transaction.atomic():
                work_order = self._lock(work_order_id, expected_version)
                self._ensure_quality_access(work_order, performer, 'quality')

                if rejected_qty is None:
                    rejected_qty = work_order.quantity
                rejected_qty = self._validate_quantity(rejected_qty, work_order.quantity)
                remaining_qty = work_order.quantity - rejected_qty
                reason = note or DEFAULT_REJECTION_REASON

                rejected_work_order = WorkOrder(
                    work_order_no=self._next_rejection_number(work_order.work_order_no),
                    quantity=rejected_qty,
                    status=WorkOrderStatus.PLANNING_REQUIRED,
                    rejected_from=work_order,
                    marking_notes=f"[REJECTED] From WO {work_order.work_order_no}. Reason: {reason}",
                    **{name: getattr(work_order, name) for name in REJECTION_COPY_FIELDS},
                )
                self._recalculate_totals(rejected_work_order)
                rejected_work_order.save()

                work_order.quality_rejected_at = timezone.now()
                work_order.quality_rejected_by = performer_name(performer)
                work_order.quality_notes = note or ''
                changed = ['status', 'quality_rejected_at', 'quality_rejected_by', 'quality_notes']
                if remaining_qty > 0:
                    work_order.quantity = remaining_qty
                    work_order.status = WorkOrderStatus.PLANNING_REQUIRED
                    self._recalculate_totals(work_order)
                    changed += ['quantity', 'total_korv', 'total_price']
                else:
                    work_order.status = WorkOrderStatus.REJECTED
                    work_order.marking_notes = f"Rejected: {reason}"
                    changed.append('marking_notes')

                WorkOrder.objects.compare_and_swap(work_order, changed)
                self._log(
                    work_order, WorkOrderLog.LogTypeChoices.QUALITY_REJECTED, performer,
                    description=f"{rejected_qty} units moved to {rejected_work_order.work_order_no}. Reason: {reason}",
                    quantity=rejected_qty,
                )
        except LocalBaseException as e:
            e.log(level="warning")
            raise

        logger.info(
            "Work order %s rejected %s units into %s, %s remaining",
            work_order.work_order_no, rejected_qty, rejected_work_order.work_order_no, remaining_qty,
        )
        return RejectionResult(
            work_order=work_order,
            rejected_work_order=rejected_work_order,
            rejected_qty=rejected_qty,
            remaining_qty=remaining_qty,
        )

    @staticmethod
    def _validate_quantity(qty, maximum) -> int:
        try:
            value = int(qty)
        except (TypeError, ValueError):
            raise InvalidQuantityError(qty)
        if value != qty and str(value) != str(qty).strip():
            raise InvalidQuantityError(qty)
        if value <= 0 or value > maximum:
            raise InvalidQuantityError(qty, debug_message=f"expected 1..{maximum}")
        return value

    @staticmethod
    def _next_rejection_number(work_order_no) -> str:
        base = f"{work_order_no}_r"
        candidate = base
        suffix = 2
        while WorkOrder.objects.filter(work_order_no=candidate).exists():
            candidate = f"{base}{suffix}"
            suffix += 1
        return candidate

    def get_stage_timeline(self, work_order, user=None) -> List[dict]:
        """The order's filtered stage sequence with completion data and what `user` may do next."""
        role = getattr(user, 'role', None)
        timeline = []
        for stage in active_stages(work_order):
            timeline.append({
                'key': stage.key,
                'label': stage.label,
                'completed': stage.is_complete(work_order),
                'completed_at': getattr(work_order, stage.at_field),
                'completed_by': getattr(work_order, stage.by_field) or None,
                'notes': getattr(work_order, stage.notes_field) if stage.notes_field else None,
                'can_complete': can_complete(work_order, stage, role),
            })
        return timeline

    @staticmethod
    def derive_status(work_order) -> str:
        return derive_status(work_order)

    @staticmethod
    def is_work_order_open(status) -> bool:
        return is_work_order_open(status)

    def list_open_work_orders(self, search='', limit=None) -> List[WorkOrder]:
        """Open orders for pickers (stock issue, planning), newest first."""
        limit = limit or settings.OPEN_WORK_ORDER_LIST_LIMIT
        queryset = WorkOrder.objects.exclude(status__in=TERMINAL_STATUSES)
        for closed in LEGACY_CLOSED_STATUSES:
            queryset = queryset.exclude(status__iexact=closed)
        if search:
            queryset = queryset.filter(
                Q(work_order_no__icontains=search)
                | Q(tool_code__icontains=search)
                | Q(customer_name__icontains=search)
            )
        return list(queryset.order_by('-created_at')[:limit])


work_order_service = WorkOrderService()
