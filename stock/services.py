"""
Stock Ledger Service Layer

Every change to an item's on-hand quantity is recorded as a StockMovement, and
the quantity write plus the movement insert commit in a single transaction.

Core Principles:
- quantity always equals the sum of the item's movement deltas
- ISSUE never drives an item below zero
- only ISSUE movements are reversible, and only once; a reversal appends a
  compensating ADD instead of editing history
- item rows are written with a version compare-and-swap
"""

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from django.conf import settings
from django.db import models, transaction
from django.db.models import F, Sum
from django.utils import timezone

from configurations.base_features.exceptions.base_exceptions import LocalBaseException
from configurations.base_features.helpers.text_helpers import performer_name
from stock.exceptions import InsufficientQuantityError, InvalidQuantityError, NotReversibleError
from stock.models import StockItem, StockMovement
from work_orders.models import WorkOrder

logger = logging.getLogger(__name__)

OPENING_BALANCE_REASON = "Opening balance"


@dataclass
class LedgerResult:
    """Item after the operation and the movement that recorded it"""
    item: StockItem
    movement: Optional[StockMovement]


@dataclass
class ReversalResult:
    restored: StockItem
    compensating: StockMovement
    original: StockMovement


@dataclass
class LedgerBalance:
    item_id: str
    item_code: str
    stored_quantity: Decimal
    ledger_quantity: Decimal
    movement_count: int

    @property
    def drift(self) -> Decimal:
        return self.stored_quantity - self.ledger_quantity

    @property
    def is_consistent(self) -> bool:
        return self.drift == 0


class StockLedgerService:
    """
    Core service for stock items and their movement ledger
    """

    @staticmethod
    def _to_decimal(qty) -> Decimal:
        if isinstance(qty, bool):
            raise InvalidQuantityError(qty)
        try:
            value = Decimal(str(qty).strip())
        except (InvalidOperation, TypeError, ValueError):
            raise InvalidQuantityError(qty)
        if not value.is_finite():
            raise InvalidQuantityError(qty)
        return value

    def _positive(self, qty) -> Decimal:
        value = self._to_decimal(qty)
        if value <= 0:
            raise InvalidQuantityError(qty, debug_message="quantity must be greater than zero")
        return value

    @staticmethod
    def _lock_item(item_id) -> StockItem:
        return StockItem.objects.get_for_update_or_404(id=item_id)

    @staticmethod
    def _record(item, delta, action, reason, performer, work_order=None, reversal_of=None) -> StockMovement:
        """Write the new quantity and append the movement. Caller holds the transaction."""
        item.quantity = item.quantity + delta
        item.last_updated = timezone.now()
        StockItem.objects.compare_and_swap(item, ['quantity', 'last_updated'])
        return StockMovement.objects.create(
            item=item,
            action=action,
            qty=delta,
            reason=reason or '',
            target_type=StockMovement.TargetType.WORK_ORDER if work_order else StockMovement.TargetType.OTHER,
            work_order=work_order,
            performed_by=performer_name(performer),
            reversal_of=reversal_of,
        )

    def create_stock_item(self, item_code, item_name, group_code=StockItem.GroupCode.RAW, opening_qty=0, performer=None, **fields) -> LedgerResult:
        """Create an item; a non-zero opening quantity is booked as an ADD movement."""
        opening = self._to_decimal(opening_qty)
        if opening < 0:
            raise InvalidQuantityError(opening_qty, debug_message="opening quantity cannot be negative")

        with transaction.atomic():
            item = StockItem.objects.create(
                item_code=item_code,
                item_name=item_name,
                group_code=group_code,
                last_updated=timezone.now(),
                **fields,
            )
            movement = None
            if opening > 0:
                movement = self._record(item, opening, StockMovement.Action.ADD, OPENING_BALANCE_REASON, performer)

        logger.info("Created stock item %s with opening quantity %s", item.item_code, opening)
        return LedgerResult(item=item, movement=movement)

    def issue_stock(self, item_id, qty, reason='', work_order_id=None, performer=None) -> LedgerResult:
        """
        Issue stock, optionally against a work order.

        Raises:
            InvalidQuantityError: qty is not a positive number
            InsufficientQuantityError: the item holds less than qty
        """
        amount = self._positive(qty)
        try:
            with transaction.atomic():
                item = self._lock_item(item_id)
                work_order = None
                if work_order_id:
                    work_order = WorkOrder.objects.get_object_or_404(raise_exception=True, id=work_order_id)
                if item.quantity - amount < 0:
                    raise InsufficientQuantityError(item.item_code, amount, item.quantity)
                movement = self._record(item, -amount, StockMovement.Action.ISSUE, reason, performer, work_order=work_order)
        except LocalBaseException as e:
            e.log(level="warning")
            raise

        logger.info(
            "Issued %s of %s%s, on hand %s",
            amount, item.item_code, f" to {work_order.work_order_no}" if work_order else "", item.quantity,
        )
        return LedgerResult(item=item, movement=movement)

    def add_stock(self, item_id, qty, reason='', performer=None) -> LedgerResult:
        amount = self._positive(qty)
        with transaction.atomic():
            item = self._lock_item(item_id)
            movement = self._record(item, amount, StockMovement.Action.ADD, reason, performer)

        logger.info("Added %s to %s, on hand %s", amount, item.item_code, item.quantity)
        return LedgerResult(item=item, movement=movement)

    def adjust_stock(self, item_id, new_qty, reason='', performer=None) -> LedgerResult:
        """Set an absolute count; the ADJUST movement carries the signed difference."""
        target = self._to_decimal(new_qty)
        if target < 0:
            raise InvalidQuantityError(new_qty, debug_message="stock cannot be adjusted below zero")

        with transaction.atomic():
            item = self._lock_item(item_id)
            delta = target - item.quantity
            movement = self._record(item, delta, StockMovement.Action.ADJUST, reason, performer)

        logger.info("Adjusted %s by %s to %s", item.item_code, delta, item.quantity)
        return LedgerResult(item=item, movement=movement)

    def reverse_issue_movement(self, movement_id, performer=None) -> ReversalResult:
        """
        Undo an ISSUE: restore the quantity, append a compensating ADD linked
        through `reversal_of`, and stamp the original as reversed.
        """
        try:
            with transaction.atomic():
                original = StockMovement.objects.get_for_update_or_404(id=movement_id)
                if original.action != StockMovement.Action.ISSUE:
                    raise NotReversibleError(original.id, "only ISSUE movements can be reversed")
                if original.reversed_at is not None:
                    raise NotReversibleError(original.id, "movement already reversed")

                item = self._lock_item(original.item_id)
                compensating = self._record(
                    item,
                    -original.qty,
                    StockMovement.Action.ADD,
                    f"Reversal of ISSUE {original.id}",
                    performer,
                    reversal_of=original,
                )

                reversed_at = timezone.now()
                reversed_by = performer_name(performer)
                stamped = StockMovement.objects.filter(pk=original.pk, reversed_at__isnull=True).update(
                    reversed_at=reversed_at, reversed_by=reversed_by, updated_at=reversed_at,
                )
                if stamped != 1:
                    raise NotReversibleError(original.id, "movement already reversed")
                original.reversed_at = reversed_at
                original.reversed_by = reversed_by
        except LocalBaseException as e:
            e.log(level="warning")
            raise

        logger.info("Reversed ISSUE %s of %s, on hand %s", original.id, item.item_code, item.quantity)
        return ReversalResult(restored=item, compensating=compensating, original=original)

    def list_stock_movements(self, work_order_id=None, item_id=None, limit=None) -> List[StockMovement]:
        """Newest-first movements with their item and work order, capped at `limit`."""
        limit = min(limit or settings.STOCK_MOVEMENT_LIST_LIMIT, settings.STOCK_MOVEMENT_LIST_MAX)
        queryset = StockMovement.objects.select_related('item', 'work_order')
        if work_order_id:
            queryset = queryset.filter(work_order__id=work_order_id)
        if item_id:
            queryset = queryset.filter(item__id=item_id)
        return list(queryset.order_by('-created_at')[:limit])

    def list_stock(self, group_code=None, search='', limit=None) -> List[StockItem]:
        """Items, most recently moved first, filtered by group and a free-text term."""
        limit = limit or settings.STOCK_LIST_LIMIT
        queryset = StockItem.objects.all()
        if group_code:
            queryset = queryset.filter(group_code=group_code)
        term = (search or '').strip()
        if term:
            queryset = queryset.filter(
                models.Q(item_name__icontains=term)
                | models.Q(item_code__icontains=term)
                | models.Q(location__icontains=term)
                | models.Q(status__icontains=term)
                | models.Q(machine__icontains=term)
            )
        queryset = queryset.order_by(F('last_updated').desc(nulls_last=True), 'item_code')
        return list(queryset[:limit])

    def ledger_balance(self, item_id) -> LedgerBalance:
        item = StockItem.objects.get_object_or_404(raise_exception=True, id=item_id)
        totals = item.movements.aggregate(total=Sum('qty'), count=models.Count('id'))
        return LedgerBalance(
            item_id=str(item.id),
            item_code=item.item_code,
            stored_quantity=item.quantity,
            ledger_quantity=totals['total'] or Decimal('0'),
            movement_count=totals['count'],
        )

    def reconcile(self, item_id, performer=None) -> LedgerBalance:
        """Reset a drifted quantity to the ledger total. The ledger is never edited."""
        with transaction.atomic():
            item = self._lock_item(item_id)
            balance = self.ledger_balance(item.id)
            if not balance.is_consistent:
                logger.warning(
                    "Reconciling %s: stored %s, ledger %s (by %s)",
                    item.item_code, balance.stored_quantity, balance.ledger_quantity, performer_name(performer),
                )
                item.quantity = balance.ledger_quantity
                item.last_updated = timezone.now()
                StockItem.objects.compare_and_swap(item, ['quantity', 'last_updated'])
        return balance


stock_ledger = StockLedgerService()
