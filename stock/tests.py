"""
Tests for the stock ledger

Tests cover:
- Issue / add / adjust keep quantity equal to the movement total
- Refused operations leave the item and the ledger untouched
- One-time reversal of ISSUE movements
- Version conflicts and rollback on the item row
- Drift detection and reconciliation
- Movement listing and HTTP endpoints
"""

from decimal import Decimal
from io import StringIO
from unittest.mock import patch

from django.core.management import call_command
from django.db import DatabaseError
from django.db.models import Sum
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from configurations.base_features.exceptions.base_exceptions import ConcurrencyConflictException, LocalBaseException
from factory_users.models import FactoryUser
from stock.exceptions import InsufficientQuantityError, InvalidQuantityError, NotReversibleError
from stock.models import StockItem, StockMovement
from stock.services import OPENING_BALANCE_REASON, stock_ledger
from work_orders.models import WorkOrder


class StockLedgerTestCase(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.manager = FactoryUser.objects.create_user(username="stores", password="testpass123", role="manager")
        cls.work_order = WorkOrder.objects.create(work_order_no="WO-100", quantity=50, tool_code="T-01")

    def setUp(self):
        self.item = stock_ledger.create_stock_item(
            "RM-001", "Carbide rod 10mm", opening_qty=100, performer=self.manager, location="Rack A",
        ).item

    def ledger_total(self, item):
        return item.movements.aggregate(total=Sum('qty'))['total'] or Decimal('0')

    def assert_ledger_consistent(self, item):
        item.refresh_from_db()
        self.assertEqual(item.quantity, self.ledger_total(item))


class StockOperationTests(StockLedgerTestCase):

    def test_opening_quantity_is_booked_as_movement(self):
        movement = self.item.movements.get()
        self.assertEqual(movement.action, StockMovement.Action.ADD)
        self.assertEqual(movement.qty, Decimal('100'))
        self.assertEqual(movement.reason, OPENING_BALANCE_REASON)
        self.assertEqual(movement.performed_by, "stores")
        self.assertEqual(self.item.quantity, Decimal('100'))

    def test_item_without_opening_quantity_has_no_movements(self):
        result = stock_ledger.create_stock_item("CN-001", "Coolant", group_code=StockItem.GroupCode.CONS)
        self.assertIsNone(result.movement)
        self.assertEqual(result.item.quantity, 0)
        self.assertFalse(result.item.movements.exists())

    def test_issue_against_work_order_then_reverse(self):
        issued = stock_ledger.issue_stock(
            self.item.id, 30, reason="Blanks", work_order_id=self.work_order.id, performer=self.manager)

        self.assertEqual(issued.item.quantity, Decimal('70'))
        self.assertEqual(issued.movement.action, StockMovement.Action.ISSUE)
        self.assertEqual(issued.movement.qty, Decimal('-30'))
        self.assertEqual(issued.movement.target_type, StockMovement.TargetType.WORK_ORDER)
        self.assertEqual(issued.movement.work_order, self.work_order)

        reversal = stock_ledger.reverse_issue_movement(issued.movement.id, performer=self.manager)

        self.assertEqual(reversal.restored.quantity, Decimal('100'))
        self.assertEqual(reversal.compensating.action, StockMovement.Action.ADD)
        self.assertEqual(reversal.compensating.qty, Decimal('30'))
        self.assertEqual(reversal.compensating.reversal_of_id, issued.movement.id)
        original = StockMovement.objects.get(pk=issued.movement.pk)
        self.assertTrue(original.is_reversed)
        self.assertEqual(original.reversed_by, "stores")
        self.assertEqual(original.qty, Decimal('-30'))
        self.assert_ledger_consistent(self.item)

    def test_issue_more_than_on_hand_is_refused(self):
        with self.assertRaises(InsufficientQuantityError) as ctx:
            stock_ledger.issue_stock(self.item.id, 101)
        self.assertEqual(ctx.exception.status_code, 400)
        self.assertEqual(ctx.exception.available, Decimal('100'))

        self.item.refresh_from_db()
        self.assertEqual(self.item.quantity, Decimal('100'))
        self.assertEqual(self.item.version, 2)
        self.assertEqual(self.item.movements.count(), 1)

    def test_issue_everything_leaves_zero(self):
        result = stock_ledger.issue_stock(self.item.id, "100")
        self.assertEqual(result.item.quantity, Decimal('0'))

    def test_invalid_quantities_are_refused(self):
        for qty in (0, -5, "abc", "NaN", None, True):
            with self.assertRaises(InvalidQuantityError):
                stock_ledger.issue_stock(self.item.id, qty)
            with self.assertRaises(InvalidQuantityError):
                stock_ledger.add_stock(self.item.id, qty)
        self.assertEqual(self.item.movements.count(), 1)

    def test_fractional_quantities(self):
        stock_ledger.issue_stock(self.item.id, "0.250")
        stock_ledger.add_stock(self.item.id, Decimal("1.5"))
        self.item.refresh_from_db()
        self.assertEqual(self.item.quantity, Decimal('101.250'))

    def test_adjust_records_difference(self):
        result = stock_ledger.adjust_stock(self.item.id, 84, reason="Cycle count")
        self.assertEqual(result.item.quantity, Decimal('84'))
        self.assertEqual(result.movement.action, StockMovement.Action.ADJUST)
        self.assertEqual(result.movement.qty, Decimal('-16'))

        result = stock_ledger.adjust_stock(self.item.id, 90)
        self.assertEqual(result.movement.qty, Decimal('6'))
        self.assert_ledger_consistent(self.item)

    def test_adjust_below_zero_is_refused(self):
        with self.assertRaises(InvalidQuantityError):
            stock_ledger.adjust_stock(self.item.id, -1)
        self.item.refresh_from_db()
        self.assertEqual(self.item.quantity, Decimal('100'))

    def test_issue_to_unknown_work_order_is_refused(self):
        with self.assertRaises(LocalBaseException) as ctx:
            stock_ledger.issue_stock(self.item.id, 5, work_order_id="00000000-0000-0000-0000-000000000000")
        self.assertEqual(ctx.exception.status_code, 404)
        self.assertEqual(self.item.movements.count(), 1)

    def test_unknown_item_is_not_found(self):
        with self.assertRaises(LocalBaseException) as ctx:
            stock_ledger.add_stock("00000000-0000-0000-0000-000000000000", 5)
        self.assertEqual(ctx.exception.code, "not_found")

    def test_quantity_matches_ledger_after_mixed_operations(self):
        stock_ledger.issue_stock(self.item.id, 12, work_order_id=self.work_order.id)
        stock_ledger.add_stock(self.item.id, 40)
        issued = stock_ledger.issue_stock(self.item.id, "7.5")
        stock_ledger.adjust_stock(self.item.id, 110)
        stock_ledger.reverse_issue_movement(issued.movement.id)
        stock_ledger.issue_stock(self.item.id, 3)

        self.assert_ledger_consistent(self.item)
        self.assertEqual(self.item.quantity, Decimal('114.5'))
        self.assertEqual(self.item.movements.count(), 7)

    def test_every_write_bumps_version(self):
        start = self.item.version
        stock_ledger.add_stock(self.item.id, 1)
        stock_ledger.issue_stock(self.item.id, 1)
        self.item.refresh_from_db()
        self.assertEqual(self.item.version, start + 2)

    def test_stale_item_write_loses(self):
        first_reader = StockItem.objects.get(pk=self.item.pk)
        second_reader = StockItem.objects.get(pk=self.item.pk)

        first_reader.location = "Rack B"
        StockItem.objects.compare_and_swap(first_reader, ['location'])

        second_reader.quantity = Decimal('40')
        with self.assertRaises(ConcurrencyConflictException) as ctx:
            StockItem.objects.compare_and_swap(second_reader, ['quantity'])
        self.assertEqual(ctx.exception.status_code, 409)

        self.item.refresh_from_db()
        self.assertEqual(self.item.quantity, Decimal('100'))
        self.assertEqual(self.item.location, "Rack B")
        self.assert_ledger_consistent(self.item)

    def test_issue_losing_the_race_leaves_item_and_ledger_untouched(self):
        conflict = ConcurrencyConflictException(model="StockItem", pk=self.item.pk)
        with patch.object(StockItem.objects, 'compare_and_swap', side_effect=conflict):
            with self.assertRaises(ConcurrencyConflictException):
                stock_ledger.issue_stock(self.item.id, 30, work_order_id=self.work_order.id)

        self.item.refresh_from_db()
        self.assertEqual(self.item.quantity, Decimal('100'))
        self.assertEqual(self.item.movements.count(), 1)

    def test_failed_movement_insert_rolls_back_quantity(self):
        self.item.refresh_from_db()
        start = self.item.version
        with patch.object(StockMovement.objects, 'create', side_effect=DatabaseError("insert failed")):
            with self.assertRaises(DatabaseError):
                stock_ledger.issue_stock(self.item.id, 30)

        self.item.refresh_from_db()
        self.assertEqual(self.item.quantity, Decimal('100'))
        self.assertEqual(self.item.version, start)
        self.assertEqual(self.item.movements.count(), 1)
        self.assert_ledger_consistent(self.item)


class ReversalTests(StockLedgerTestCase):

    def test_second_reversal_is_refused(self):
        issued = stock_ledger.issue_stock(self.item.id, 30)
        stock_ledger.reverse_issue_movement(issued.movement.id)

        with self.assertRaises(NotReversibleError) as ctx:
            stock_ledger.reverse_issue_movement(issued.movement.id)
        self.assertEqual(ctx.exception.status_code, 409)

        self.item.refresh_from_db()
        self.assertEqual(self.item.quantity, Decimal('100'))
        self.assertEqual(StockMovement.objects.filter(reversal_of=issued.movement).count(), 1)

    def test_only_issue_movements_are_reversible(self):
        added = stock_ledger.add_stock(self.item.id, 10)
        adjusted = stock_ledger.adjust_stock(self.item.id, 50)
        for movement in (added.movement, adjusted.movement):
            with self.assertRaises(NotReversibleError):
                stock_ledger.reverse_issue_movement(movement.id)
        self.item.refresh_from_db()
        self.assertEqual(self.item.quantity, Decimal('50'))

    def test_movements_cannot_be_edited(self):
        movement = self.item.movements.get()
        movement.qty = Decimal('5')
        with self.assertRaises(ValueError):
            movement.save()
        self.assertEqual(StockMovement.objects.get(pk=movement.pk).qty, Decimal('100'))


class LedgerBalanceTests(StockLedgerTestCase):

    def test_consistent_item(self):
        stock_ledger.issue_stock(self.item.id, 10)
        balance = stock_ledger.ledger_balance(self.item.id)
        self.assertTrue(balance.is_consistent)
        self.assertEqual(balance.ledger_quantity, Decimal('90'))
        self.assertEqual(balance.movement_count, 2)

    def test_reconcile_resets_drifted_quantity(self):
        StockItem.objects.filter(pk=self.item.pk).update(quantity=Decimal('80'))

        balance = stock_ledger.ledger_balance(self.item.id)
        self.assertEqual(balance.drift, Decimal('-20'))
        self.assertFalse(balance.is_consistent)

        stock_ledger.reconcile(self.item.id, performer=self.manager)
        self.item.refresh_from_db()
        self.assertEqual(self.item.quantity, Decimal('100'))
        self.assertEqual(self.item.movements.count(), 1)


class ListingTests(StockLedgerTestCase):

    def test_movements_filtered_by_work_order(self):
        other = stock_ledger.create_stock_item("RM-002", "Steel blank", opening_qty=20).item
        stock_ledger.issue_stock(self.item.id, 5, work_order_id=self.work_order.id)
        stock_ledger.issue_stock(other.id, 2, work_order_id=self.work_order.id)
        stock_ledger.issue_stock(other.id, 1)

        movements = stock_ledger.list_stock_movements(work_order_id=self.work_order.id)
        self.assertEqual(len(movements), 2)
        self.assertEqual({m.item.item_code for m in movements}, {"RM-001", "RM-002"})

        movements = stock_ledger.list_stock_movements(item_id=other.id)
        self.assertEqual(len(movements), 3)
        self.assertEqual(len(stock_ledger.list_stock_movements(limit=2)), 2)

    def test_list_stock_by_group_and_search(self):
        stock_ledger.create_stock_item("CN-010", "Cutting oil", group_code=StockItem.GroupCode.CONS)
        codes = [item.item_code for item in stock_ledger.list_stock(group_code=StockItem.GroupCode.CONS)]
        self.assertEqual(codes, ["CN-010"])
        codes = [item.item_code for item in stock_ledger.list_stock(search="rack a")]
        self.assertEqual(codes, ["RM-001"])


class StockApiTests(APITestCase):

    def setUp(self):
        self.manager = FactoryUser.objects.create_user(username="stores", password="testpass123", role="manager")
        self.operator = FactoryUser.objects.create_user(username="op", password="testpass123", role="operator")
        self.work_order = WorkOrder.objects.create(work_order_no="WO-100", quantity=50)
        self.item = stock_ledger.create_stock_item("RM-001", "Carbide rod", opening_qty=100).item
        self.client.force_authenticate(user=self.manager)

    def test_create_item_with_opening_quantity(self):
        response = self.client.post(reverse('StockItem'), {
            'item_code': 'RM-900',
            'item_name': 'HSS blank',
            'opening_qty': '25',
            'quantity': '9999',
        })
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        item = StockItem.objects.get(item_code='RM-900')
        self.assertEqual(item.quantity, Decimal('25'))
        self.assertEqual(item.movements.get().performed_by, 'stores')

    def test_issue_endpoint(self):
        response = self.client.post(
            reverse('StockIssue', kwargs={'pk': self.item.pk}),
            {'qty': '30', 'work_order': str(self.work_order.pk), 'reason': 'Blanks'},
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Decimal(response.data['data']['item']['quantity']), Decimal('70'))
        self.assertEqual(response.data['data']['movement']['work_order_no'], 'WO-100')

    def test_insufficient_issue_returns_error(self):
        response = self.client.post(reverse('StockIssue', kwargs={'pk': self.item.pk}), {'qty': '500'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['errors']['code'], 'insufficient_quantity')

    def test_operator_can_issue_but_not_adjust_or_reverse(self):
        self.client.force_authenticate(user=self.operator)
        response = self.client.post(reverse('StockIssue', kwargs={'pk': self.item.pk}), {'qty': '1'})
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        movement_id = response.data['data']['movement']['id']

        response = self.client.post(reverse('StockAdjust', kwargs={'pk': self.item.pk}), {'new_qty': '1'})
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        response = self.client.post(reverse('StockMovementReverse', kwargs={'pk': movement_id}))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_reverse_endpoint(self):
        issued = stock_ledger.issue_stock(self.item.id, 10)
        url = reverse('StockMovementReverse', kwargs={'pk': issued.movement.pk})

        response = self.client.post(url)
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Decimal(response.data['data']['item']['quantity']), Decimal('100'))
        self.assertTrue(response.data['data']['original']['is_reversed'])

        response = self.client.post(url)
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['errors']['code'], 'not_reversible')

    def test_movement_list_by_work_order(self):
        stock_ledger.issue_stock(self.item.id, 4, work_order_id=self.work_order.id)
        response = self.client.get(reverse('StockMovement'), {'work_order': str(self.work_order.pk)})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['meta_data']['total'], 1)
        self.assertEqual(response.data['data'][0]['action'], StockMovement.Action.ISSUE)

    def test_quantity_cannot_be_edited_directly(self):
        response = self.client.patch(
            reverse('StockItemDetails', kwargs={'pk': self.item.pk}),
            {'quantity': '1', 'location': 'Rack B'},
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.item.refresh_from_db()
        self.assertEqual(self.item.quantity, Decimal('100'))
        self.assertEqual(self.item.location, 'Rack B')

    def test_item_with_movements_cannot_be_deleted(self):
        response = self.client.delete(reverse('StockItemDetails', kwargs={'pk': self.item.pk}))
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertTrue(StockItem.objects.filter(pk=self.item.pk).exists())

    def test_reconcile_endpoint_reports_drift(self):
        StockItem.objects.filter(pk=self.item.pk).update(quantity=Decimal('90'))
        url = reverse('StockReconcile', kwargs={'pk': self.item.pk})
        response = self.client.get(url)
        self.assertEqual(response.data['data']['drift'], Decimal('-10'))

        response = self.client.post(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.item.refresh_from_db()
        self.assertEqual(self.item.quantity, Decimal('100'))


class ReconcileCommandTests(StockLedgerTestCase):

    def test_reports_and_fixes_drift(self):
        StockItem.objects.filter(pk=self.item.pk).update(quantity=Decimal('7'))

        out = StringIO()
        call_command('reconcile_stock', stdout=out)
        self.assertIn('RM-001', out.getvalue())
        self.item.refresh_from_db()
        self.assertEqual(self.item.quantity, Decimal('7'))

        call_command('reconcile_stock', '--fix', stdout=StringIO())
        self.item.refresh_from_db()
        self.assertEqual(self.item.quantity, Decimal('100'))

    def test_clean_ledger(self):
        out = StringIO()
        call_command('reconcile_stock', '--item', 'RM-001', stdout=out)
        self.assertIn('All stock items match their ledger', out.getvalue())
