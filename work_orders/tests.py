"""
Tests for the work order lifecycle

Tests cover:
- Stage table: conditional stages, ordering, roles
- Stage completion through the service, including the marking shortcut
- Quality accept / reject with quantity splitting
- Optimistic concurrency on the work order row
- HTTP endpoints
"""

from decimal import Decimal
from unittest.mock import patch

from django.test import SimpleTestCase, TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from configurations.base_features.exceptions.base_exceptions import (
    ConcurrencyConflictException,
    InvalidQuantityError,
    LocalBaseException,
)
from factory_users.models import FactoryUser
from work_orders import korv
from work_orders.exceptions import (
    PreviousStageIncompleteError,
    StageAlreadyCompletedError,
    StageNotApplicableError,
    StageNotAuthorizedError,
    WorkOrderClosedError,
)
from work_orders.lifecycle import (
    WorkOrderStatus,
    active_stages,
    derive_status,
    is_work_order_open,
    plan_stage_completion,
)
from work_orders.models import WorkOrder, WorkOrderLog
from work_orders.services import work_order_service


class WorkOrderTestCase(TestCase):
    """Base test case with one user per role"""

    @classmethod
    def setUpTestData(cls):
        cls.admin = FactoryUser.objects.create_user(username="admin", password="testpass123", role="admin")
        cls.manager = FactoryUser.objects.create_user(username="manager", password="testpass123", role="manager")
        cls.operator = FactoryUser.objects.create_user(username="operator", password="testpass123", role="operator")

    def make_work_order(self, work_order_no="WO-100", quantity=50, **fields):
        return WorkOrder.objects.create(work_order_no=work_order_no, quantity=quantity, tool_code="T-01", **fields)

    def complete(self, work_order, *stage_keys, performer=None):
        for key in stage_keys:
            work_order_service.complete_stage(work_order.id, key, performer or self.manager)
        work_order.refresh_from_db()
        return work_order


class StageTableTests(SimpleTestCase):
    """The filtered sequence and transition table, on unsaved orders"""

    def test_plain_order_skips_conditional_stages(self):
        work_order = WorkOrder(work_order_no="WO-1", quantity=1)
        keys = [stage.key for stage in active_stages(work_order)]
        self.assertEqual(keys, ['factory_planning', 'production_completed', 'ready_for_dispatch', 'dispatched'])

    def test_flags_add_conditional_stages_in_order(self):
        work_order = WorkOrder(work_order_no="WO-1", quantity=1, marking_required=True, coating_required=True)
        keys = [stage.key for stage in active_stages(work_order)]
        self.assertEqual(keys, [
            'factory_planning', 'production_completed', 'marking_completed',
            'sent_to_coating', 'coating_completed', 'ready_for_dispatch', 'dispatched',
        ])

    def test_planning_is_first_and_needs_no_previous_stage(self):
        work_order = WorkOrder(work_order_no="WO-1", quantity=1)
        transition = plan_stage_completion(work_order, 'factory_planning', 'manager')
        self.assertEqual(transition.next_status, WorkOrderStatus.PLANNING_DONE)
        self.assertEqual(transition.also_completes, [])

    def test_skipping_a_stage_is_refused(self):
        work_order = WorkOrder(work_order_no="WO-1", quantity=1)
        with self.assertRaises(PreviousStageIncompleteError):
            plan_stage_completion(work_order, 'production_completed', 'manager')

    def test_conditional_stage_not_applicable_without_flag(self):
        work_order = WorkOrder(work_order_no="WO-1", quantity=1)
        with self.assertRaises(StageNotApplicableError):
            plan_stage_completion(work_order, 'sent_to_coating', 'manager')

    def test_unknown_stage_not_applicable(self):
        work_order = WorkOrder(work_order_no="WO-1", quantity=1)
        with self.assertRaises(StageNotApplicableError):
            plan_stage_completion(work_order, 'painting', 'manager')

    def test_operator_only_allowed_on_marking(self):
        work_order = WorkOrder(work_order_no="WO-1", quantity=1, marking_required=True)
        with self.assertRaises(StageNotAuthorizedError):
            plan_stage_completion(work_order, 'factory_planning', 'operator')
        with self.assertRaises(StageNotAuthorizedError):
            plan_stage_completion(work_order, 'factory_planning', None)

    def test_derive_status_follows_furthest_stage(self):
        work_order = WorkOrder(work_order_no="WO-1", quantity=1)
        self.assertEqual(derive_status(work_order), WorkOrderStatus.PLANNING_REQUIRED)
        self.assertEqual(derive_status(work_order, ['factory_planning']), WorkOrderStatus.PLANNING_DONE)
        self.assertEqual(
            derive_status(work_order, ['factory_planning', 'production_completed']),
            WorkOrderStatus.QUALITY_DONE,
        )

    def test_is_work_order_open(self):
        self.assertTrue(is_work_order_open(WorkOrderStatus.PLANNING_REQUIRED))
        self.assertTrue(is_work_order_open(''))
        self.assertFalse(is_work_order_open(WorkOrderStatus.DISPATCHED))
        self.assertFalse(is_work_order_open(WorkOrderStatus.REJECTED))
        self.assertFalse(is_work_order_open('Closed'))
        self.assertFalse(is_work_order_open('released'))


class StageCompletionTests(WorkOrderTestCase):

    def test_complete_stage_records_timestamp_performer_and_note(self):
        work_order = self.make_work_order()
        result = work_order_service.complete_stage(work_order.id, 'factory_planning', self.manager, note="Machine 3")

        work_order.refresh_from_db()
        self.assertIsNotNone(work_order.factory_planning_at)
        self.assertEqual(work_order.factory_planning_by, "manager")
        self.assertEqual(work_order.factory_planning_notes, "Machine 3")
        self.assertEqual(work_order.status, WorkOrderStatus.PLANNING_DONE)
        self.assertEqual(result.completed_stages, ['factory_planning'])
        self.assertEqual(work_order.version, 2)
        self.assertTrue(WorkOrderLog.objects.filter(
            work_order=work_order,
            log_type=WorkOrderLog.LogTypeChoices.STAGE_COMPLETED,
            stage='factory_planning',
        ).exists())

    def test_production_moves_status_to_quality_done(self):
        work_order = self.complete(self.make_work_order(), 'factory_planning', 'production_completed')
        self.assertEqual(work_order.status, WorkOrderStatus.QUALITY_DONE)

    def test_marking_auto_completes_ready_for_dispatch(self):
        work_order = self.make_work_order("WO-100", 50, marking_required=True, coating_required=False)
        self.complete(work_order, 'factory_planning', 'production_completed')

        result = work_order_service.complete_stage(work_order.id, 'marking_completed', self.operator)

        work_order.refresh_from_db()
        self.assertEqual(result.completed_stages, ['marking_completed', 'ready_for_dispatch'])
        self.assertIsNotNone(work_order.ready_for_dispatch_at)
        self.assertEqual(work_order.ready_for_dispatch_at, work_order.marking_completed_at)
        self.assertEqual(work_order.ready_for_dispatch_by, "operator")
        self.assertEqual(work_order.status, WorkOrderStatus.READY_FOR_DISPATCH)

    def test_marking_with_pending_coating_does_not_release_dispatch(self):
        work_order = self.make_work_order(marking_required=True, coating_required=True)
        self.complete(work_order, 'factory_planning', 'production_completed')

        work_order_service.complete_stage(work_order.id, 'marking_completed', self.manager)

        work_order.refresh_from_db()
        self.assertIsNone(work_order.ready_for_dispatch_at)
        self.assertEqual(work_order.status, WorkOrderStatus.MARKING_DONE)

    def test_full_coating_route(self):
        work_order = self.make_work_order(coating_required=True, coating_type="TiAlN")
        work_order = self.complete(work_order, 'factory_planning', 'production_completed', 'sent_to_coating')
        self.assertEqual(work_order.status, WorkOrderStatus.AT_COATING)
        work_order = self.complete(work_order, 'coating_completed')
        self.assertEqual(work_order.status, WorkOrderStatus.COATING_DONE)
        work_order = self.complete(work_order, 'ready_for_dispatch', 'dispatched')
        self.assertEqual(work_order.status, WorkOrderStatus.DISPATCHED)

    def test_coating_stage_skipped_without_flag(self):
        work_order = self.complete(self.make_work_order(), 'factory_planning', 'production_completed')
        with self.assertRaises(StageNotApplicableError):
            work_order_service.complete_stage(work_order.id, 'sent_to_coating', self.manager)
        work_order = self.complete(work_order, 'ready_for_dispatch')
        self.assertEqual(work_order.status, WorkOrderStatus.READY_FOR_DISPATCH)

    def test_previous_stage_must_be_complete(self):
        work_order = self.make_work_order()
        with self.assertRaises(PreviousStageIncompleteError):
            work_order_service.complete_stage(work_order.id, 'production_completed', self.manager)
        work_order.refresh_from_db()
        self.assertIsNone(work_order.production_completed_at)
        self.assertEqual(work_order.version, 1)

    def test_stage_cannot_be_completed_twice(self):
        work_order = self.complete(self.make_work_order(), 'factory_planning')
        first_completion = work_order.factory_planning_at
        with self.assertRaises(StageAlreadyCompletedError):
            work_order_service.complete_stage(work_order.id, 'factory_planning', self.admin)
        work_order.refresh_from_db()
        self.assertEqual(work_order.factory_planning_at, first_completion)
        self.assertEqual(work_order.factory_planning_by, "manager")

    def test_operator_cannot_plan_produce_or_dispatch(self):
        work_order = self.make_work_order(marking_required=True)
        with self.assertRaises(StageNotAuthorizedError):
            work_order_service.complete_stage(work_order.id, 'factory_planning', self.operator)
        self.complete(work_order, 'factory_planning')
        with self.assertRaises(StageNotAuthorizedError):
            work_order_service.complete_stage(work_order.id, 'production_completed', self.operator)
        self.complete(work_order, 'production_completed')
        work_order_service.complete_stage(work_order.id, 'marking_completed', self.operator)
        with self.assertRaises(StageNotAuthorizedError):
            work_order_service.complete_stage(work_order.id, 'dispatched', self.operator)

    def test_dispatched_order_is_closed(self):
        work_order = self.complete(
            self.make_work_order(), 'factory_planning', 'production_completed', 'ready_for_dispatch', 'dispatched')
        with self.assertRaises(WorkOrderClosedError):
            work_order_service.accept_quality(work_order.id, self.manager)

    def test_completed_stages_stay_completed(self):
        work_order = self.complete(self.make_work_order(), 'factory_planning', 'production_completed')
        planned_at = work_order.factory_planning_at
        work_order_service.reject_quality(work_order.id, self.manager, rejected_qty=10)
        work_order = self.complete(work_order, 'ready_for_dispatch')
        self.assertEqual(work_order.factory_planning_at, planned_at)
        self.assertIsNotNone(work_order.production_completed_at)

    def test_unknown_work_order_not_found(self):
        with self.assertRaises(LocalBaseException) as ctx:
            work_order_service.complete_stage("00000000-0000-0000-0000-000000000000", 'factory_planning', self.manager)
        self.assertEqual(ctx.exception.status_code, 404)
        self.assertEqual(ctx.exception.code, "not_found")

    def test_stage_timeline_reports_what_the_user_can_do(self):
        work_order = self.complete(self.make_work_order(marking_required=True), 'factory_planning')
        timeline = {row['key']: row for row in work_order_service.get_stage_timeline(work_order, self.operator)}
        self.assertTrue(timeline['factory_planning']['completed'])
        self.assertFalse(timeline['production_completed']['can_complete'])
        self.assertFalse(timeline['marking_completed']['can_complete'])

        timeline = {row['key']: row for row in work_order_service.get_stage_timeline(work_order, self.manager)}
        self.assertTrue(timeline['production_completed']['can_complete'])
        self.assertNotIn('sent_to_coating', timeline)


class ConcurrencyTests(WorkOrderTestCase):

    def test_stale_expected_version_is_refused(self):
        work_order = self.make_work_order()
        stale_version = work_order.version
        self.complete(work_order, 'factory_planning')

        with self.assertRaises(ConcurrencyConflictException) as ctx:
            work_order_service.complete_stage(
                work_order.id, 'production_completed', self.manager, expected_version=stale_version)
        self.assertEqual(ctx.exception.status_code, 409)
        work_order.refresh_from_db()
        self.assertIsNone(work_order.production_completed_at)

    def test_compare_and_swap_loses_to_concurrent_writer(self):
        first_reader = self.make_work_order()
        second_reader = WorkOrder.objects.get(pk=first_reader.pk)

        first_reader.machine = "CNC-1"
        WorkOrder.objects.compare_and_swap(first_reader, ['machine'])

        second_reader.machine = "CNC-2"
        with self.assertRaises(ConcurrencyConflictException):
            WorkOrder.objects.compare_and_swap(second_reader, ['machine'])

        first_reader.refresh_from_db()
        self.assertEqual(first_reader.machine, "CNC-1")
        self.assertEqual(first_reader.version, 2)


class QualityTests(WorkOrderTestCase):

    def test_full_rejection(self):
        work_order = self.make_work_order("WO-200", 40, korv_per_unit=Decimal("2.50"), marking_required=True)
        self.complete(work_order, 'factory_planning', 'production_completed')

        result = work_order_service.reject_quality(work_order.id, self.manager, note="Burrs", rejected_qty=40)

        work_order.refresh_from_db()
        self.assertEqual(result.remaining_qty, 0)
        self.assertEqual(work_order.status, WorkOrderStatus.REJECTED)
        self.assertEqual(work_order.quantity, 40)
        self.assertEqual(work_order.quality_rejected_by, "manager")
        self.assertIsNotNone(work_order.factory_planning_at)

        rejected = WorkOrder.objects.get(rejected_from=work_order)
        self.assertEqual(rejected.work_order_no, "WO-200_r")
        self.assertEqual(rejected.quantity, 40)
        self.assertEqual(rejected.status, WorkOrderStatus.PLANNING_REQUIRED)
        self.assertTrue(rejected.marking_required)
        self.assertEqual(rejected.tool_code, "T-01")
        self.assertEqual(rejected.total_korv, Decimal("100.00"))
        self.assertEqual(rejected.marking_notes, "[REJECTED] From WO WO-200. Reason: Burrs")
        self.assertIsNone(rejected.factory_planning_at)
        self.assertEqual(WorkOrder.objects.filter(work_order_no__startswith="WO-200").count(), 2)

    def test_rejected_quantity_defaults_to_full_quantity(self):
        work_order = self.make_work_order("WO-201", 12)
        result = work_order_service.reject_quality(work_order.id, self.admin)
        self.assertEqual(result.rejected_qty, 12)
        self.assertEqual(result.work_order.status, WorkOrderStatus.REJECTED)
        self.assertEqual(result.rejected_work_order.marking_notes, "[REJECTED] From WO WO-201. Reason: Quality issue")

    def test_partial_rejection_splits_quantity(self):
        work_order = self.make_work_order("WO-300", 50, korv_per_unit=Decimal("1.20"), price_per_unit=Decimal("10.00"))
        self.complete(work_order, 'factory_planning', 'production_completed')

        result = work_order_service.reject_quality(work_order.id, self.manager, rejected_qty=15)

        work_order.refresh_from_db()
        self.assertEqual(work_order.quantity, 35)
        self.assertEqual(work_order.status, WorkOrderStatus.PLANNING_REQUIRED)
        self.assertEqual(work_order.total_korv, Decimal("42.00"))
        self.assertEqual(work_order.total_price, Decimal("350.00"))
        self.assertEqual(result.rejected_work_order.work_order_no, "WO-300_r")
        self.assertEqual(result.rejected_work_order.quantity, 15)
        self.assertEqual(result.rejected_work_order.total_korv, Decimal("18.00"))
        self.assertEqual(work_order.quantity + result.rejected_work_order.quantity, 50)

    def test_second_rejection_gets_next_suffix(self):
        work_order = self.make_work_order("WO-400", 30)
        work_order_service.reject_quality(work_order.id, self.manager, rejected_qty=5)
        result = work_order_service.reject_quality(work_order.id, self.manager, rejected_qty=5)
        self.assertEqual(result.rejected_work_order.work_order_no, "WO-400_r2")
        work_order.refresh_from_db()
        self.assertEqual(work_order.quantity, 20)

    def test_rejected_quantity_out_of_range(self):
        work_order = self.make_work_order("WO-500", 10)
        for qty in (0, -1, 11, "abc", 2.5):
            with self.assertRaises(InvalidQuantityError):
                work_order_service.reject_quality(work_order.id, self.manager, rejected_qty=qty)
        work_order.refresh_from_db()
        self.assertEqual(work_order.quantity, 10)
        self.assertFalse(WorkOrder.objects.filter(work_order_no="WO-500_r").exists())

    def test_operator_cannot_decide_quality(self):
        work_order = self.make_work_order()
        with self.assertRaises(StageNotAuthorizedError):
            work_order_service.reject_quality(work_order.id, self.operator)
        with self.assertRaises(StageNotAuthorizedError):
            work_order_service.accept_quality(work_order.id, self.operator)

    def test_failed_rejection_leaves_original_untouched(self):
        work_order = self.make_work_order("WO-600", 20)
        conflict = ConcurrencyConflictException(model="WorkOrder", pk=work_order.pk)
        with patch("configurations.base_features.db.base_manager.BaseManager.compare_and_swap", side_effect=conflict):
            with self.assertRaises(ConcurrencyConflictException):
                work_order_service.reject_quality(work_order.id, self.manager, rejected_qty=5)

        work_order.refresh_from_db()
        self.assertEqual(work_order.quantity, 20)
        self.assertEqual(work_order.status, WorkOrderStatus.PLANNING_REQUIRED)
        self.assertFalse(WorkOrder.objects.filter(work_order_no="WO-600_r").exists())

    def test_rejected_order_is_closed(self):
        work_order = self.make_work_order("WO-700", 5)
        work_order_service.reject_quality(work_order.id, self.manager)
        with self.assertRaises(WorkOrderClosedError):
            work_order_service.complete_stage(work_order.id, 'factory_planning', self.manager)
        with self.assertRaises(WorkOrderClosedError):
            work_order_service.reject_quality(work_order.id, self.manager)

    def test_full_acceptance(self):
        work_order = self.make_work_order()
        work_order = work_order_service.accept_quality(work_order.id, self.manager, note="All good")
        self.assertEqual(work_order.status, WorkOrderStatus.QUALITY_DONE)
        self.assertEqual(work_order.quality_accepted_by, "manager")
        self.assertEqual(work_order.quality_notes, "All good")
        self.assertIsNone(work_order.quality_partial_qty)

    def test_partial_acceptance_records_quantity_on_same_order(self):
        work_order = self.make_work_order("WO-800", 50)
        work_order_service.accept_quality(work_order.id, self.admin, partial_qty=30)

        work_order.refresh_from_db()
        self.assertEqual(work_order.status, WorkOrderStatus.PARTIALLY_ACCEPTED)
        self.assertEqual(work_order.quality_partial_qty, 30)
        self.assertEqual(work_order.quantity, 50)
        self.assertEqual(WorkOrder.objects.count(), 1)

    def test_partial_acceptance_above_quantity_is_refused(self):
        work_order = self.make_work_order("WO-900", 50)
        with self.assertRaises(InvalidQuantityError):
            work_order_service.accept_quality(work_order.id, self.admin, partial_qty=51)

    def test_open_work_orders_exclude_closed(self):
        open_order = self.make_work_order("WO-A1", 5)
        closed_order = self.make_work_order("WO-A2", 5)
        work_order_service.reject_quality(closed_order.id, self.manager)

        numbers = [wo.work_order_no for wo in work_order_service.list_open_work_orders(search="WO-A")]
        self.assertIn(open_order.work_order_no, numbers)
        self.assertIn("WO-A2_r", numbers)
        self.assertNotIn("WO-A2", numbers)


class KorvTests(SimpleTestCase):

    def test_minutes_and_korv(self):
        self.assertEqual(korv.minutes_to_korv(60), Decimal("12.00"))
        self.assertEqual(korv.minutes_to_korv(7), Decimal("1.40"))
        self.assertEqual(korv.korv_to_minutes(Decimal("3")), Decimal("15"))

    def test_korv_per_unit_and_total(self):
        self.assertEqual(korv.calculate_korv_per_unit(10, 5, 2.5), Decimal("3.50"))
        self.assertEqual(korv.calculate_total_korv(Decimal("3.50"), 12), Decimal("42.00"))
        self.assertEqual(korv.calculate_total_korv(None, 12), Decimal("0.00"))


class WorkOrderApiTests(APITestCase):
    """HTTP surface of the lifecycle"""

    def setUp(self):
        self.manager = FactoryUser.objects.create_user(username="manager", password="testpass123", role="manager")
        self.operator = FactoryUser.objects.create_user(username="operator", password="testpass123", role="operator")
        self.work_order = WorkOrder.objects.create(work_order_no="WO-API", quantity=10, marking_required=True)
        self.client.force_authenticate(user=self.manager)

    def test_requires_authentication(self):
        self.client.force_authenticate(user=None)
        response = self.client.get(reverse('WorkOrder'))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(response.data['meta_data']['success'])

    def test_create_work_order_computes_korv(self):
        response = self.client.post(reverse('WorkOrder'), {
            'work_order_no': 'WO-NEW',
            'quantity': 4,
            'cycle_time': '12.50',
            'status': 'Dispatched',
        })
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        created = WorkOrder.objects.get(work_order_no='WO-NEW')
        self.assertEqual(created.korv_per_unit, Decimal("2.50"))
        self.assertEqual(created.total_korv, Decimal("10.00"))
        self.assertEqual(created.status, WorkOrderStatus.PLANNING_REQUIRED)
        self.assertEqual(created.created_by, "manager")
        self.assertTrue(created.logs.filter(log_type=WorkOrderLog.LogTypeChoices.CREATED).exists())

    def test_operator_cannot_create_work_order(self):
        self.client.force_authenticate(user=self.operator)
        response = self.client.post(reverse('WorkOrder'), {'work_order_no': 'WO-X', 'quantity': 1})
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_complete_stage_endpoint(self):
        url = reverse('WorkOrderCompleteStage', kwargs={'pk': self.work_order.pk})
        response = self.client.post(url, {'stage': 'factory_planning', 'note': 'ok'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['status'], WorkOrderStatus.PLANNING_DONE)
        self.assertEqual(response.data['data']['completed_stages'], ['factory_planning'])

    def test_complete_stage_errors_use_envelope(self):
        url = reverse('WorkOrderCompleteStage', kwargs={'pk': self.work_order.pk})
        response = self.client.post(url, {'stage': 'dispatched'})
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['errors']['code'], 'previous_stage_incomplete')

        self.client.force_authenticate(user=self.operator)
        response = self.client.post(url, {'stage': 'factory_planning'})
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['errors']['code'], 'stage_not_authorized')

    def test_stale_version_returns_conflict(self):
        url = reverse('WorkOrderCompleteStage', kwargs={'pk': self.work_order.pk})
        response = self.client.post(url, {'stage': 'factory_planning', 'expected_version': 7})
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['errors']['code'], 'concurrency_conflict')

    def test_reject_quality_endpoint(self):
        url = reverse('WorkOrderRejectQuality', kwargs={'pk': self.work_order.pk})
        response = self.client.post(url, {'rejected_qty': 4, 'note': 'Cracks'})
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['data']['remaining_qty'], 6)
        self.assertEqual(response.data['data']['rejected_work_order']['work_order_no'], 'WO-API_r')

    def test_accept_quality_endpoint(self):
        url = reverse('WorkOrderAcceptQuality', kwargs={'pk': self.work_order.pk})
        response = self.client.post(url, {'partial_qty': 3})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['status'], WorkOrderStatus.PARTIALLY_ACCEPTED)

    def test_stages_endpoint(self):
        response = self.client.get(reverse('WorkOrderStages', kwargs={'pk': self.work_order.pk}))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        keys = [stage['key'] for stage in response.data['data']['stages']]
        self.assertIn('marking_completed', keys)
        self.assertNotIn('coating_completed', keys)

    def test_open_list_and_logs(self):
        response = self.client.get(reverse('WorkOrderOpen'), {'search': 'WO-API'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['meta_data']['total'], 1)

        response = self.client.get(reverse('WorkOrderLog'), {'work_order': str(self.work_order.pk)})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data'][0]['log_type'], WorkOrderLog.LogTypeChoices.CREATED)

    def test_unknown_work_order_is_404(self):
        response = self.client.get(reverse('WorkOrderDetails', kwargs={'pk': 'not-a-uuid'}))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_sequence_fields_lock_once_stages_complete(self):
        for stage_key in ('factory_planning', 'production_completed', 'marking_completed'):
            work_order_service.complete_stage(self.work_order.id, stage_key, self.manager)
        url = reverse('WorkOrderDetails', kwargs={'pk': self.work_order.pk})

        response = self.client.patch(url, {'coating_required': True, 'quantity': 3})
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['errors']['code'], 'work_order_locked')

        self.work_order.refresh_from_db()
        self.assertFalse(self.work_order.coating_required)
        self.assertEqual(self.work_order.quantity, 10)
        self.assertEqual(self.work_order.status, WorkOrderStatus.READY_FOR_DISPATCH)

        response = self.client.patch(url, {'customer_name': 'Acme Tools', 'quantity': 10})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.work_order.refresh_from_db()
        self.assertEqual(self.work_order.customer_name, 'Acme Tools')

    def test_quantity_locked_after_quality_split(self):
        work_order_service.reject_quality(self.work_order.id, self.manager, rejected_qty=4)
        url = reverse('WorkOrderDetails', kwargs={'pk': self.work_order.pk})
        response = self.client.patch(url, {'quantity': 10})
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.work_order.refresh_from_db()
        self.assertEqual(self.work_order.quantity, 6)

    def test_fresh_order_fields_stay_editable(self):
        url = reverse('WorkOrderDetails', kwargs={'pk': self.work_order.pk})
        response = self.client.patch(url, {'coating_required': True, 'quantity': 12})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.work_order.refresh_from_db()
        self.assertTrue(self.work_order.coating_required)
        self.assertEqual(self.work_order.quantity, 12)
        self.assertEqual(self.work_order.version, 2)

    def test_open_list_rejects_bad_limit(self):
        response = self.client.get(reverse('WorkOrderOpen'), {'limit': 'abc'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('limit', response.data['errors'])
