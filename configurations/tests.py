from decimal import Decimal

from django.test import TestCase, override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from configurations.base_features.constants import SERVER_VERSION
from configurations.system_start_checks import admin_user_check, stock_ledger_check
from factory_users.models import FactoryUser
from stock.models import StockItem
from stock.services import stock_ledger
from work_orders.models import WorkOrder
from work_orders.services import work_order_service


class DashboardApiTests(APITestCase):

    def setUp(self):
        self.manager = FactoryUser.objects.create_user(username="manager", password="testpass123", role="manager")
        self.client.force_authenticate(user=self.manager)

    def test_index(self):
        response = self.client.get('/')
        self.assertContains(response, SERVER_VERSION)

    def test_dashboard_counters(self):
        WorkOrder.objects.create(work_order_no="WO-1", quantity=5)
        rejected = WorkOrder.objects.create(work_order_no="WO-2", quantity=5)
        work_order_service.reject_quality(rejected.id, self.manager)
        stock_ledger.create_stock_item("RM-1", "Rod", opening_qty=10)
        stock_ledger.create_stock_item("RM-2", "Bar")

        response = self.client.get(reverse('dashboard'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.data['data']
        self.assertEqual(data['open_work_orders_count'], 2)
        self.assertEqual(data['work_orders_by_status']['Rejected'], 1)
        self.assertEqual(data['stock_items_count'], 2)
        self.assertEqual(data['out_of_stock_count'], 1)
        self.assertTrue(data['recent_activity'])

    def test_envelope_on_unknown_record(self):
        response = self.client.get(reverse('StockItemDetails', kwargs={'pk': '00000000-0000-0000-0000-000000000000'}))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['errors']['code'], 'not_found')
        self.assertEqual(response.data['meta_data'], {'success': False, 'total': 0, 'status_code': 404})


class SystemStartChecksTests(TestCase):

    @override_settings(FACTORY_ADMIN_USERNAME="root", FACTORY_ADMIN_PASSWORD="bootstrap-pass")
    def test_bootstrap_admin_created_once(self):
        user = admin_user_check()
        self.assertEqual(user.role, FactoryUser.Role.ADMIN)
        self.assertIsNone(admin_user_check())
        self.assertEqual(FactoryUser.objects.filter(role=FactoryUser.Role.ADMIN).count(), 1)

    @override_settings(FACTORY_ADMIN_USERNAME=None, FACTORY_ADMIN_PASSWORD=None)
    def test_no_bootstrap_admin_configured(self):
        self.assertIsNone(admin_user_check())
        self.assertFalse(FactoryUser.objects.exists())

    def test_stock_ledger_check_reports_drift(self):
        item = stock_ledger.create_stock_item("RM-1", "Rod", opening_qty=10).item
        self.assertEqual(stock_ledger_check(), [])

        StockItem.objects.filter(pk=item.pk).update(quantity=Decimal('12'))
        drifted = stock_ledger_check()
        self.assertEqual([report.item_code for report in drifted], ["RM-1"])
        self.assertEqual(drifted[0].drift, Decimal('2'))
