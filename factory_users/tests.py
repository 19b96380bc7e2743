from django.test import SimpleTestCase, TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from factory_users.models import FactoryUser
from factory_users.permissions import HasFactoryRole


class FactoryUserModelTests(TestCase):

    def test_create_user_defaults_to_operator(self):
        user = FactoryUser.objects.create_user(username="lathe1", password="testpass123")
        self.assertEqual(user.role, FactoryUser.Role.OPERATOR)
        self.assertEqual(user.name, "lathe1")
        self.assertTrue(user.check_password("testpass123"))
        self.assertFalse(user.is_superuser)
        self.assertFalse(user.has_perm("work_orders.change_workorder"))

    def test_create_superuser_is_admin(self):
        user = FactoryUser.objects.create_superuser(username="boss", password="testpass123")
        self.assertEqual(user.role, FactoryUser.Role.ADMIN)
        self.assertTrue(user.is_staff)
        self.assertTrue(user.is_superuser)
        self.assertTrue(user.has_module_perms("stock"))

    def test_username_required(self):
        with self.assertRaises(ValueError):
            FactoryUser.objects.create_user(username="", password="testpass123")


class HasFactoryRoleTests(SimpleTestCase):

    class View:
        allowed_roles = ['*']
        write_roles = ['admin']

    class Request:
        def __init__(self, method, user):
            self.method = method
            self.user = user

    def test_write_roles_apply_to_unsafe_methods(self):
        operator = FactoryUser(username="op", role="operator")
        permission = HasFactoryRole()
        self.assertTrue(permission.has_permission(self.Request("GET", operator), self.View()))
        self.assertFalse(permission.has_permission(self.Request("POST", operator), self.View()))
        admin = FactoryUser(username="admin", role="admin")
        self.assertTrue(permission.has_permission(self.Request("DELETE", admin), self.View()))


class FactoryUserApiTests(APITestCase):

    def setUp(self):
        self.manager = FactoryUser.objects.create_user(
            username="manager", name="Shop Manager", password="testpass123", role="manager")
        self.operator = FactoryUser.objects.create_user(username="operator", password="testpass123")

    def test_login_returns_tokens_and_role(self):
        response = self.client.post(reverse('factory_login'), {'username': 'manager', 'password': 'testpass123'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)
        self.assertEqual(response.data['role'], 'manager')

    def test_login_with_wrong_password(self):
        response = self.client.post(reverse('factory_login'), {'username': 'manager', 'password': 'nope'})
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_bearer_token_reaches_me(self):
        login = self.client.post(reverse('factory_login'), {'username': 'operator', 'password': 'testpass123'})
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {login.data['access']}")
        response = self.client.get(reverse('factory_me'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['username'], 'operator')
        self.assertEqual(response.data['data']['role'], 'operator')
        self.assertNotIn('password', response.data['data'])

    def test_inactive_user_token_is_refused(self):
        login = self.client.post(reverse('factory_login'), {'username': 'operator', 'password': 'testpass123'})
        FactoryUser.objects.filter(pk=self.operator.pk).update(is_active=False)
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {login.data['access']}")
        response = self.client.get(reverse('factory_me'))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_operator_cannot_list_users(self):
        self.client.force_authenticate(user=self.operator)
        response = self.client.get(reverse('factory_users'))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_manager_creates_user(self):
        self.client.force_authenticate(user=self.manager)
        response = self.client.post(reverse('factory_users'), {
            'username': 'grinder2',
            'name': 'Grinder Operator',
            'role': 'operator',
            'password': 'longenough1',
        })
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertNotIn('password', response.data['data'])
        self.assertTrue(FactoryUser.objects.get(username='grinder2').check_password('longenough1'))

    def test_create_user_requires_password(self):
        self.client.force_authenticate(user=self.manager)
        response = self.client.post(reverse('factory_users'), {'username': 'nopass'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('password', response.data['errors'])
        self.assertFalse(FactoryUser.objects.filter(username='nopass').exists())
