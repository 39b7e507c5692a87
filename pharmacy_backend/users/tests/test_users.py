# users/tests/test_users.py

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from permissions.roles import CAP_POS_SELL, CAP_SALES_EDIT_APPROVE
from tenants.tests.factories import make_tenant, make_user

User = get_user_model()


class UserManagerTests(TestCase):
    """
    GUARANTEES:
    - Staff users always belong to a tenant
    - Superusers may exist without one (Django admin only)
    """

    def test_staff_user_requires_tenant(self):
        with self.assertRaises(ValidationError):
            User.objects.create_user(email="orphan@example.com", password="pass")

    def test_username_style_call_builds_email(self):
        tenant = make_tenant()
        user = User.objects.create_user(username="Cashier1", password="pass", tenant=tenant)

        self.assertEqual(user.email, "cashier1@local.test")
        self.assertEqual(user.role, "cashier")
        self.assertTrue(user.check_password("pass"))

    def test_superuser_without_tenant(self):
        user = User.objects.create_superuser(email="root@example.com", password="pass")

        self.assertTrue(user.is_superuser)
        self.assertTrue(user.is_staff)
        self.assertEqual(user.role, "admin")
        self.assertIsNone(user.tenant_id)


class MeViewTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.tenant = make_tenant("Corner Chemist")
        self.url = reverse("users:me")

    def test_me_returns_tenant_and_capabilities(self):
        cashier = make_user(self.tenant, role="cashier")
        self.client.force_authenticate(cashier)

        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["tenant_name"], "Corner Chemist")
        self.assertIn(CAP_POS_SELL, response.data["capabilities"])
        self.assertNotIn(CAP_SALES_EDIT_APPROVE, response.data["capabilities"])

    def test_me_requires_authentication(self):
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
