# tenants/tests/test_tenants.py

from decimal import Decimal

from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from tenants.models import Tenant, TenantTaxSettings
from tenants.services.sequence_service import next_return_number, next_sale_number
from tenants.services.tax_settings_service import (
    TaxSettingsError,
    get_tax_settings,
    update_tax_settings,
)
from tenants.services.tenant_scope import (
    NotFoundError,
    TenantRequiredError,
    get_branch_for_tenant,
    require_tenant_id,
)
from tenants.tests.factories import make_branch, make_tenant, make_user


class TaxSettingsServiceTests(TestCase):
    """
    GUARANTEES:
    - Defaults are created lazily (VAT on, 16%, EXCLUSIVE)
    - Updates are validated
    """

    def test_defaults_created_on_first_access(self):
        tenant = Tenant.objects.create(name="Fresh")

        tax_settings = get_tax_settings(tenant_id=tenant.id)

        self.assertTrue(tax_settings.charge_vat)
        self.assertEqual(tax_settings.default_vat_rate, Decimal("16.00"))
        self.assertEqual(tax_settings.pricing_mode, TenantTaxSettings.PricingMode.EXCLUSIVE)
        self.assertEqual(TenantTaxSettings.objects.filter(tenant=tenant).count(), 1)

        get_tax_settings(tenant_id=tenant.id)
        self.assertEqual(TenantTaxSettings.objects.filter(tenant=tenant).count(), 1)

    def test_update_accepts_valid_values(self):
        tenant = make_tenant()

        tax_settings = update_tax_settings(
            tenant_id=tenant.id,
            default_vat_rate="8.00",
            pricing_mode="inclusive",
        )

        self.assertEqual(tax_settings.default_vat_rate, Decimal("8.00"))
        self.assertEqual(tax_settings.pricing_mode, "INCLUSIVE")

    def test_update_rejects_out_of_range_rate(self):
        tenant = make_tenant()
        with self.assertRaises(TaxSettingsError):
            update_tax_settings(tenant_id=tenant.id, default_vat_rate="101")

    def test_update_rejects_unknown_pricing_mode(self):
        tenant = make_tenant()
        with self.assertRaises(TaxSettingsError):
            update_tax_settings(tenant_id=tenant.id, pricing_mode="GROSS")


class SequenceServiceTests(TestCase):
    def test_numbers_are_sequential_per_tenant_and_kind(self):
        a = make_tenant("A")
        b = make_tenant("B")

        self.assertEqual(next_sale_number(tenant_id=a.id), "SAL00000001")
        self.assertEqual(next_sale_number(tenant_id=a.id), "SAL00000002")
        self.assertEqual(next_sale_number(tenant_id=b.id), "SAL00000001")
        self.assertEqual(next_return_number(tenant_id=a.id), "RET00000001")

    def test_tenant_is_required(self):
        with self.assertRaises(TenantRequiredError):
            next_sale_number(tenant_id=None)


class TenantScopeTests(TestCase):
    def test_blank_tenant_is_rejected(self):
        with self.assertRaises(TenantRequiredError):
            require_tenant_id("  ")

    def test_branch_of_other_tenant_reads_as_missing(self):
        mine = make_tenant("Mine")
        other = make_tenant("Other")
        branch = make_branch(other)

        with self.assertRaises(NotFoundError):
            get_branch_for_tenant(tenant_id=mine.id, branch_id=branch.id)

    def test_inactive_branch_is_rejected(self):
        tenant = make_tenant()
        branch = make_branch(tenant)
        branch.is_active = False
        branch.save()

        with self.assertRaises(NotFoundError):
            get_branch_for_tenant(tenant_id=tenant.id, branch_id=branch.id)


class TenantAPITests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.tenant = make_tenant()
        self.branch = make_branch(self.tenant)
        self.admin = make_user(self.tenant, role="admin")
        self.cashier = make_user(self.tenant, role="cashier")

        other = make_tenant("Other")
        make_branch(other, name="Elsewhere", code="ELS")

        self.tax_url = reverse("tenant-tax-settings")
        self.branches_url = reverse("tenant-branches")

    def test_any_staff_can_read_tax_settings(self):
        self.client.force_authenticate(self.cashier)

        response = self.client.get(self.tax_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["pricing_mode"], "EXCLUSIVE")

    def test_admin_can_update_tax_settings(self):
        self.client.force_authenticate(self.admin)

        response = self.client.put(
            self.tax_url,
            {"default_vat_rate": "14.00", "pricing_mode": "INCLUSIVE"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["default_vat_rate"], "14.00")
        self.assertEqual(get_tax_settings(tenant_id=self.tenant.id).pricing_mode, "INCLUSIVE")

    def test_cashier_cannot_update_tax_settings(self):
        self.client.force_authenticate(self.cashier)

        response = self.client.put(self.tax_url, {"charge_vat": False}, format="json")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertTrue(get_tax_settings(tenant_id=self.tenant.id).charge_vat)

    def test_branches_are_tenant_scoped(self):
        self.client.force_authenticate(self.cashier)

        response = self.client.get(self.branches_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([b["code"] for b in response.data], ["MAIN"])

    def test_unauthenticated_is_rejected(self):
        response = self.client.get(self.tax_url)
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
