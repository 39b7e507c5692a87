# products/tests/test_seed.py

from io import StringIO

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase

from products.models import Inventory, InventoryAuditLog, Product
from tenants.models import Tenant


class SeedCommandTests(TestCase):
    def test_seed_users_then_products(self):
        out = StringIO()
        call_command("seed_users", "--tenant", "Seed Pharmacy", stdout=out)
        call_command("seed_products", "--tenant", "Seed Pharmacy", "--quantity", "5", stdout=out)

        tenant = Tenant.objects.get(name="Seed Pharmacy")

        self.assertEqual(get_user_model().objects.filter(tenant=tenant).count(), 4)
        self.assertEqual(Product.objects.filter(tenant=tenant).count(), 5)
        self.assertEqual(Inventory.objects.filter(branch__tenant=tenant).count(), 10)
        self.assertEqual(
            InventoryAuditLog.objects.filter(
                tenant=tenant, source_type=InventoryAuditLog.SourceType.INITIAL_STOCK
            ).count(),
            10,
        )

        para = Product.objects.get(tenant=tenant, sku="PARA-500")
        branch = tenant.branches.get(code="MAIN")
        self.assertEqual(para.stock_at_branch(branch), 10)

    def test_seed_products_requires_existing_tenant(self):
        with self.assertRaises(CommandError):
            call_command("seed_products", "--tenant", "Nobody", stdout=StringIO())
