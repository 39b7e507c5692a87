# products/management/commands/seed_products.py

from datetime import date, timedelta
from decimal import Decimal

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from products.models import InventoryAuditLog, Product
from products.services.inventory_ledger import receive_stock
from tenants.models import Branch, Tenant


PRODUCTS = [
    # sku, name, classification, cost, price, prescription
    ("AMOX-500", "Amoxicillin 500mg", Product.TaxClassification.EXEMPT, "80.00", "120.00", True),
    ("PARA-500", "Paracetamol 500mg", Product.TaxClassification.STANDARD, "20.00", "30.00", False),
    ("VITA-C", "Vitamin C 1000mg", Product.TaxClassification.STANDARD, "55.00", "80.00", False),
    ("FLU-STOP", "Flu Stop Syrup", Product.TaxClassification.REDUCED, "100.00", "150.00", False),
    ("ART-LUM", "Artemether/Lumefantrine", Product.TaxClassification.ZERO, "180.00", "250.00", True),
]


class Command(BaseCommand):
    help = "Seed a tenant's catalog and receive two lots per product at every branch"

    def add_arguments(self, parser):
        parser.add_argument("--tenant", type=str, default="Demo Pharmacy")
        parser.add_argument("--quantity", type=int, default=40)

    @transaction.atomic
    def handle(self, *args, **options):
        tenant = Tenant.objects.filter(name=options["tenant"]).first()
        if tenant is None:
            raise CommandError(f"Tenant not found: {options['tenant']} (run seed_users first)")

        qty = int(options["quantity"])
        if qty <= 0:
            raise CommandError("--quantity must be positive")

        self.stdout.write(self.style.WARNING(f"Seeding products and stock for {tenant.name}..."))

        products = []
        for sku, name, classification, cost, price, rx in PRODUCTS:
            product, _ = Product.objects.get_or_create(
                tenant=tenant,
                sku=sku,
                defaults={
                    "name": name,
                    "tax_classification": classification,
                    "unit_cost": Decimal(cost),
                    "selling_price": Decimal(price),
                    "requires_prescription": rx,
                },
            )
            products.append(product)

        for branch in Branch.objects.filter(tenant=tenant, is_active=True):
            for product in products:
                for i in range(2):
                    receive_stock(
                        tenant_id=tenant.id,
                        product_id=product.id,
                        branch_id=branch.id,
                        quantity=qty,
                        unit_cost=product.unit_cost,
                        selling_price=product.selling_price,
                        batch_number=f"BATCH-{i + 1}",
                        expiry_date=date.today() + timedelta(days=180 + i * 60),
                        source_reference=f"SEED-{branch.code or branch.id.hex[:6]}",
                        source_type=InventoryAuditLog.SourceType.INITIAL_STOCK,
                        notes="Seed stock",
                    )
                self.stdout.write(
                    f"{branch.name}: {product.sku} on hand {product.stock_at_branch(branch)}"
                )

        self.stdout.write(self.style.SUCCESS("Products and stock seeded successfully."))
