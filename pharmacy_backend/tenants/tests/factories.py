# tenants/tests/factories.py

"""
Shared test builders: tenant, branch, staff user, product, stocked lot.

Lots are always stocked through the Inventory Ledger so every test starts
from a state the API could have produced.
"""

from __future__ import annotations

import uuid
from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.utils import timezone

from products.models import Product
from products.services.inventory_ledger import receive_stock
from tenants.models import Branch, Tenant
from tenants.services.tax_settings_service import update_tax_settings

User = get_user_model()


def make_tenant(name="Test Pharmacy", *, vat_rate="16.00", pricing_mode="EXCLUSIVE", charge_vat=True):
    tenant = Tenant.objects.create(name=name)
    update_tax_settings(
        tenant_id=tenant.id,
        charge_vat=charge_vat,
        default_vat_rate=Decimal(vat_rate),
        pricing_mode=pricing_mode,
    )
    return tenant


def make_branch(tenant, name="Main Branch", code="MAIN"):
    return Branch.objects.create(tenant=tenant, name=name, code=code)


def make_user(tenant, role="cashier", email=None):
    return User.objects.create_user(
        email=email or f"{role}-{uuid.uuid4().hex[:6]}@example.com",
        password="pass",
        role=role,
        tenant=tenant,
    )


def make_product(tenant, sku="SKU-001", name="Paracetamol 500mg", **extra):
    extra.setdefault("selling_price", Decimal("100.00"))
    extra.setdefault("tax_classification", Product.TaxClassification.STANDARD)
    return Product.objects.create(tenant=tenant, sku=sku, name=name, **extra)


def make_lot(tenant, product, branch, quantity=10, batch_number="BATCH-001", unit_cost="50.00"):
    audit = receive_stock(
        tenant_id=tenant.id,
        product_id=product.id,
        branch_id=branch.id,
        quantity=quantity,
        unit_cost=Decimal(unit_cost) if unit_cost is not None else None,
        selling_price=product.selling_price,
        batch_number=batch_number,
        expiry_date=timezone.now().date() + timedelta(days=365),
        source_reference=f"GRN-{uuid.uuid4().hex[:8].upper()}",
    )
    return audit.inventory
