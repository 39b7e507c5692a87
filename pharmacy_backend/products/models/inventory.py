# products/models/inventory.py

"""
INVENTORY LOT

One batch of a product at a branch.

GUARANTEES:
- quantity never goes negative (check constraint + ledger locking)
- quantity is mutated ONLY via products.services.inventory_ledger
- lots are never deleted at zero quantity (audit continuity)
"""

import uuid

from django.db import models
from django.db.models import Q

from tenants.models import Branch

from .product import Product


class Inventory(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name="inventory_lots",
    )

    branch = models.ForeignKey(
        Branch,
        on_delete=models.PROTECT,
        related_name="inventory_lots",
    )

    batch_number = models.CharField(max_length=128, blank=True, default="")
    expiry_date = models.DateField(null=True, blank=True)

    quantity = models.IntegerField(default=0)

    unit_cost = models.DecimalField(
        max_digits=12, decimal_places=2, null=True, blank=True
    )
    selling_price = models.DecimalField(
        max_digits=12, decimal_places=2, null=True, blank=True
    )

    location = models.CharField(max_length=128, blank=True)
    last_restocked = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = "Inventory"
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["product", "branch"], name="inv_product_branch_idx"),
            models.Index(fields=["product", "branch", "batch_number"], name="inv_product_branch_batch_idx"),
            models.Index(fields=["expiry_date"], name="inv_expiry_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity__gte=0),
                name="inventory_quantity_non_negative",
            ),
        ]

    @property
    def tenant_id(self):
        return self.branch.tenant_id

    def __str__(self):
        product_name = getattr(self.product, "name", "Product")
        batch = self.batch_number or "-"
        return f"{product_name} | {batch} | {self.quantity}"
