# sales/models/sale_return.py

"""
SALE RETURNS

SaleReturn is the header; SaleReturnLineItem rows reference the original
SaleLineItem. Multiple returns may exist against one sale: the allowed
quantity for a new return is always computed from the SUM of every prior
SaleReturnLineItem for that line.
"""

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone

from products.models import Product
from tenants.models import Tenant

from .sale import Sale
from .sale_line_item import SaleLineItem

User = settings.AUTH_USER_MODEL


class SaleReturn(models.Model):
    class Status(models.TextChoices):
        PENDING = "PENDING", "Pending"
        APPROVED = "APPROVED", "Approved"
        PROCESSED = "PROCESSED", "Processed"
        REJECTED = "REJECTED", "Rejected"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    tenant = models.ForeignKey(Tenant, on_delete=models.PROTECT, related_name="sale_returns")
    original_sale = models.ForeignKey(Sale, on_delete=models.PROTECT, related_name="returns")

    return_number = models.CharField(max_length=32)
    return_reason = models.TextField()

    total_refund_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )

    status = models.CharField(max_length=16, choices=Status.choices, default=Status.PROCESSED)

    processed_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        related_name="processed_returns",
    )

    notes = models.TextField(blank=True)

    return_date = models.DateTimeField(default=timezone.now)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-return_date"]
        indexes = [
            models.Index(fields=["tenant", "return_date"], name="salereturn_tenant_date_idx"),
            models.Index(fields=["original_sale"], name="salereturn_sale_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["tenant", "return_number"],
                name="uniq_return_number_per_tenant",
            ),
        ]

    def __str__(self):
        return f"{self.return_number} | {self.total_refund_amount}"


class SaleReturnLineItem(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    sale_return = models.ForeignKey(
        SaleReturn, on_delete=models.CASCADE, related_name="line_items"
    )

    original_sale_line_item = models.ForeignKey(
        SaleLineItem, on_delete=models.PROTECT, related_name="return_lines"
    )

    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name="return_lines")

    quantity_returned = models.PositiveIntegerField()
    unit_price = models.DecimalField(max_digits=12, decimal_places=2)
    refund_amount = models.DecimalField(max_digits=12, decimal_places=2)

    restore_to_inventory = models.BooleanField(default=True)
    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["original_sale_line_item"], name="returnline_sale_line_idx"),
        ]

    def __str__(self):
        return f"{self.sale_return_id} | {self.product_id} x {self.quantity_returned}"
