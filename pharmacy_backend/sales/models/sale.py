# sales/models/sale.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone

from tenants.models import Branch, Tenant

User = settings.AUTH_USER_MODEL


class Sale(models.Model):
    """
    Tenant-scoped POS transaction header.

    GUARANTEES:
    - total_amount == subtotal + tax_amount - discount_amount after every
      mutation (enforced by recalculation in the services, never by hand)
    - subtotal is the pre-discount net; discount_amount is the sum of the
      discounts actually applied on the lines
    - once COMPLETED, only the Return Engine and approved edit requests
      touch lines or totals
    """

    class Status(models.TextChoices):
        PENDING = "PENDING", "Pending"
        COMPLETED = "COMPLETED", "Completed"
        SUSPENDED = "SUSPENDED", "Suspended"
        CANCELLED = "CANCELLED", "Cancelled"
        REFUNDED = "REFUNDED", "Refunded"

    class ReturnStatus(models.TextChoices):
        NONE = "NONE", "No returns"
        PARTIAL = "PARTIAL", "Partially returned"
        FULL = "FULL", "Fully returned"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    tenant = models.ForeignKey(Tenant, on_delete=models.PROTECT, related_name="sales")
    branch = models.ForeignKey(Branch, on_delete=models.PROTECT, related_name="sales")

    sale_number = models.CharField(
        max_length=32,
        help_text="System-generated, tenant-unique (SAL00000001)",
    )

    customer = models.ForeignKey(
        "sales.Customer",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="sales",
    )
    customer_name = models.CharField(max_length=255, blank=True)
    customer_phone = models.CharField(max_length=50, blank=True)

    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    tax_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    discount_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    total_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    # Caller-supplied sale-level discount; informational only, never subtracted.
    declared_discount_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )

    effective_tax_rate = models.DecimalField(
        max_digits=6, decimal_places=2, default=Decimal("0.00")
    )

    pricing_mode = models.CharField(
        max_length=16,
        default="EXCLUSIVE",
        help_text="Tenant VAT pricing mode at the time of sale.",
    )

    status = models.CharField(max_length=16, choices=Status.choices, default=Status.COMPLETED)
    return_status = models.CharField(
        max_length=16, choices=ReturnStatus.choices, default=ReturnStatus.NONE
    )

    is_credit_sale = models.BooleanField(default=False)
    notes = models.TextField(blank=True)

    cashier = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        related_name="sales",
        help_text="Cashier / staff who processed the sale",
    )

    sale_date = models.DateTimeField(default=timezone.now)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-sale_date", "-created_at"]
        indexes = [
            models.Index(fields=["tenant", "sale_date"], name="sale_tenant_date_idx"),
            models.Index(fields=["tenant", "status"], name="sale_tenant_status_idx"),
            models.Index(fields=["cashier", "sale_date"], name="sale_cashier_date_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["tenant", "sale_number"],
                name="uniq_sale_number_per_tenant",
            ),
        ]

    def __str__(self):
        return f"{self.sale_number} | {self.total_amount}"
