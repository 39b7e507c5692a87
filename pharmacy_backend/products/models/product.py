# products/models/product.py

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Sum

from tenants.models import Tenant


class Product(models.Model):
    """
    Represents a sellable product.

    STOCK MODEL (IMPORTANT):
    - Product itself does NOT store stock
    - Stock lives in Inventory lots (per branch, per batch)

    TAX MODEL:
    - tax_classification selects the VAT rule (STANDARD / REDUCED / ZERO / EXEMPT)
    - tax_rate optionally overrides the tenant default for STANDARD and REDUCED
    """

    class TaxClassification(models.TextChoices):
        STANDARD = "STANDARD", "Standard rate"
        REDUCED = "REDUCED", "Reduced rate"
        ZERO = "ZERO", "Zero rated"
        EXEMPT = "EXEMPT", "Exempt"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    tenant = models.ForeignKey(
        Tenant,
        on_delete=models.CASCADE,
        related_name="products",
    )

    sku = models.CharField(max_length=128, db_index=True)
    name = models.CharField(max_length=255, db_index=True)
    barcode = models.CharField(max_length=128, blank=True, db_index=True)

    # Reference cost, used for commission when set
    unit_cost = models.DecimalField(
        max_digits=12, decimal_places=2, null=True, blank=True
    )

    selling_price = models.DecimalField(
        max_digits=12, decimal_places=2, null=True, blank=True
    )

    tax_classification = models.CharField(
        max_length=16,
        choices=TaxClassification.choices,
        default=TaxClassification.STANDARD,
    )

    tax_rate = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Optional override percent for STANDARD/REDUCED products.",
    )

    requires_prescription = models.BooleanField(default=False)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["tenant", "name"], name="product_tenant_name_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["tenant", "sku"],
                name="uniq_product_sku_per_tenant",
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.sku})"

    def clean(self):
        if self.tax_rate is not None:
            rate = Decimal(self.tax_rate)
            if rate < Decimal("0") or rate > Decimal("100"):
                raise ValidationError("tax_rate must be between 0 and 100")

        if self.unit_cost is not None and Decimal(self.unit_cost) < Decimal("0.00"):
            raise ValidationError("unit_cost cannot be negative")

    def stock_at_branch(self, branch) -> int:
        branch_id = getattr(branch, "id", branch)
        return (
            self.inventory_lots.filter(branch_id=branch_id)
            .aggregate(total=Sum("quantity"))
            .get("total")
            or 0
        )
