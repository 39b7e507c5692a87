# tenants/models/tax_settings.py

"""
TENANT TAX SETTINGS

One row per tenant, created lazily on first access by
tenants.services.tax_settings_service.get_tax_settings().

Defaults: VAT charged, 16.00%, prices EXCLUSIVE of VAT.
"""

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models

from .tenant import Tenant


class TenantTaxSettings(models.Model):
    class PricingMode(models.TextChoices):
        INCLUSIVE = "INCLUSIVE", "Prices include VAT"
        EXCLUSIVE = "EXCLUSIVE", "VAT added on top"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    tenant = models.OneToOneField(
        Tenant,
        on_delete=models.CASCADE,
        related_name="tax_settings",
    )

    charge_vat = models.BooleanField(default=True)

    default_vat_rate = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal("16.00"),
        help_text="Percent, e.g. 16.00",
    )

    pricing_mode = models.CharField(
        max_length=16,
        choices=PricingMode.choices,
        default=PricingMode.EXCLUSIVE,
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = "Tenant tax settings"

    def clean(self):
        rate = Decimal(self.default_vat_rate or 0)
        if rate < Decimal("0") or rate > Decimal("100"):
            raise ValidationError("default_vat_rate must be between 0 and 100")

    def __str__(self):
        vat = f"{self.default_vat_rate}% {self.pricing_mode}" if self.charge_vat else "VAT off"
        return f"{self.tenant} | {vat}"
