# tenants/services/tax_settings_service.py

"""
TENANT TAX SETTINGS PROVIDER

- get_tax_settings(): lazily creates defaults on first access
  (VAT on, POS_DEFAULT_VAT_RATE, EXCLUSIVE)
- update_tax_settings(): validated partial update
"""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation

from django.conf import settings
from django.db import transaction

from tenants.models import TenantTaxSettings
from tenants.services.tenant_scope import get_tenant

logger = logging.getLogger(__name__)


class TaxSettingsError(ValueError):
    pass


def _default_vat_rate() -> Decimal:
    return Decimal(str(getattr(settings, "POS_DEFAULT_VAT_RATE", "16.00")))


def get_tax_settings(*, tenant_id) -> TenantTaxSettings:
    tenant = get_tenant(tenant_id=tenant_id)

    tax_settings, created = TenantTaxSettings.objects.get_or_create(
        tenant=tenant,
        defaults={
            "charge_vat": True,
            "default_vat_rate": _default_vat_rate(),
            "pricing_mode": TenantTaxSettings.PricingMode.EXCLUSIVE,
        },
    )
    if created:
        logger.info(
            "Created default tax settings",
            extra={"tenant_id": str(tenant.id)},
        )
    return tax_settings


@transaction.atomic
def update_tax_settings(
    *,
    tenant_id,
    charge_vat: bool | None = None,
    default_vat_rate=None,
    pricing_mode: str | None = None,
) -> TenantTaxSettings:
    tax_settings = get_tax_settings(tenant_id=tenant_id)
    tax_settings = TenantTaxSettings.objects.select_for_update().get(pk=tax_settings.pk)

    if default_vat_rate is not None:
        try:
            rate = Decimal(str(default_vat_rate))
        except (InvalidOperation, ValueError) as exc:
            raise TaxSettingsError("default_vat_rate must be a valid decimal") from exc
        if rate < Decimal("0") or rate > Decimal("100"):
            raise TaxSettingsError("VAT rate must be between 0 and 100")
        tax_settings.default_vat_rate = rate

    if pricing_mode is not None:
        mode = str(pricing_mode).strip().upper()
        if mode not in TenantTaxSettings.PricingMode.values:
            raise TaxSettingsError("Pricing mode must be INCLUSIVE or EXCLUSIVE")
        tax_settings.pricing_mode = mode

    if charge_vat is not None:
        tax_settings.charge_vat = bool(charge_vat)

    tax_settings.save()

    logger.info(
        "Updated tax settings",
        extra={
            "tenant_id": str(tenant_id),
            "charge_vat": tax_settings.charge_vat,
            "default_vat_rate": str(tax_settings.default_vat_rate),
            "pricing_mode": tax_settings.pricing_mode,
        },
    )
    return tax_settings
