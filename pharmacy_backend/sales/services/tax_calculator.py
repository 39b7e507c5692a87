# sales/services/tax_calculator.py

"""
TAX CALCULATOR (VAT)

Pure functions. No database writes, no side effects.

RULES:
- VAT off for the tenant, or a 0% rate: net == gross, tax == 0
- Rate by product classification:
    STANDARD -> product.tax_rate or tenant default
    REDUCED  -> product.tax_rate or POS_REDUCED_VAT_RATE
    ZERO / EXEMPT -> 0
- EXCLUSIVE: net = price x qty, tax = net x rate / 100, gross = net + tax
- INCLUSIVE: gross = price x qty, tax = gross x rate / (100 + rate), net = gross - tax
- Every money value is rounded to 2dp HALF_UP at the step that produces it.
  Lines are rounded first, then summed.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

from django.conf import settings

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")
HUNDRED = Decimal("100")

INCLUSIVE = "INCLUSIVE"
EXCLUSIVE = "EXCLUSIVE"

SALE_TOTAL_TAX_TYPE = "SALE_TOTAL"


def _money(v) -> Decimal:
    return Decimal(str(v if v is not None else "0.00")).quantize(
        TWOPLACES, rounding=ROUND_HALF_UP
    )


def reduced_vat_rate() -> Decimal:
    return Decimal(str(getattr(settings, "POS_REDUCED_VAT_RATE", "8.00")))


@dataclass(frozen=True)
class TaxCalculation:
    net_amount: Decimal
    tax_amount: Decimal
    gross_amount: Decimal
    tax_rate: Decimal
    tax_type: str


@dataclass(frozen=True)
class LinePricing:
    """
    Result of applying a line discount to a TaxCalculation.

    net_amount is the pre-discount net; discount_amount is what was
    actually applied (never more than net_amount).
    """

    net_amount: Decimal
    discount_amount: Decimal
    discounted_net_amount: Decimal
    tax_amount: Decimal
    line_total: Decimal
    tax_rate: Decimal


def resolve_tax_rate(*, product, tax_settings) -> Decimal:
    if not tax_settings.charge_vat:
        return ZERO

    classification = getattr(product, "tax_classification", "STANDARD")
    override = getattr(product, "tax_rate", None)

    if classification == "STANDARD":
        rate = override if override is not None else tax_settings.default_vat_rate
    elif classification == "REDUCED":
        rate = override if override is not None else reduced_vat_rate()
    else:
        rate = ZERO

    return _money(rate)


def calculate_tax_at_rate(
    *,
    quantity,
    unit_price,
    rate,
    pricing_mode: str,
    tax_type: str = "STANDARD",
) -> TaxCalculation:
    rate = _money(rate)
    amount = _money(Decimal(str(unit_price)) * Decimal(int(quantity)))

    if rate == ZERO:
        return TaxCalculation(
            net_amount=amount,
            tax_amount=ZERO,
            gross_amount=amount,
            tax_rate=ZERO,
            tax_type=tax_type,
        )

    if pricing_mode == INCLUSIVE:
        gross = amount
        tax = _money(gross * rate / (HUNDRED + rate))
        net = _money(gross - tax)
    else:
        net = amount
        tax = _money(net * rate / HUNDRED)
        gross = _money(net + tax)

    return TaxCalculation(
        net_amount=net,
        tax_amount=tax,
        gross_amount=gross,
        tax_rate=rate,
        tax_type=tax_type,
    )


def calculate_tax(*, product, quantity, unit_price, tax_settings) -> TaxCalculation:
    rate = resolve_tax_rate(product=product, tax_settings=tax_settings)
    return calculate_tax_at_rate(
        quantity=quantity,
        unit_price=unit_price,
        rate=rate,
        pricing_mode=tax_settings.pricing_mode,
        tax_type=getattr(product, "tax_classification", "STANDARD"),
    )


def calculate_sale_totals(calculations: Iterable[TaxCalculation]) -> TaxCalculation:
    calcs = list(calculations)

    total_net = _money(sum((c.net_amount for c in calcs), ZERO))
    total_tax = _money(sum((c.tax_amount for c in calcs), ZERO))
    total_gross = _money(sum((c.gross_amount for c in calcs), ZERO))

    if total_net > ZERO:
        effective_rate = _money(total_tax / total_net * HUNDRED)
    else:
        effective_rate = ZERO

    return TaxCalculation(
        net_amount=total_net,
        tax_amount=total_tax,
        gross_amount=total_gross,
        tax_rate=effective_rate,
        tax_type=SALE_TOTAL_TAX_TYPE,
    )


def resolve_line_discount(*, net_amount, discount_amount=None, discount_percentage=None) -> Decimal:
    """
    Explicit amount wins; otherwise a percentage of the pre-discount net.
    """
    if discount_amount is not None:
        return _money(discount_amount)
    if discount_percentage is not None:
        return _money(Decimal(str(net_amount)) * Decimal(str(discount_percentage)) / HUNDRED)
    return ZERO


def price_line(*, calculation: TaxCalculation, discount_amount=None) -> LinePricing:
    """
    Apply a discount to the NET amount and scale tax proportionally:

        adjusted_tax = tax x (discounted_net / net)

    Line total = discounted net + adjusted tax, floored at 0.
    """
    net = calculation.net_amount
    tax = calculation.tax_amount
    discount = _money(discount_amount or ZERO)

    if discount < ZERO:
        raise ValueError("Discount cannot be negative")

    applied = min(discount, max(net, ZERO))
    discounted_net = _money(net - applied)

    if applied > ZERO and net > ZERO:
        adjusted_tax = max(_money(discounted_net * tax / net), ZERO)
    else:
        adjusted_tax = tax

    line_total = max(_money(discounted_net + adjusted_tax), ZERO)

    return LinePricing(
        net_amount=net,
        discount_amount=applied,
        discounted_net_amount=discounted_net,
        tax_amount=adjusted_tax,
        line_total=line_total,
        tax_rate=calculation.tax_rate,
    )


def line_as_calculation(pricing: LinePricing, tax_type: str = "LINE") -> TaxCalculation:
    """Discounted line expressed as a TaxCalculation for aggregation."""
    return TaxCalculation(
        net_amount=pricing.discounted_net_amount,
        tax_amount=pricing.tax_amount,
        gross_amount=pricing.line_total,
        tax_rate=pricing.tax_rate,
        tax_type=tax_type,
    )
