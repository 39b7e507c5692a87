# sales/services/sale_service.py

"""
SALE ENGINE (APPLICATION SERVICE)

Purpose:
- Turn a validated sale request into a COMPLETED Sale (atomic, auditable).
- Compute VAT per line, apply line discounts with proportional tax.
- Reconcile payments against the computed total.
- Deduct every line from its inventory lot through the Inventory Ledger.

Hard rules:
- tenant_id is an explicit argument; no ambient tenant.
- Quantities are integer units.
- Money values are computed server-side; the caller never supplies totals.
- One DB transaction: sale rows + lot decrements + audit rows succeed
  together or roll back together.
- Lots are locked (select_for_update) before availability is checked,
  so concurrent sales against one lot cannot oversell.
- A duplicate deduction for the same sale number and lot is a hard failure.

Totals (round per line, then sum):
- subtotal        = sum of pre-discount line nets
- discount_amount = sum of discounts applied on lines
- tax_amount      = sum of proportionally adjusted line taxes
- total_amount    = sum of line totals = subtotal - discount + tax
- a sale-level discount from the caller is informational only
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation

from django.conf import settings
from django.db import transaction

from products.models import Inventory
from products.services.inventory_ledger import (
    InsufficientStockError,
    SourceType,
    TransactionType,
    deduct_stock,
)
from sales.models import Customer, Sale, SaleLineItem, SalePayment
from sales.services.exceptions import (
    NotFoundError,
    PaymentMismatchError,
    PrescriptionRequiredError,
    SaleValidationError,
)
from sales.services.tax_calculator import (
    TaxCalculation,
    calculate_sale_totals,
    calculate_tax,
    line_as_calculation,
    price_line,
    resolve_line_discount,
)
from tenants.services.sequence_service import next_sale_number
from tenants.services.tax_settings_service import get_tax_settings
from tenants.services.tenant_scope import get_branch_for_tenant, parse_id, require_tenant_id

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")


def _money(v) -> Decimal:
    if v is None or v == "":
        return ZERO
    try:
        return Decimal(str(v)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError) as exc:
        raise SaleValidationError(f"Invalid money value: {v}") from exc


def _optional_money(v) -> Decimal | None:
    if v is None or v == "":
        return None
    return _money(v)


def _to_int_qty(value) -> int:
    if value is None or value == "":
        return 0

    if isinstance(value, bool):
        raise SaleValidationError("quantity must be a whole integer unit")

    if isinstance(value, int):
        return value

    if isinstance(value, str):
        s = value.strip()
        if s.lstrip("-").isdigit():
            return int(s)

    raise SaleValidationError("quantity must be a whole integer unit")


def payment_tolerance() -> Decimal:
    return Decimal(str(getattr(settings, "POS_PAYMENT_TOLERANCE", "0.01")))


def commission_rate() -> Decimal:
    return Decimal(str(getattr(settings, "POS_COMMISSION_RATE", "0.15")))


# ============================================================
# RETURN STATUS (shared with returns + edit approvals)
# ============================================================

def compute_return_status(lines) -> str:
    """
    FULL    every line fully returned (and there is at least one line)
    PARTIAL any line has a nonzero return
    NONE    otherwise
    """
    lines = list(lines)
    if not lines:
        return Sale.ReturnStatus.NONE

    if all(int(l.returned_quantity or 0) >= int(l.quantity or 0) for l in lines):
        return Sale.ReturnStatus.FULL

    if any(int(l.returned_quantity or 0) > 0 for l in lines):
        return Sale.ReturnStatus.PARTIAL

    return Sale.ReturnStatus.NONE


def recalculate_sale_totals(*, sale: Sale) -> Sale:
    """
    Re-derive header totals and return status from the CURRENT line rows.

    Lines are re-read from the database, never taken from a cached
    relation, so a just-updated or just-deleted line is reflected.
    """
    lines = list(SaleLineItem.objects.filter(sale_id=sale.id).order_by("created_at"))

    subtotal = _money(sum((Decimal(l.net_amount) for l in lines), ZERO))
    discount = _money(sum((Decimal(l.discount_amount) for l in lines), ZERO))

    aggregate = calculate_sale_totals(
        TaxCalculation(
            net_amount=_money(Decimal(l.net_amount) - Decimal(l.discount_amount)),
            tax_amount=_money(l.tax_amount),
            gross_amount=_money(l.line_total),
            tax_rate=_money(l.tax_percentage),
            tax_type="LINE",
        )
        for l in lines
    )

    sale.subtotal = subtotal
    sale.discount_amount = discount
    sale.tax_amount = aggregate.tax_amount
    sale.total_amount = _money(subtotal + aggregate.tax_amount - discount)
    sale.effective_tax_rate = aggregate.tax_rate
    sale.return_status = compute_return_status(lines)
    sale.save(
        update_fields=[
            "subtotal",
            "discount_amount",
            "tax_amount",
            "total_amount",
            "effective_tax_rate",
            "return_status",
            "updated_at",
        ]
    )
    return sale


# ============================================================
# VALIDATION HELPERS
# ============================================================

def _resolve_customer(*, tenant_id, customer_id):
    if not customer_id:
        return None
    customer = Customer.objects.filter(
        id=parse_id(customer_id, label="Customer"), tenant_id=tenant_id
    ).first()
    if customer is None:
        raise NotFoundError(f"Customer not found: {customer_id}")
    return customer


def _lock_lots(*, line_items) -> dict:
    ids = []
    for line in line_items:
        inventory_id = line.get("inventory_id")
        if not inventory_id:
            raise SaleValidationError("Each line item requires an inventory_id")
        inventory_id = parse_id(inventory_id, label="Inventory")
        if inventory_id in ids:
            raise SaleValidationError(
                f"Inventory lot {inventory_id} appears on more than one line; "
                "combine the quantities into one line"
            )
        ids.append(inventory_id)

    # Always lock lots in id order.
    lots = (
        Inventory.objects
        .select_for_update(of=("self",))
        .filter(id__in=ids)
        .select_related("product", "branch")
        .order_by("id")
    )
    return {str(lot.id): lot for lot in lots}


def _validate_line(*, tenant_id, branch, line: dict, lots: dict) -> dict:
    inventory_id = str(parse_id(line.get("inventory_id"), label="Inventory"))
    lot = lots.get(inventory_id)

    # Wrong tenant is reported exactly like a missing lot.
    if lot is None or str(lot.branch.tenant_id) != str(tenant_id):
        raise NotFoundError(f"Inventory not found: {inventory_id}")

    product = lot.product
    if str(product.tenant_id) != str(tenant_id):
        raise NotFoundError(f"Inventory not found: {inventory_id}")

    if lot.branch_id != branch.id:
        raise SaleValidationError(
            f"Inventory {inventory_id} does not belong to branch {branch.name}"
        )

    product_id = line.get("product_id")
    if product_id and parse_id(product_id, label="Product") != product.id:
        raise SaleValidationError(
            f"Inventory {inventory_id} holds {product.name}, not product {product_id}"
        )

    qty = _to_int_qty(line.get("quantity"))
    if qty <= 0:
        raise SaleValidationError(f"Quantity for {product.name} must be greater than zero")

    unit_price = _money(line.get("unit_price"))
    if unit_price < ZERO:
        raise SaleValidationError(f"Unit price for {product.name} cannot be negative")

    discount_amount = _optional_money(line.get("discount_amount"))
    if discount_amount is not None and discount_amount < ZERO:
        raise SaleValidationError(f"Discount for {product.name} cannot be negative")

    discount_percentage = _optional_money(line.get("discount_percentage"))
    if discount_percentage is not None and not (ZERO <= discount_percentage <= Decimal("100")):
        raise SaleValidationError(
            f"Discount percentage for {product.name} must be between 0 and 100"
        )

    available = int(lot.quantity or 0)
    if available < qty:
        raise InsufficientStockError(
            f"Insufficient stock for {product.name}. "
            f"Requested: {qty}, Available: {available}"
        )

    prescription_reference = (line.get("prescription_reference") or "").strip()
    if product.requires_prescription and not prescription_reference:
        raise PrescriptionRequiredError(
            f"{product.name} requires a prescription reference"
        )

    return {
        "lot": lot,
        "product": product,
        "quantity": qty,
        "unit_price": unit_price,
        "discount_amount": discount_amount,
        "discount_percentage": discount_percentage,
        "prescription_reference": prescription_reference,
        "notes": (line.get("notes") or "").strip(),
    }


def _validate_payments(*, payments, is_credit_sale: bool, totals: TaxCalculation, subtotal, discount) -> list[dict]:
    cleaned = []
    for p in payments or []:
        method = (p.get("payment_method") or "").strip().upper()
        if method not in SalePayment.Method.values:
            raise SaleValidationError(f"Invalid payment method: {p.get('payment_method')}")

        amount = _money(p.get("amount"))
        if amount <= ZERO:
            raise SaleValidationError("Payment amounts must be greater than zero")

        reference = (p.get("reference_number") or "").strip()
        if method not in SalePayment.REFERENCE_NOT_REQUIRED and not reference:
            raise SaleValidationError(f"{method} payments require a reference number")

        cleaned.append(
            {
                "payment_method": method,
                "amount": amount,
                "reference_number": reference,
                "notes": (p.get("notes") or "").strip(),
            }
        )

    paid = _money(sum((p["amount"] for p in cleaned), ZERO))
    expected = totals.gross_amount

    if is_credit_sale:
        if paid > expected:
            raise PaymentMismatchError(
                f"Credit sale payments ({paid}) exceed the sale total ({expected})"
            )
        return cleaned

    difference = _money(paid - expected)
    if abs(difference) > payment_tolerance():
        raise PaymentMismatchError(
            "Payment amount mismatch. "
            f"Subtotal (after discounts): {_money(subtotal - discount)}, "
            f"Tax: {totals.tax_amount}, "
            f"Expected total: {expected}, "
            f"Paid: {paid}, "
            f"Difference: {difference}"
        )
    return cleaned


# ============================================================
# CREATE SALE
# ============================================================

@transaction.atomic
def create_sale(
    *,
    tenant_id,
    cashier,
    branch_id,
    line_items,
    payments=None,
    is_credit_sale: bool = False,
    customer_id=None,
    customer_name: str = "",
    customer_phone: str = "",
    discount_amount=None,
    notes: str = "",
) -> Sale:
    """
    FLOW:
    1) Resolve tenant, branch, customer
    2) Lock + validate every referenced lot
    3) Price each line (tax on pre-discount price, proportional discount)
    4) Aggregate and reconcile payments
    5) Allocate sale number, persist Sale -> lines -> payments
    6) Deduct each line through the Inventory Ledger (audited, exactly-once)
    """
    require_tenant_id(tenant_id)

    # --------------------------------------------------
    # 1. CONTEXT
    # --------------------------------------------------
    branch = get_branch_for_tenant(tenant_id=tenant_id, branch_id=branch_id)
    customer = _resolve_customer(tenant_id=tenant_id, customer_id=customer_id)

    if not line_items:
        raise SaleValidationError("A sale requires at least one line item")

    declared_discount = _money(discount_amount)
    if declared_discount < ZERO:
        raise SaleValidationError("Discount amount cannot be negative")

    # --------------------------------------------------
    # 2. LOCK + VALIDATE LOTS
    # --------------------------------------------------
    lots = _lock_lots(line_items=line_items)
    validated = [
        _validate_line(tenant_id=tenant_id, branch=branch, line=line, lots=lots)
        for line in line_items
    ]

    # --------------------------------------------------
    # 3. PRICE LINES
    # --------------------------------------------------
    tax_settings = get_tax_settings(tenant_id=tenant_id)

    for v in validated:
        calc = calculate_tax(
            product=v["product"],
            quantity=v["quantity"],
            unit_price=v["unit_price"],
            tax_settings=tax_settings,
        )
        discount = resolve_line_discount(
            net_amount=calc.net_amount,
            discount_amount=v["discount_amount"],
            discount_percentage=v["discount_percentage"],
        )
        v["pricing"] = price_line(calculation=calc, discount_amount=discount)

    # --------------------------------------------------
    # 4. AGGREGATE + RECONCILE PAYMENTS
    # --------------------------------------------------
    totals = calculate_sale_totals(line_as_calculation(v["pricing"]) for v in validated)
    subtotal = _money(sum((v["pricing"].net_amount for v in validated), ZERO))
    applied_discount = _money(sum((v["pricing"].discount_amount for v in validated), ZERO))

    cleaned_payments = _validate_payments(
        payments=payments,
        is_credit_sale=bool(is_credit_sale),
        totals=totals,
        subtotal=subtotal,
        discount=applied_discount,
    )

    # --------------------------------------------------
    # 5. PERSIST
    # --------------------------------------------------
    sale = Sale.objects.create(
        tenant_id=tenant_id,
        branch=branch,
        sale_number=next_sale_number(tenant_id=tenant_id),
        customer=customer,
        customer_name=(customer_name or (customer.name if customer else "")).strip(),
        customer_phone=(customer_phone or (customer.phone if customer else "")).strip(),
        subtotal=subtotal,
        tax_amount=totals.tax_amount,
        discount_amount=applied_discount,
        total_amount=totals.gross_amount,
        declared_discount_amount=declared_discount,
        effective_tax_rate=totals.tax_rate,
        pricing_mode=tax_settings.pricing_mode,
        status=Sale.Status.COMPLETED,
        return_status=Sale.ReturnStatus.NONE,
        is_credit_sale=bool(is_credit_sale),
        notes=(notes or "").strip(),
        cashier=cashier,
    )

    line_rows = []
    for v in validated:
        pricing = v["pricing"]
        lot = v["lot"]
        line_rows.append(
            SaleLineItem.objects.create(
                sale=sale,
                product=v["product"],
                inventory=lot,
                quantity=v["quantity"],
                unit_price=v["unit_price"],
                discount_percentage=v["discount_percentage"],
                discount_amount=pricing.discount_amount,
                net_amount=pricing.net_amount,
                tax_percentage=pricing.tax_rate,
                tax_amount=pricing.tax_amount,
                line_total=pricing.line_total,
                batch_number=lot.batch_number or "",
                expiry_date=lot.expiry_date,
                prescription_reference=v["prescription_reference"],
                notes=v["notes"],
            )
        )

    for p in cleaned_payments:
        SalePayment.objects.create(sale=sale, **p)

    # --------------------------------------------------
    # 6. DEDUCT STOCK (AUDITED, EXACTLY-ONCE)
    # --------------------------------------------------
    for line in line_rows:
        deduct_stock(
            tenant_id=tenant_id,
            inventory_id=line.inventory_id,
            quantity=line.quantity,
            source_reference=sale.sale_number,
            source_type=SourceType.SALE,
            transaction_type=TransactionType.SALE,
            performed_by=cashier,
            selling_price=line.unit_price,
            source_id=sale.id,
            notes=f"Sale transaction: {line.product.name}",
        )

    logger.info(
        "Sale created",
        extra={
            "tenant_id": str(tenant_id),
            "sale_number": sale.sale_number,
            "total_amount": str(sale.total_amount),
            "lines": len(line_rows),
        },
    )

    return get_sale(tenant_id=tenant_id, sale_id=sale.id)


# ============================================================
# READS
# ============================================================

def sales_for_tenant(*, tenant_id):
    require_tenant_id(tenant_id)
    return (
        Sale.objects.filter(tenant_id=tenant_id)
        .select_related("branch", "cashier", "customer")
        .prefetch_related("line_items", "line_items__product", "payments")
    )


def get_sale(*, tenant_id, sale_id) -> Sale:
    sale = sales_for_tenant(tenant_id=tenant_id).filter(
        id=parse_id(sale_id, label="Sale")
    ).first()
    if sale is None:
        raise NotFoundError(f"Sale not found: {sale_id}")
    return sale


# ============================================================
# COMMISSION (REPORTING ONLY, COMPUTED ON READ)
# ============================================================

@dataclass(frozen=True)
class CommissionSummary:
    sales_count: int
    gross_margin: Decimal
    commission_rate: Decimal
    commission: Decimal


def _line_unit_cost(line: SaleLineItem):
    product_cost = getattr(line.product, "unit_cost", None)
    if product_cost is not None:
        return Decimal(product_cost)
    lot = line.inventory
    if lot is not None and lot.unit_cost is not None:
        return Decimal(lot.unit_cost)
    return None


def calculate_commission(*, tenant_id, cashier, date_from=None, date_to=None) -> CommissionSummary:
    """
    commission = rate x sum(max(0, unit_price - unit_cost) x (quantity - returned))

    Lines with no known cost contribute no margin.
    """
    require_tenant_id(tenant_id)

    lines = SaleLineItem.objects.filter(
        sale__tenant_id=tenant_id,
        sale__cashier=cashier,
        sale__status=Sale.Status.COMPLETED,
    ).select_related("product", "inventory")

    if date_from:
        lines = lines.filter(sale__sale_date__date__gte=date_from)
    if date_to:
        lines = lines.filter(sale__sale_date__date__lte=date_to)

    margin = ZERO
    sale_ids = set()
    for line in lines:
        sale_ids.add(line.sale_id)
        cost = _line_unit_cost(line)
        if cost is None:
            continue
        kept = int(line.quantity or 0) - int(line.returned_quantity or 0)
        if kept <= 0:
            continue
        unit_margin = max(Decimal(line.unit_price) - cost, ZERO)
        margin += unit_margin * kept

    rate = commission_rate()
    return CommissionSummary(
        sales_count=len(sale_ids),
        gross_margin=_money(margin),
        commission_rate=rate,
        commission=_money(margin * rate),
    )
