# sales/services/return_service.py

"""
RETURN ENGINE (DOMAIN-CONTROLLED)

Purpose:
- Accept partial or full returns against a COMPLETED sale.
- Restore returned stock through the Inventory Ledger (best-effort).
- Keep SaleLineItem.returned_quantity and Sale.return_status in step.

GUARANTEES:
- Already-returned quantity is the SUM over every prior SaleReturnLineItem
  for the line (one aggregate query), not the running counter.
- The sale row and the touched line rows are locked first, so two
  concurrent returns against one line serialise and cannot both succeed.
- A rejected request writes nothing (no header, no stock, no counters).
- Missing restore lot: warning logged, return still recorded.

FLOW:
1) Lock + validate the sale (COMPLETED, not fully returned)
2) Validate every requested line against its remaining quantity
3) Allocate the return number, persist header then lines
4) Restore stock where requested
5) Bump returned_quantity, recompute return status over ALL lines
"""

from __future__ import annotations

import logging
from collections import defaultdict
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation

from django.db import transaction
from django.db.models import Sum

from products.services.inventory_ledger import (
    SourceType,
    find_restore_lot,
    restore_stock,
)
from sales.models import Sale, SaleLineItem, SaleReturn, SaleReturnLineItem
from sales.services.exceptions import NotFoundError, ReturnValidationError
from sales.services.sale_service import recalculate_sale_totals
from tenants.services.sequence_service import next_return_number
from tenants.services.tenant_scope import parse_id, require_tenant_id

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")


def _money(v) -> Decimal:
    try:
        return Decimal(str(v)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError) as exc:
        raise ReturnValidationError(f"Invalid money value: {v}") from exc


def already_returned_by_line(line_ids) -> dict:
    """
    {line_id: total quantity returned across all prior returns}
    """
    rows = (
        SaleReturnLineItem.objects
        .filter(original_sale_line_item_id__in=list(line_ids))
        .values("original_sale_line_item_id")
        .annotate(total=Sum("quantity_returned"))
    )
    return {str(r["original_sale_line_item_id"]): int(r["total"] or 0) for r in rows}


def _lock_sale(*, tenant_id, sale_id) -> Sale:
    sale = (
        Sale.objects
        .select_for_update()
        .filter(id=parse_id(sale_id, label="Sale"), tenant_id=tenant_id)
        .first()
    )
    if sale is None:
        raise NotFoundError(f"Sale not found: {sale_id}")
    return sale


@transaction.atomic
def create_sale_return(
    *,
    tenant_id,
    processed_by,
    original_sale_id,
    return_reason: str,
    return_line_items,
    notes: str = "",
) -> SaleReturn:
    require_tenant_id(tenant_id)

    # --------------------------------------------------
    # 1. SALE VALIDATION
    # --------------------------------------------------
    sale = _lock_sale(tenant_id=tenant_id, sale_id=original_sale_id)

    if sale.status != Sale.Status.COMPLETED:
        raise ReturnValidationError(
            f"Only completed sales can be returned. Sale {sale.sale_number} is {sale.status}"
        )
    if sale.return_status == Sale.ReturnStatus.FULL:
        raise ReturnValidationError(f"Sale {sale.sale_number} has already been fully returned")

    reason = (return_reason or "").strip()
    if not reason:
        raise ReturnValidationError("A return reason is required")

    if not return_line_items:
        raise ReturnValidationError("A return requires at least one line item")

    # --------------------------------------------------
    # 2. LINE VALIDATION
    # --------------------------------------------------
    requested_ids = [
        str(parse_id(r.get("original_sale_line_item_id"), label="Sale line item"))
        for r in return_line_items
    ]
    lines = {
        str(l.id): l
        for l in (
            SaleLineItem.objects
            .select_for_update(of=("self",))
            .filter(sale_id=sale.id, id__in=requested_ids)
            .select_related("product")
            .order_by("id")
        )
    }

    already = already_returned_by_line(lines.keys())
    requested_totals = defaultdict(int)
    validated = []

    for r in return_line_items:
        line_id = str(parse_id(r.get("original_sale_line_item_id"), label="Sale line item"))
        line = lines.get(line_id)
        if line is None:
            raise NotFoundError(f"Sale line item not found on sale {sale.sale_number}: {line_id}")

        qty = r.get("quantity_returned")
        if isinstance(qty, bool) or not isinstance(qty, int):
            raise ReturnValidationError("quantity_returned must be a whole integer unit")
        if qty <= 0:
            raise ReturnValidationError("Return quantity must be greater than zero")

        requested_totals[line_id] += qty
        already_qty = already.get(line_id, 0)
        available = int(line.quantity) - already_qty
        if requested_totals[line_id] > available:
            raise ReturnValidationError(
                f"Cannot return more items than available for {line.product.name}. "
                f"Requested: {requested_totals[line_id]}, Available: {available}, "
                f"Already returned: {already_qty}"
            )

        unit_price = r.get("unit_price")
        unit_price = _money(line.unit_price if unit_price is None else unit_price)
        if unit_price < ZERO:
            raise ReturnValidationError("Return unit price cannot be negative")

        validated.append(
            {
                "line": line,
                "quantity": qty,
                "unit_price": unit_price,
                "refund_amount": _money(unit_price * qty),
                "restore_to_inventory": bool(r.get("restore_to_inventory", True)),
                "notes": (r.get("notes") or "").strip(),
            }
        )

    # --------------------------------------------------
    # 3. PERSIST HEADER + LINES
    # --------------------------------------------------
    total_refund = _money(sum((v["refund_amount"] for v in validated), ZERO))

    sale_return = SaleReturn.objects.create(
        tenant_id=tenant_id,
        original_sale=sale,
        return_number=next_return_number(tenant_id=tenant_id),
        return_reason=reason,
        total_refund_amount=total_refund,
        status=SaleReturn.Status.PROCESSED,
        processed_by=processed_by,
        notes=(notes or "").strip(),
    )

    for v in validated:
        line = v["line"]
        SaleReturnLineItem.objects.create(
            sale_return=sale_return,
            original_sale_line_item=line,
            product=line.product,
            quantity_returned=v["quantity"],
            unit_price=v["unit_price"],
            refund_amount=v["refund_amount"],
            restore_to_inventory=v["restore_to_inventory"],
            notes=v["notes"],
        )

        # --------------------------------------------------
        # 4. RESTORE STOCK (BEST-EFFORT)
        # --------------------------------------------------
        if v["restore_to_inventory"]:
            _restore_line_stock(
                tenant_id=tenant_id,
                sale=sale,
                line=line,
                quantity=v["quantity"],
                sale_return=sale_return,
                performed_by=processed_by,
            )

        # --------------------------------------------------
        # 5. RETURNED QUANTITY
        # --------------------------------------------------
        line.returned_quantity = int(line.returned_quantity or 0) + v["quantity"]
        line.save(update_fields=["returned_quantity"])

    recalculate_sale_totals(sale=sale)

    logger.info(
        "Sale return processed",
        extra={
            "tenant_id": str(tenant_id),
            "sale_number": sale.sale_number,
            "return_number": sale_return.return_number,
            "total_refund_amount": str(total_refund),
            "return_status": sale.return_status,
        },
    )

    return get_sale_return(tenant_id=tenant_id, return_id=sale_return.id)


def _restore_line_stock(*, tenant_id, sale, line, quantity, sale_return, performed_by):
    lot = find_restore_lot(
        product_id=line.product_id,
        branch_id=sale.branch_id,
        batch_number=line.batch_number,
    )
    if lot is None:
        logger.warning(
            "No inventory lot found to restore returned stock",
            extra={
                "tenant_id": str(tenant_id),
                "return_number": sale_return.return_number,
                "product_id": str(line.product_id),
                "branch_id": str(sale.branch_id),
                "batch_number": line.batch_number,
            },
        )
        return None

    note = f"Return: {line.product.name}"
    if lot.batch_number != line.batch_number:
        note = f"{note} (sold from batch '{line.batch_number}', restored to '{lot.batch_number}')"

    return restore_stock(
        tenant_id=tenant_id,
        inventory_id=lot.id,
        quantity=quantity,
        source_reference=sale_return.return_number,
        source_type=SourceType.RETURN,
        performed_by=performed_by,
        source_id=sale_return.id,
        notes=note,
    )


# ============================================================
# READS
# ============================================================

def returns_for_tenant(*, tenant_id):
    require_tenant_id(tenant_id)
    return (
        SaleReturn.objects.filter(tenant_id=tenant_id)
        .select_related("original_sale", "processed_by")
        .prefetch_related("line_items", "line_items__product")
    )


def get_sale_return(*, tenant_id, return_id) -> SaleReturn:
    sale_return = returns_for_tenant(tenant_id=tenant_id).filter(
        id=parse_id(return_id, label="Sale return")
    ).first()
    if sale_return is None:
        raise NotFoundError(f"Sale return not found: {return_id}")
    return sale_return
