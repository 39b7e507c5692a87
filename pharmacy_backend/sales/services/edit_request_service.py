# sales/services/edit_request_service.py

"""
SALE EDIT REQUESTS (MAKER-CHECKER)

Purpose:
- A cashier (maker) proposes a PRICE_CHANGE or LINE_DELETE on a COMPLETED sale.
- An admin (checker) approves or rejects it exactly once.

GUARANTEES:
- Status moves only PENDING -> APPROVED or PENDING -> REJECTED
  (edit_request_lifecycle.validate_transition).
- The request row is locked while deciding, so a second decision fails.
- The checker is never the maker of the same request.
- PRICE_CHANGE re-prices the line with the Tax Calculator at the line's
  stored tax rate and the sale's pricing mode, keeping its discount, then
  re-derives the sale totals from the current lines.
- LINE_DELETE restores the line's stock (RETURN audit, source SALE_EDIT,
  reference = sale number), deletes the line, then re-derives totals.
- Reject touches nothing but the request.
"""

from __future__ import annotations

import logging
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation

from django.db import transaction
from django.utils import timezone

from permissions.roles import CAP_SALES_EDIT_APPROVE, user_has_capability
from products.services.inventory_ledger import SourceType, find_restore_lot, restore_stock
from sales.models import Sale, SaleEditRequest, SaleLineItem
from sales.services.edit_request_lifecycle import target_status_for, validate_transition
from sales.services.exceptions import (
    EditRequestError,
    EditRequestPermissionError,
    NotFoundError,
)
from sales.services.sale_service import recalculate_sale_totals
from sales.services.tax_calculator import calculate_tax_at_rate, price_line
from tenants.services.tenant_scope import parse_id, require_tenant_id

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")

RequestType = SaleEditRequest.RequestType
Status = SaleEditRequest.Status


def _money(v) -> Decimal:
    try:
        return Decimal(str(v)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise EditRequestError(f"Invalid money value: {v}") from exc


# ============================================================
# CREATE (MAKER)
# ============================================================

@transaction.atomic
def create_edit_request(
    *,
    tenant_id,
    requested_by,
    sale_id,
    sale_line_item_id,
    request_type: str,
    reason: str,
    new_unit_price=None,
) -> SaleEditRequest:
    require_tenant_id(tenant_id)

    sale = Sale.objects.filter(id=parse_id(sale_id, label="Sale"), tenant_id=tenant_id).first()
    if sale is None:
        raise NotFoundError(f"Sale not found: {sale_id}")

    if sale.status != Sale.Status.COMPLETED:
        raise EditRequestError(
            f"Only completed sales can be edited. Sale {sale.sale_number} is {sale.status}"
        )

    line = SaleLineItem.objects.filter(
        id=parse_id(sale_line_item_id, label="Sale line item"), sale=sale
    ).first()
    if line is None:
        raise NotFoundError(
            f"Sale line item not found on sale {sale.sale_number}: {sale_line_item_id}"
        )

    rtype = (request_type or "").strip().upper()
    if rtype not in RequestType.values:
        raise EditRequestError("request_type must be PRICE_CHANGE or LINE_DELETE")

    price = None
    if rtype == RequestType.PRICE_CHANGE:
        if new_unit_price is None:
            raise EditRequestError("new_unit_price is required for a price change")
        price = _money(new_unit_price)
        if price <= Decimal("0.00"):
            raise EditRequestError("new_unit_price must be greater than zero")

    reason = (reason or "").strip()
    if not reason:
        raise EditRequestError("A reason is required")

    edit_request = SaleEditRequest.objects.create(
        tenant_id=tenant_id,
        sale=sale,
        sale_line_item=line,
        request_type=rtype,
        new_unit_price=price,
        original_unit_price=line.unit_price,
        reason=reason,
        status=Status.PENDING,
        requested_by=requested_by,
    )

    logger.info(
        "Sale edit requested",
        extra={
            "tenant_id": str(tenant_id),
            "sale_number": sale.sale_number,
            "request_id": str(edit_request.id),
            "request_type": rtype,
        },
    )
    return edit_request


# ============================================================
# DECIDE (CHECKER)
# ============================================================

@transaction.atomic
def approve_or_reject(
    *,
    tenant_id,
    request_id,
    approver,
    approved: bool,
    rejection_reason: str = "",
) -> SaleEditRequest:
    require_tenant_id(tenant_id)

    if not user_has_capability(approver, CAP_SALES_EDIT_APPROVE):
        raise EditRequestPermissionError("Only an admin can approve or reject sale edits")

    edit_request = (
        SaleEditRequest.objects
        .select_for_update()
        .filter(id=parse_id(request_id, label="Sale edit request"), tenant_id=tenant_id)
        .first()
    )
    if edit_request is None:
        raise NotFoundError(f"Sale edit request not found: {request_id}")

    if edit_request.requested_by_id is not None and edit_request.requested_by_id == approver.pk:
        raise EditRequestPermissionError(
            "An edit request must be decided by someone other than its maker"
        )

    target = target_status_for(approved)
    validate_transition(edit_request=edit_request, target_status=target)

    if approved:
        _apply(edit_request=edit_request, approver=approver)
    else:
        edit_request.rejection_reason = (rejection_reason or "").strip()

    edit_request.status = target
    edit_request.approved_by = approver
    edit_request.approved_at = timezone.now()
    edit_request.save()

    logger.info(
        "Sale edit decided",
        extra={
            "tenant_id": str(tenant_id),
            "request_id": str(edit_request.id),
            "request_type": edit_request.request_type,
            "status": edit_request.status,
        },
    )
    return edit_request


def _apply(*, edit_request: SaleEditRequest, approver):
    sale = Sale.objects.select_for_update().get(pk=edit_request.sale_id)

    if sale.status != Sale.Status.COMPLETED:
        raise EditRequestError(
            f"Sale {sale.sale_number} is {sale.status}; edits apply to completed sales only"
        )

    if edit_request.sale_line_item_id is None:
        raise EditRequestError("The sale line for this request no longer exists")

    line = (
        SaleLineItem.objects
        .select_for_update(of=("self",))
        .select_related("product")
        .filter(id=edit_request.sale_line_item_id, sale=sale)
        .first()
    )
    if line is None:
        raise EditRequestError("The sale line for this request no longer exists")

    if edit_request.request_type == RequestType.PRICE_CHANGE:
        _apply_price_change(sale=sale, line=line, new_unit_price=edit_request.new_unit_price)
    else:
        _apply_line_delete(sale=sale, line=line, approver=approver)
        # The FK is nulled in the database; keep the row in step before it is saved.
        edit_request.sale_line_item = None

    recalculate_sale_totals(sale=sale)


def _apply_price_change(*, sale: Sale, line: SaleLineItem, new_unit_price):
    calc = calculate_tax_at_rate(
        quantity=line.quantity,
        unit_price=new_unit_price,
        rate=line.tax_percentage,
        pricing_mode=sale.pricing_mode,
    )
    pricing = price_line(calculation=calc, discount_amount=line.discount_amount)

    line.unit_price = _money(new_unit_price)
    line.net_amount = pricing.net_amount
    line.discount_amount = pricing.discount_amount
    line.tax_amount = pricing.tax_amount
    line.line_total = pricing.line_total
    line.save(
        update_fields=[
            "unit_price",
            "net_amount",
            "discount_amount",
            "tax_amount",
            "line_total",
        ]
    )


def _apply_line_delete(*, sale: Sale, line: SaleLineItem, approver):
    if int(line.returned_quantity or 0) > 0 or line.return_lines.exists():
        raise EditRequestError(
            f"Cannot delete the {line.product.name} line: it already has returns"
        )

    lot = None
    if line.inventory_id is not None:
        lot = line.inventory
    if lot is None:
        lot = find_restore_lot(
            product_id=line.product_id,
            branch_id=sale.branch_id,
            batch_number=line.batch_number,
        )

    if lot is None:
        logger.warning(
            "No inventory lot found to restore deleted sale line",
            extra={
                "sale_number": sale.sale_number,
                "product_id": str(line.product_id),
                "branch_id": str(sale.branch_id),
            },
        )
    else:
        restore_stock(
            tenant_id=sale.tenant_id,
            inventory_id=lot.id,
            quantity=line.quantity,
            source_reference=sale.sale_number,
            source_type=SourceType.SALE_EDIT,
            performed_by=approver,
            source_id=sale.id,
            notes=f"Sale edit: line deleted ({line.product.name})",
        )

    line.delete()


# ============================================================
# READS
# ============================================================

def list_requests(*, tenant_id, status: str | None = None, requested_by=None):
    """
    Tenant edit requests, newest first. Pass requested_by to narrow the
    list to one maker's own requests.
    """
    require_tenant_id(tenant_id)
    qs = (
        SaleEditRequest.objects.filter(tenant_id=tenant_id)
        .select_related("sale", "sale_line_item", "requested_by", "approved_by")
        .order_by("-created_at")
    )
    if status:
        qs = qs.filter(status=status)
    if requested_by is not None:
        qs = qs.filter(requested_by=requested_by)
    return qs


def list_pending(*, tenant_id):
    return list_requests(tenant_id=tenant_id, status=Status.PENDING)


def pending_count(*, tenant_id) -> int:
    return list_pending(tenant_id=tenant_id).count()
