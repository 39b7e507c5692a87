# products/services/inventory_ledger.py

"""
INVENTORY LEDGER

Purpose:
- Own every quantity change on an Inventory lot.
- Write exactly one InventoryAuditLog row per change (append-only).
- Shared by the Sale Engine (deduct), Return Engine and edit approvals
  (restore), stock receiving (receive) and stock counts (adjust).

HARD RULES:
- Every mutation runs inside transaction.atomic and locks the lot row
  with select_for_update() before reading its quantity.
- A lot never goes negative: available < requested raises
  InsufficientStockError and nothing is written.
- deduct is exactly-once per (tenant, source_reference, source_type, lot):
  a second attempt raises DuplicateDeductionError. The partial unique
  constraint on InventoryAuditLog backs the check at the database level.
- restore has no upper bound.
- Lots owned by another tenant are reported as not found.
"""

from __future__ import annotations

import logging
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone

from products.models import Inventory, InventoryAuditLog, Product
from tenants.services.tenant_scope import (
    NotFoundError,
    get_branch_for_tenant,
    parse_id,
    require_tenant_id,
)

logger = logging.getLogger(__name__)

TransactionType = InventoryAuditLog.TransactionType
SourceType = InventoryAuditLog.SourceType


# ============================================================
# DOMAIN ERRORS
# ============================================================

class InventoryLedgerError(Exception):
    pass


class InsufficientStockError(InventoryLedgerError):
    pass


class DuplicateDeductionError(InventoryLedgerError):
    """Idempotency conflict: this source already deducted from the lot."""


class InvalidAuditEntryError(InventoryLedgerError):
    pass


class InvalidAdjustmentError(InventoryLedgerError):
    pass


TWOPLACES = Decimal("0.01")


def _money(v) -> Decimal | None:
    if v is None or v == "":
        return None
    try:
        return Decimal(str(v)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError) as exc:
        raise InventoryLedgerError(f"Invalid money value: {v}") from exc


def _to_int_qty(value) -> int:
    """
    Quantity normalizer.
    HARD RULE: quantities are integer units in this system.
    """
    if value is None or value == "":
        return 0

    if isinstance(value, bool):
        raise InventoryLedgerError("quantity must be a whole integer unit")

    if isinstance(value, int):
        return value

    if isinstance(value, str):
        s = value.strip()
        if s.lstrip("-").isdigit():
            return int(s)

    raise InventoryLedgerError("quantity must be a whole integer unit")


def _lock_lot(*, tenant_id, inventory_id) -> Inventory:
    lot = (
        Inventory.objects
        .select_for_update(of=("self",))
        .filter(id=parse_id(inventory_id, label="Inventory"), branch__tenant_id=tenant_id)
        .first()
    )
    if lot is None:
        raise NotFoundError(f"Inventory not found: {inventory_id}")
    return lot


# ============================================================
# AUDIT BUILDER
# ============================================================

def record_audit_entry(
    *,
    tenant_id,
    lot: Inventory,
    transaction_type: str,
    quantity_before: int,
    quantity_changed: int,
    source_reference: str,
    source_type: str,
    performed_by=None,
    unit_cost=None,
    selling_price=None,
    source_id=None,
    notes: str = "",
) -> InventoryAuditLog:
    """
    Build and persist one audit row.

    Validates quantity_after == quantity_before + quantity_changed and
    quantity_changed != 0 before touching the database.
    """
    quantity_changed = int(quantity_changed)
    quantity_before = int(quantity_before)

    if quantity_changed == 0:
        raise InvalidAuditEntryError("Audit entry must change quantity")

    quantity_after = quantity_before + quantity_changed
    if quantity_after != int(lot.quantity):
        raise InvalidAuditEntryError(
            f"Audit entry out of step with lot {lot.id}: "
            f"before={quantity_before}, changed={quantity_changed}, lot={lot.quantity}"
        )

    try:
        with transaction.atomic():
            return InventoryAuditLog.objects.create(
                tenant_id=tenant_id,
                product_id=lot.product_id,
                branch_id=lot.branch_id,
                inventory=lot,
                transaction_type=transaction_type,
                quantity_before=quantity_before,
                quantity_changed=quantity_changed,
                quantity_after=quantity_after,
                unit_cost=unit_cost if unit_cost is not None else lot.unit_cost,
                selling_price=selling_price if selling_price is not None else lot.selling_price,
                batch_number=lot.batch_number or "",
                expiry_date=lot.expiry_date,
                source_reference=source_reference,
                source_type=source_type,
                source_id=source_id,
                performed_by=performed_by,
                notes=notes or "",
            )
    except IntegrityError as exc:
        raise DuplicateDeductionError(
            f"Inventory already deducted for {source_type} {source_reference} "
            f"on lot {lot.id}"
        ) from exc
    except ValidationError as exc:
        raise InvalidAuditEntryError(str(exc)) from exc


# ============================================================
# DEDUCT (SALE)
# ============================================================

@transaction.atomic
def deduct_stock(
    *,
    tenant_id,
    inventory_id,
    quantity,
    source_reference: str,
    source_type: str = SourceType.SALE,
    transaction_type: str = TransactionType.SALE,
    performed_by=None,
    selling_price=None,
    source_id=None,
    notes: str = "",
) -> InventoryAuditLog:
    require_tenant_id(tenant_id)

    qty = _to_int_qty(quantity)
    if qty <= 0:
        raise InventoryLedgerError("Deduction quantity must be greater than zero")

    lot = _lock_lot(tenant_id=tenant_id, inventory_id=inventory_id)

    already = InventoryAuditLog.objects.filter(
        tenant_id=tenant_id,
        source_reference=source_reference,
        source_type=source_type,
        transaction_type=transaction_type,
        inventory=lot,
    ).exists()
    if already:
        raise DuplicateDeductionError(
            f"Inventory already deducted for {source_type} {source_reference} "
            f"on lot {lot.id}"
        )

    available = int(lot.quantity or 0)
    if available < qty:
        raise InsufficientStockError(
            f"Insufficient stock for {lot.product.name}. "
            f"Requested: {qty}, Available: {available}"
        )

    lot.quantity = available - qty
    lot.save(update_fields=["quantity", "updated_at"])

    return record_audit_entry(
        tenant_id=tenant_id,
        lot=lot,
        transaction_type=transaction_type,
        quantity_before=available,
        quantity_changed=-qty,
        source_reference=source_reference,
        source_type=source_type,
        performed_by=performed_by,
        selling_price=_money(selling_price),
        source_id=source_id,
        notes=notes,
    )


# ============================================================
# RESTORE (RETURNS / EDIT APPROVALS)
# ============================================================

def find_restore_lot(*, product_id, branch_id, batch_number: str | None = None):
    """
    Lot that receives returned stock.

    Policy:
    1) exact batch match for product+branch
    2) otherwise the oldest lot for product+branch with quantity >= 0
    3) otherwise None (caller decides whether that is fatal)
    """
    qs = Inventory.objects.filter(product_id=product_id, branch_id=branch_id)

    batch = (batch_number or "").strip()
    if batch:
        lot = qs.filter(batch_number=batch).order_by("created_at").first()
        if lot is not None:
            return lot

    return qs.filter(quantity__gte=0).order_by("created_at").first()


@transaction.atomic
def restore_stock(
    *,
    tenant_id,
    inventory_id,
    quantity,
    source_reference: str,
    source_type: str = SourceType.RETURN,
    performed_by=None,
    source_id=None,
    notes: str = "",
) -> InventoryAuditLog:
    require_tenant_id(tenant_id)

    qty = _to_int_qty(quantity)
    if qty <= 0:
        raise InventoryLedgerError("Restore quantity must be greater than zero")

    lot = _lock_lot(tenant_id=tenant_id, inventory_id=inventory_id)

    before = int(lot.quantity or 0)
    lot.quantity = before + qty
    lot.save(update_fields=["quantity", "updated_at"])

    return record_audit_entry(
        tenant_id=tenant_id,
        lot=lot,
        transaction_type=TransactionType.RETURN,
        quantity_before=before,
        quantity_changed=qty,
        source_reference=source_reference,
        source_type=source_type,
        performed_by=performed_by,
        source_id=source_id,
        notes=notes,
    )


# ============================================================
# RECEIVE (PURCHASE INTAKE)
# ============================================================

def _weighted_unit_cost(*, old_qty: int, old_cost, new_qty: int, new_cost) -> Decimal | None:
    if new_cost is None:
        return old_cost
    if old_cost is None or old_qty <= 0:
        return new_cost
    total_qty = old_qty + new_qty
    blended = (Decimal(old_qty) * Decimal(old_cost) + Decimal(new_qty) * Decimal(new_cost)) / Decimal(total_qty)
    return blended.quantize(TWOPLACES, rounding=ROUND_HALF_UP)


@transaction.atomic
def receive_stock(
    *,
    tenant_id,
    product_id,
    branch_id,
    quantity,
    source_reference: str,
    unit_cost=None,
    selling_price=None,
    batch_number: str = "",
    expiry_date=None,
    source_type: str = SourceType.GOODS_RECEIVED_NOTE,
    performed_by=None,
    notes: str = "",
) -> InventoryAuditLog:
    """
    Stock intake from purchasing.

    - existing lot (product + branch + batch): quantity incremented,
      unit cost blended by weighted average
    - otherwise a new lot is created
    """
    require_tenant_id(tenant_id)

    qty = _to_int_qty(quantity)
    if qty <= 0:
        raise InventoryLedgerError("Received quantity must be greater than zero")

    if not (source_reference or "").strip():
        raise InventoryLedgerError("source_reference is required")

    branch = get_branch_for_tenant(tenant_id=tenant_id, branch_id=branch_id)
    product = Product.objects.filter(
        id=parse_id(product_id, label="Product"), tenant_id=tenant_id
    ).first()
    if product is None:
        raise NotFoundError(f"Product not found: {product_id}")

    cost = _money(unit_cost)
    price = _money(selling_price)
    if cost is not None and cost < Decimal("0.00"):
        raise InventoryLedgerError("unit_cost cannot be negative")

    batch = (batch_number or "").strip()
    lot = (
        Inventory.objects
        .select_for_update(of=("self",))
        .filter(product=product, branch=branch, batch_number=batch)
        .order_by("created_at")
        .first()
    )

    now = timezone.now()

    if lot is None:
        lot = Inventory.objects.create(
            product=product,
            branch=branch,
            batch_number=batch,
            expiry_date=expiry_date,
            quantity=qty,
            unit_cost=cost,
            selling_price=price,
            last_restocked=now,
        )
        before = 0
    else:
        before = int(lot.quantity or 0)
        lot.unit_cost = _weighted_unit_cost(
            old_qty=before, old_cost=lot.unit_cost, new_qty=qty, new_cost=cost
        )
        lot.quantity = before + qty
        if price is not None:
            lot.selling_price = price
        if expiry_date is not None:
            lot.expiry_date = expiry_date
        lot.last_restocked = now
        lot.save()

    audit = record_audit_entry(
        tenant_id=tenant_id,
        lot=lot,
        transaction_type=TransactionType.PURCHASE,
        quantity_before=before,
        quantity_changed=qty,
        source_reference=source_reference,
        source_type=source_type,
        performed_by=performed_by,
        unit_cost=cost,
        notes=notes,
    )

    logger.info(
        "Stock received",
        extra={
            "tenant_id": str(tenant_id),
            "inventory_id": str(lot.id),
            "quantity": qty,
            "source_reference": source_reference,
        },
    )
    return audit


# ============================================================
# ADJUST (STOCK COUNT)
# ============================================================

@transaction.atomic
def adjust_stock(
    *,
    tenant_id,
    inventory_id,
    new_quantity,
    reason: str = "",
    performed_by=None,
    source_reference: str | None = None,
) -> InventoryAuditLog:
    require_tenant_id(tenant_id)

    target = _to_int_qty(new_quantity)
    if target < 0:
        raise InvalidAdjustmentError("New quantity cannot be negative")

    lot = _lock_lot(tenant_id=tenant_id, inventory_id=inventory_id)

    before = int(lot.quantity or 0)
    delta = target - before
    if delta == 0:
        raise InvalidAdjustmentError(
            f"Lot {lot.id} already holds {before}; nothing to adjust"
        )

    lot.quantity = target
    lot.save(update_fields=["quantity", "updated_at"])

    ref = (source_reference or "").strip() or (
        f"ADJ-{timezone.now():%Y%m%d%H%M%S}-{lot.id.hex[:6].upper()}"
    )

    audit = record_audit_entry(
        tenant_id=tenant_id,
        lot=lot,
        transaction_type=TransactionType.ADJUSTMENT,
        quantity_before=before,
        quantity_changed=delta,
        source_reference=ref,
        source_type=SourceType.INVENTORY_ADJUSTMENT,
        performed_by=performed_by,
        notes=(reason or "").strip(),
    )

    logger.info(
        "Stock adjusted",
        extra={
            "tenant_id": str(tenant_id),
            "inventory_id": str(lot.id),
            "quantity_before": before,
            "quantity_after": target,
        },
    )
    return audit
