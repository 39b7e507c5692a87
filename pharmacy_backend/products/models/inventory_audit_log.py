# products/models/inventory_audit_log.py

"""
CANONICAL INVENTORY LEDGER

Immutable record of every lot quantity change.

GUARANTEES:
- Append-only (no updates, no deletes)
- quantity_after == quantity_before + quantity_changed
- quantity_changed is never zero
- At most one SALE row per (tenant, source_reference, source_type, lot):
  the idempotency guard against double deduction on retried sales
"""

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q

from tenants.models import Branch, Tenant

from .inventory import Inventory
from .product import Product


class InventoryAuditLog(models.Model):
    class TransactionType(models.TextChoices):
        PURCHASE = "PURCHASE", "Purchase"
        SALE = "SALE", "Sale"
        ADJUSTMENT = "ADJUSTMENT", "Adjustment"
        TRANSFER_IN = "TRANSFER_IN", "Transfer In"
        TRANSFER_OUT = "TRANSFER_OUT", "Transfer Out"
        RETURN = "RETURN", "Return"
        EXPIRY_WRITE_OFF = "EXPIRY_WRITE_OFF", "Expiry Write-off"
        DAMAGE_WRITE_OFF = "DAMAGE_WRITE_OFF", "Damage Write-off"
        INITIAL_STOCK = "INITIAL_STOCK", "Initial Stock"

    class SourceType(models.TextChoices):
        SALE = "SALE", "Sale"
        PURCHASE_ORDER = "PURCHASE_ORDER", "Purchase Order"
        GOODS_RECEIVED_NOTE = "GOODS_RECEIVED_NOTE", "Goods Received Note"
        INVENTORY_ADJUSTMENT = "INVENTORY_ADJUSTMENT", "Inventory Adjustment"
        INVENTORY_TRANSFER = "INVENTORY_TRANSFER", "Inventory Transfer"
        RETURN = "RETURN", "Sale Return"
        SALE_EDIT = "SALE_EDIT", "Sale Edit"
        EXPIRY_WRITE_OFF = "EXPIRY_WRITE_OFF", "Expiry Write-off"
        DAMAGE_WRITE_OFF = "DAMAGE_WRITE_OFF", "Damage Write-off"
        INITIAL_STOCK = "INITIAL_STOCK", "Initial Stock"
        SYSTEM_ADJUSTMENT = "SYSTEM_ADJUSTMENT", "System Adjustment"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    tenant = models.ForeignKey(
        Tenant, on_delete=models.CASCADE, related_name="inventory_audit_logs"
    )
    product = models.ForeignKey(
        Product, on_delete=models.PROTECT, related_name="inventory_audit_logs"
    )
    branch = models.ForeignKey(
        Branch, on_delete=models.PROTECT, related_name="inventory_audit_logs"
    )
    inventory = models.ForeignKey(
        Inventory,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="audit_logs",
    )

    transaction_type = models.CharField(max_length=32, choices=TransactionType.choices)

    quantity_changed = models.IntegerField()
    quantity_before = models.IntegerField()
    quantity_after = models.IntegerField()

    unit_cost = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    selling_price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    total_value = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)

    batch_number = models.CharField(max_length=128, blank=True, default="")
    expiry_date = models.DateField(null=True, blank=True)

    source_reference = models.CharField(max_length=64, db_index=True)
    source_type = models.CharField(max_length=32, choices=SourceType.choices)
    source_id = models.UUIDField(null=True, blank=True)

    performed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="inventory_audit_logs",
    )
    performed_at = models.DateTimeField(auto_now_add=True)

    notes = models.TextField(blank=True)

    class Meta:
        ordering = ["performed_at"]
        indexes = [
            models.Index(fields=["tenant", "source_reference", "source_type"], name="invaudit_tenant_source_idx"),
            models.Index(fields=["product", "performed_at"], name="invaudit_product_time_idx"),
            models.Index(fields=["branch", "performed_at"], name="invaudit_branch_time_idx"),
            models.Index(fields=["transaction_type"], name="invaudit_txn_type_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["tenant", "source_reference", "source_type", "inventory"],
                condition=Q(transaction_type="SALE"),
                name="uniq_sale_deduction_per_source_and_lot",
            ),
        ]

    def clean(self):
        if int(self.quantity_changed or 0) == 0:
            raise ValidationError("quantity_changed must not be zero")

        if int(self.quantity_after) != int(self.quantity_before) + int(self.quantity_changed):
            raise ValidationError(
                "quantity_after must equal quantity_before + quantity_changed"
            )

        if int(self.quantity_after) < 0:
            raise ValidationError("quantity_after cannot be negative")

        if not (self.source_reference or "").strip():
            raise ValidationError("source_reference is required")

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("InventoryAuditLog records are immutable")

        if self.total_value is None and self.unit_cost is not None:
            self.total_value = Decimal(self.unit_cost) * Decimal(abs(int(self.quantity_changed)))

        self.full_clean(validate_constraints=False)
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError(
            "InventoryAuditLog records are immutable and cannot be deleted"
        )

    def __str__(self):
        return f"{self.source_reference} | {self.transaction_type} | {self.quantity_changed}"
