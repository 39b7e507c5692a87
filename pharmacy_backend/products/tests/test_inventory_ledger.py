# products/tests/test_inventory_ledger.py

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase

from products.models import Inventory, InventoryAuditLog
from products.services.inventory_ledger import (
    DuplicateDeductionError,
    InsufficientStockError,
    InvalidAdjustmentError,
    InventoryLedgerError,
    adjust_stock,
    deduct_stock,
    find_restore_lot,
    receive_stock,
    restore_stock,
)
from tenants.services.tenant_scope import NotFoundError, TenantRequiredError
from tenants.tests.factories import make_branch, make_lot, make_product, make_tenant, make_user


class InventoryLedgerTests(TestCase):
    """
    Inventory Ledger integrity tests.

    GUARANTEES:
    - Every quantity change writes exactly one audit row
    - A lot never goes negative
    - A sale deducts from a lot at most once per source reference
    - Restores are unbounded
    - Audit rows are immutable
    """

    def setUp(self):
        self.tenant = make_tenant()
        self.branch = make_branch(self.tenant)
        self.user = make_user(self.tenant, role="pharmacist")
        self.product = make_product(self.tenant)
        self.lot = make_lot(self.tenant, self.product, self.branch, quantity=10)

    # =====================================================
    # DEDUCT
    # =====================================================

    def test_deduct_reduces_quantity_and_writes_audit(self):
        audit = deduct_stock(
            tenant_id=self.tenant.id,
            inventory_id=self.lot.id,
            quantity=3,
            source_reference="SAL00000001",
            performed_by=self.user,
        )

        self.lot.refresh_from_db()
        self.assertEqual(self.lot.quantity, 7)
        self.assertEqual(audit.transaction_type, InventoryAuditLog.TransactionType.SALE)
        self.assertEqual(audit.quantity_before, 10)
        self.assertEqual(audit.quantity_changed, -3)
        self.assertEqual(audit.quantity_after, 7)
        self.assertEqual(audit.performed_by, self.user)

    def test_deduct_more_than_available_fails_without_writes(self):
        with self.assertRaises(InsufficientStockError):
            deduct_stock(
                tenant_id=self.tenant.id,
                inventory_id=self.lot.id,
                quantity=11,
                source_reference="SAL00000001",
            )

        self.lot.refresh_from_db()
        self.assertEqual(self.lot.quantity, 10)
        self.assertFalse(
            InventoryAuditLog.objects.filter(
                transaction_type=InventoryAuditLog.TransactionType.SALE
            ).exists()
        )

    def test_duplicate_deduction_is_rejected(self):
        deduct_stock(
            tenant_id=self.tenant.id,
            inventory_id=self.lot.id,
            quantity=2,
            source_reference="SAL00000001",
        )

        with self.assertRaises(DuplicateDeductionError):
            deduct_stock(
                tenant_id=self.tenant.id,
                inventory_id=self.lot.id,
                quantity=2,
                source_reference="SAL00000001",
            )

        self.lot.refresh_from_db()
        self.assertEqual(self.lot.quantity, 8)
        self.assertEqual(
            InventoryAuditLog.objects.filter(source_reference="SAL00000001").count(), 1
        )

    def test_non_positive_quantity_is_rejected(self):
        for qty in (0, -1):
            with self.assertRaises(InventoryLedgerError):
                deduct_stock(
                    tenant_id=self.tenant.id,
                    inventory_id=self.lot.id,
                    quantity=qty,
                    source_reference="SAL00000001",
                )

    def test_fractional_quantity_is_rejected(self):
        with self.assertRaises(InventoryLedgerError):
            deduct_stock(
                tenant_id=self.tenant.id,
                inventory_id=self.lot.id,
                quantity=1.5,
                source_reference="SAL00000001",
            )

    def test_lot_of_other_tenant_reads_as_missing(self):
        other = make_tenant("Other")
        with self.assertRaises(NotFoundError):
            deduct_stock(
                tenant_id=other.id,
                inventory_id=self.lot.id,
                quantity=1,
                source_reference="SAL00000001",
            )

    def test_tenant_is_required(self):
        with self.assertRaises(TenantRequiredError):
            deduct_stock(
                tenant_id=None,
                inventory_id=self.lot.id,
                quantity=1,
                source_reference="SAL00000001",
            )

    # =====================================================
    # RESTORE
    # =====================================================

    def test_restore_is_unbounded(self):
        audit = restore_stock(
            tenant_id=self.tenant.id,
            inventory_id=self.lot.id,
            quantity=25,
            source_reference="RET00000001",
        )

        self.lot.refresh_from_db()
        self.assertEqual(self.lot.quantity, 35)
        self.assertEqual(audit.transaction_type, InventoryAuditLog.TransactionType.RETURN)
        self.assertEqual(audit.source_type, InventoryAuditLog.SourceType.RETURN)

    def test_find_restore_lot_prefers_batch_then_oldest(self):
        newer = make_lot(self.tenant, self.product, self.branch, quantity=4, batch_number="BATCH-002")

        self.assertEqual(
            find_restore_lot(product_id=self.product.id, branch_id=self.branch.id, batch_number="BATCH-002"),
            newer,
        )
        self.assertEqual(
            find_restore_lot(product_id=self.product.id, branch_id=self.branch.id, batch_number="GONE"),
            self.lot,
        )

    def test_find_restore_lot_none_when_no_lots(self):
        other_branch = make_branch(self.tenant, name="Annex", code="ANX")
        self.assertIsNone(
            find_restore_lot(product_id=self.product.id, branch_id=other_branch.id)
        )

    # =====================================================
    # RECEIVE
    # =====================================================

    def test_receive_into_existing_batch_blends_cost(self):
        audit = receive_stock(
            tenant_id=self.tenant.id,
            product_id=self.product.id,
            branch_id=self.branch.id,
            quantity=10,
            unit_cost="70.00",
            batch_number="BATCH-001",
            source_reference="GRN-2",
        )

        self.lot.refresh_from_db()
        self.assertEqual(audit.inventory_id, self.lot.id)
        self.assertEqual(self.lot.quantity, 20)
        self.assertEqual(self.lot.unit_cost, Decimal("60.00"))
        self.assertEqual(audit.transaction_type, InventoryAuditLog.TransactionType.PURCHASE)

    def test_receive_new_batch_creates_lot(self):
        receive_stock(
            tenant_id=self.tenant.id,
            product_id=self.product.id,
            branch_id=self.branch.id,
            quantity=5,
            batch_number="BATCH-NEW",
            source_reference="GRN-3",
        )

        self.assertEqual(
            Inventory.objects.filter(product=self.product, branch=self.branch).count(), 2
        )

    def test_receive_requires_positive_quantity(self):
        with self.assertRaises(InventoryLedgerError):
            receive_stock(
                tenant_id=self.tenant.id,
                product_id=self.product.id,
                branch_id=self.branch.id,
                quantity=0,
                source_reference="GRN-4",
            )

    # =====================================================
    # ADJUST
    # =====================================================

    def test_adjust_writes_signed_delta(self):
        audit = adjust_stock(
            tenant_id=self.tenant.id,
            inventory_id=self.lot.id,
            new_quantity=6,
            reason="Stock count",
            performed_by=self.user,
        )

        self.lot.refresh_from_db()
        self.assertEqual(self.lot.quantity, 6)
        self.assertEqual(audit.quantity_changed, -4)
        self.assertEqual(audit.transaction_type, InventoryAuditLog.TransactionType.ADJUSTMENT)
        self.assertTrue(audit.source_reference.startswith("ADJ-"))

    def test_adjust_to_same_quantity_is_rejected(self):
        with self.assertRaises(InvalidAdjustmentError):
            adjust_stock(tenant_id=self.tenant.id, inventory_id=self.lot.id, new_quantity=10)

    def test_adjust_below_zero_is_rejected(self):
        with self.assertRaises(InvalidAdjustmentError):
            adjust_stock(tenant_id=self.tenant.id, inventory_id=self.lot.id, new_quantity=-1)

    # =====================================================
    # AUDIT IMMUTABILITY
    # =====================================================

    def test_audit_rows_cannot_be_updated_or_deleted(self):
        audit = InventoryAuditLog.objects.filter(inventory=self.lot).first()

        audit.notes = "tampered"
        with self.assertRaises(ValidationError):
            audit.save()

        with self.assertRaises(ValidationError):
            audit.delete()

        self.assertEqual(InventoryAuditLog.objects.filter(inventory=self.lot).count(), 1)
