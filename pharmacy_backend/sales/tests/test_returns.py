# sales/tests/test_returns.py

from decimal import Decimal

from django.test import TestCase

from products.models import Inventory, InventoryAuditLog
from sales.models import Sale, SaleReturn, SaleReturnLineItem
from sales.services.exceptions import NotFoundError, ReturnValidationError
from sales.services.return_service import already_returned_by_line, create_sale_return
from sales.services.sale_service import create_sale
from tenants.tests.factories import make_branch, make_lot, make_product, make_tenant, make_user


class ReturnEngineTests(TestCase):
    """
    Return Engine tests.

    GUARANTEES:
    - Remaining quantity is computed from the SUM of prior returns
    - A rejected return writes nothing
    - Return status only moves NONE -> PARTIAL -> FULL
    - A missing restore lot does not block the return
    """

    def setUp(self):
        self.tenant = make_tenant()
        self.branch = make_branch(self.tenant)
        self.pharmacist = make_user(self.tenant, role="pharmacist")
        self.product = make_product(self.tenant)
        self.lot = make_lot(self.tenant, self.product, self.branch, quantity=20)

        self.sale = create_sale(
            tenant_id=self.tenant.id,
            cashier=self.pharmacist,
            branch_id=self.branch.id,
            line_items=[
                {"inventory_id": self.lot.id, "quantity": 10, "unit_price": Decimal("100.00")}
            ],
            payments=[{"payment_method": "CASH", "amount": Decimal("1160.00")}],
        )
        self.line = self.sale.line_items.get()

    def _return(self, quantity, **line_extra):
        return create_sale_return(
            tenant_id=self.tenant.id,
            processed_by=self.pharmacist,
            original_sale_id=self.sale.id,
            return_reason="Customer returned item",
            return_line_items=[
                {"original_sale_line_item_id": self.line.id, "quantity_returned": quantity, **line_extra}
            ],
        )

    def test_partial_return_restores_stock(self):
        sale_return = self._return(6)

        self.assertEqual(sale_return.return_number, "RET00000001")
        self.assertEqual(sale_return.total_refund_amount, Decimal("600.00"))
        self.assertEqual(sale_return.status, SaleReturn.Status.PROCESSED)

        self.lot.refresh_from_db()
        self.line.refresh_from_db()
        self.sale.refresh_from_db()
        self.assertEqual(self.lot.quantity, 16)
        self.assertEqual(self.line.returned_quantity, 6)
        self.assertEqual(self.sale.return_status, Sale.ReturnStatus.PARTIAL)

        audit = InventoryAuditLog.objects.get(source_reference=sale_return.return_number)
        self.assertEqual(audit.transaction_type, InventoryAuditLog.TransactionType.RETURN)
        self.assertEqual(audit.quantity_changed, 6)

    def test_return_double_count_guard(self):
        self._return(6)

        with self.assertRaises(ReturnValidationError) as ctx:
            self._return(5)

        self.assertIn("Available: 4", str(ctx.exception))
        self.lot.refresh_from_db()
        self.assertEqual(self.lot.quantity, 16)
        self.assertEqual(SaleReturn.objects.count(), 1)
        self.assertEqual(already_returned_by_line([self.line.id]), {str(self.line.id): 6})

    def test_full_return_then_further_return_rejected(self):
        self._return(6)
        self._return(4)

        self.sale.refresh_from_db()
        self.assertEqual(self.sale.return_status, Sale.ReturnStatus.FULL)

        with self.assertRaises(ReturnValidationError):
            self._return(1)

    def test_same_line_twice_in_one_request_is_summed(self):
        with self.assertRaises(ReturnValidationError):
            create_sale_return(
                tenant_id=self.tenant.id,
                processed_by=self.pharmacist,
                original_sale_id=self.sale.id,
                return_reason="Damaged",
                return_line_items=[
                    {"original_sale_line_item_id": self.line.id, "quantity_returned": 6},
                    {"original_sale_line_item_id": self.line.id, "quantity_returned": 5},
                ],
            )
        self.assertFalse(SaleReturnLineItem.objects.exists())

    def test_return_without_restock(self):
        self._return(2, restore_to_inventory=False)

        self.lot.refresh_from_db()
        self.assertEqual(self.lot.quantity, 10)
        self.assertFalse(
            InventoryAuditLog.objects.filter(
                transaction_type=InventoryAuditLog.TransactionType.RETURN
            ).exists()
        )

    def test_missing_restore_lot_is_logged_not_fatal(self):
        # The only lot for the product now sits at another branch.
        annex = make_branch(self.tenant, name="Annex", code="ANX")
        Inventory.objects.filter(id=self.lot.id).update(branch=annex)

        with self.assertLogs("sales.services.return_service", level="WARNING") as logs:
            sale_return = self._return(3)

        self.assertEqual(sale_return.line_items.count(), 1)
        self.assertTrue(any("No inventory lot found" in m for m in logs.output))
        self.line.refresh_from_db()
        self.assertEqual(self.line.returned_quantity, 3)

    def test_reason_is_required(self):
        with self.assertRaises(ReturnValidationError):
            create_sale_return(
                tenant_id=self.tenant.id,
                processed_by=self.pharmacist,
                original_sale_id=self.sale.id,
                return_reason="  ",
                return_line_items=[
                    {"original_sale_line_item_id": self.line.id, "quantity_returned": 1}
                ],
            )

    def test_non_positive_quantity_is_rejected(self):
        with self.assertRaises(ReturnValidationError):
            self._return(0)

    def test_sale_of_other_tenant_reads_as_missing(self):
        other = make_tenant("Other")
        with self.assertRaises(NotFoundError):
            create_sale_return(
                tenant_id=other.id,
                processed_by=self.pharmacist,
                original_sale_id=self.sale.id,
                return_reason="x",
                return_line_items=[
                    {"original_sale_line_item_id": self.line.id, "quantity_returned": 1}
                ],
            )

    def test_return_keeps_sale_totals(self):
        self._return(6)

        self.sale.refresh_from_db()
        self.assertEqual(self.sale.total_amount, Decimal("1160.00"))

    def test_malformed_ids_read_as_missing(self):
        with self.assertRaises(NotFoundError):
            create_sale_return(
                tenant_id=self.tenant.id,
                processed_by=self.pharmacist,
                original_sale_id="SAL00000001",
                return_reason="Customer returned item",
                return_line_items=[
                    {"original_sale_line_item_id": self.line.id, "quantity_returned": 1}
                ],
            )

        with self.assertRaises(NotFoundError):
            create_sale_return(
                tenant_id=self.tenant.id,
                processed_by=self.pharmacist,
                original_sale_id=self.sale.id,
                return_reason="Customer returned item",
                return_line_items=[
                    {"original_sale_line_item_id": "line-1", "quantity_returned": 1}
                ],
            )

        self.assertFalse(SaleReturn.objects.exists())


class MultiLineReturnTests(TestCase):
    def setUp(self):
        self.tenant = make_tenant()
        self.branch = make_branch(self.tenant)
        self.pharmacist = make_user(self.tenant, role="pharmacist")
        self.lot_a = make_lot(self.tenant, make_product(self.tenant, sku="A"), self.branch, quantity=10)
        self.lot_b = make_lot(
            self.tenant, make_product(self.tenant, sku="B", name="Vitamin C"), self.branch, quantity=10
        )

        # 2 x 100 + 3 x 100, 16% exclusive
        self.sale = create_sale(
            tenant_id=self.tenant.id,
            cashier=self.pharmacist,
            branch_id=self.branch.id,
            line_items=[
                {"inventory_id": self.lot_a.id, "quantity": 2, "unit_price": Decimal("100.00")},
                {"inventory_id": self.lot_b.id, "quantity": 3, "unit_price": Decimal("100.00")},
            ],
            payments=[{"payment_method": "CASH", "amount": Decimal("580.00")}],
        )
        self.line_a = self.sale.line_items.get(inventory=self.lot_a)
        self.line_b = self.sale.line_items.get(inventory=self.lot_b)

    def _return(self, line, quantity):
        return create_sale_return(
            tenant_id=self.tenant.id,
            processed_by=self.pharmacist,
            original_sale_id=self.sale.id,
            return_reason="Customer returned item",
            return_line_items=[{"original_sale_line_item_id": line.id, "quantity_returned": quantity}],
        )

    def test_one_full_line_is_partial_until_every_line_returns(self):
        self._return(self.line_a, 2)
        self.sale.refresh_from_db()
        self.assertEqual(self.sale.return_status, Sale.ReturnStatus.PARTIAL)

        self._return(self.line_b, 3)
        self.sale.refresh_from_db()
        self.assertEqual(self.sale.return_status, Sale.ReturnStatus.FULL)

        self.lot_a.refresh_from_db()
        self.lot_b.refresh_from_db()
        self.assertEqual((self.lot_a.quantity, self.lot_b.quantity), (10, 10))
