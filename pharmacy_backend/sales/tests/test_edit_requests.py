# sales/tests/test_edit_requests.py

from decimal import Decimal

from django.test import TestCase

from products.models import InventoryAuditLog
from sales.models import SaleEditRequest, SaleLineItem
from sales.services.edit_request_lifecycle import can_transition, target_status_for
from sales.services.edit_request_service import (
    approve_or_reject,
    create_edit_request,
    list_pending,
    list_requests,
    pending_count,
)
from sales.services.exceptions import (
    EditRequestError,
    EditRequestPermissionError,
    InvalidTransitionError,
    NotFoundError,
)
from sales.services.return_service import create_sale_return
from sales.services.sale_service import create_sale
from tenants.tests.factories import make_branch, make_lot, make_product, make_tenant, make_user

Status = SaleEditRequest.Status
RequestType = SaleEditRequest.RequestType


class EditRequestLifecycleTests(TestCase):
    def test_only_pending_moves(self):
        self.assertTrue(can_transition(from_status=Status.PENDING, to_status=Status.APPROVED))
        self.assertTrue(can_transition(from_status=Status.PENDING, to_status=Status.REJECTED))
        self.assertFalse(can_transition(from_status=Status.APPROVED, to_status=Status.REJECTED))
        self.assertFalse(can_transition(from_status=Status.REJECTED, to_status=Status.APPROVED))
        self.assertFalse(can_transition(from_status=Status.PENDING, to_status=Status.PENDING))

    def test_decision_maps_to_status(self):
        self.assertEqual(target_status_for(True), Status.APPROVED)
        self.assertEqual(target_status_for(False), Status.REJECTED)


class EditRequestWorkflowTests(TestCase):
    """
    Maker-checker tests.

    GUARANTEES:
    - Only an admin decides, and only once
    - PRICE_CHANGE re-prices the line and re-derives sale totals
    - LINE_DELETE restores stock and re-derives sale totals
    - Reject changes nothing but the request
    """

    def setUp(self):
        self.tenant = make_tenant()
        self.branch = make_branch(self.tenant)
        self.admin = make_user(self.tenant, role="admin")
        self.cashier = make_user(self.tenant, role="cashier")

        self.product_a = make_product(self.tenant, sku="A", name="Paracetamol")
        self.product_b = make_product(self.tenant, sku="B", name="Vitamin C")
        self.lot_a = make_lot(self.tenant, self.product_a, self.branch, quantity=10)
        self.lot_b = make_lot(self.tenant, self.product_b, self.branch, quantity=10)

        # 2 x 100 + 1 x 50, 16% exclusive: 232.00 + 58.00
        self.sale = create_sale(
            tenant_id=self.tenant.id,
            cashier=self.cashier,
            branch_id=self.branch.id,
            line_items=[
                {"inventory_id": self.lot_a.id, "quantity": 2, "unit_price": Decimal("100.00")},
                {"inventory_id": self.lot_b.id, "quantity": 1, "unit_price": Decimal("50.00")},
            ],
            payments=[{"payment_method": "CASH", "amount": Decimal("290.00")}],
        )
        self.line_a = self.sale.line_items.get(product=self.product_a)
        self.line_b = self.sale.line_items.get(product=self.product_b)

    def _request(self, line, request_type, new_unit_price=None):
        return create_edit_request(
            tenant_id=self.tenant.id,
            requested_by=self.cashier,
            sale_id=self.sale.id,
            sale_line_item_id=line.id,
            request_type=request_type,
            new_unit_price=new_unit_price,
            reason="Keyed the wrong price",
        )

    # =====================================================
    # CREATE
    # =====================================================

    def test_create_records_original_price(self):
        req = self._request(self.line_a, RequestType.PRICE_CHANGE, Decimal("90.00"))

        self.assertEqual(req.status, Status.PENDING)
        self.assertEqual(req.original_unit_price, Decimal("100.00"))
        self.assertEqual(pending_count(tenant_id=self.tenant.id), 1)
        self.assertEqual(list(list_pending(tenant_id=self.tenant.id)), [req])

    def test_price_change_requires_positive_price(self):
        with self.assertRaises(EditRequestError):
            self._request(self.line_a, RequestType.PRICE_CHANGE)
        with self.assertRaises(EditRequestError):
            self._request(self.line_a, RequestType.PRICE_CHANGE, Decimal("0.00"))

    def test_line_must_belong_to_sale(self):
        other_sale = create_sale(
            tenant_id=self.tenant.id,
            cashier=self.cashier,
            branch_id=self.branch.id,
            line_items=[{"inventory_id": self.lot_a.id, "quantity": 1, "unit_price": Decimal("100.00")}],
            payments=[{"payment_method": "CASH", "amount": Decimal("116.00")}],
        )
        foreign_line = other_sale.line_items.get()

        with self.assertRaises(NotFoundError):
            self._request(foreign_line, RequestType.LINE_DELETE)

    # =====================================================
    # APPROVE
    # =====================================================

    def test_approve_price_change_reprices_line_and_sale(self):
        req = self._request(self.line_a, RequestType.PRICE_CHANGE, Decimal("90.00"))

        approve_or_reject(tenant_id=self.tenant.id, request_id=req.id, approver=self.admin, approved=True)

        self.line_a.refresh_from_db()
        self.sale.refresh_from_db()
        req.refresh_from_db()

        self.assertEqual(req.status, Status.APPROVED)
        self.assertEqual(req.approved_by, self.admin)
        self.assertIsNotNone(req.approved_at)

        self.assertEqual(self.line_a.unit_price, Decimal("90.00"))
        self.assertEqual(self.line_a.net_amount, Decimal("180.00"))
        self.assertEqual(self.line_a.tax_amount, Decimal("28.80"))
        self.assertEqual(self.line_a.line_total, Decimal("208.80"))

        self.assertEqual(self.sale.subtotal, Decimal("230.00"))
        self.assertEqual(self.sale.tax_amount, Decimal("36.80"))
        self.assertEqual(self.sale.total_amount, Decimal("266.80"))

    def test_approve_line_delete_restores_stock(self):
        req = self._request(self.line_b, RequestType.LINE_DELETE)

        approve_or_reject(tenant_id=self.tenant.id, request_id=req.id, approver=self.admin, approved=True)

        self.lot_b.refresh_from_db()
        self.sale.refresh_from_db()
        req.refresh_from_db()

        self.assertEqual(self.lot_b.quantity, 10)
        self.assertFalse(SaleLineItem.objects.filter(id=self.line_b.id).exists())
        self.assertIsNone(req.sale_line_item_id)
        self.assertEqual(self.sale.total_amount, Decimal("232.00"))

        audit = InventoryAuditLog.objects.get(source_type=InventoryAuditLog.SourceType.SALE_EDIT)
        self.assertEqual(audit.source_reference, self.sale.sale_number)
        self.assertEqual(audit.quantity_changed, 1)
        self.assertEqual(audit.performed_by, self.admin)

    def test_line_delete_refused_after_return(self):
        create_sale_return(
            tenant_id=self.tenant.id,
            processed_by=self.admin,
            original_sale_id=self.sale.id,
            return_reason="Returned",
            return_line_items=[{"original_sale_line_item_id": self.line_b.id, "quantity_returned": 1}],
        )
        req = self._request(self.line_b, RequestType.LINE_DELETE)

        with self.assertRaises(EditRequestError):
            approve_or_reject(tenant_id=self.tenant.id, request_id=req.id, approver=self.admin, approved=True)

        req.refresh_from_db()
        self.assertEqual(req.status, Status.PENDING)

    # =====================================================
    # REJECT / DECIDE ONCE / PERMISSIONS
    # =====================================================

    def test_reject_changes_nothing_but_request(self):
        req = self._request(self.line_a, RequestType.PRICE_CHANGE, Decimal("1.00"))

        approve_or_reject(
            tenant_id=self.tenant.id,
            request_id=req.id,
            approver=self.admin,
            approved=False,
            rejection_reason="Price was correct",
        )

        req.refresh_from_db()
        self.line_a.refresh_from_db()
        self.sale.refresh_from_db()

        self.assertEqual(req.status, Status.REJECTED)
        self.assertEqual(req.rejection_reason, "Price was correct")
        self.assertEqual(self.line_a.unit_price, Decimal("100.00"))
        self.assertEqual(self.sale.total_amount, Decimal("290.00"))

    def test_request_is_decided_once(self):
        req = self._request(self.line_a, RequestType.PRICE_CHANGE, Decimal("90.00"))
        approve_or_reject(tenant_id=self.tenant.id, request_id=req.id, approver=self.admin, approved=True)

        with self.assertRaises(InvalidTransitionError):
            approve_or_reject(tenant_id=self.tenant.id, request_id=req.id, approver=self.admin, approved=False)

    def test_non_admin_cannot_decide(self):
        manager = make_user(self.tenant, role="manager")
        req = self._request(self.line_a, RequestType.PRICE_CHANGE, Decimal("90.00"))

        for user in (self.cashier, manager):
            with self.assertRaises(EditRequestPermissionError):
                approve_or_reject(tenant_id=self.tenant.id, request_id=req.id, approver=user, approved=True)

        req.refresh_from_db()
        self.assertEqual(req.status, Status.PENDING)

    def test_maker_cannot_decide_own_request(self):
        req = create_edit_request(
            tenant_id=self.tenant.id,
            requested_by=self.admin,
            sale_id=self.sale.id,
            sale_line_item_id=self.line_a.id,
            request_type=RequestType.PRICE_CHANGE,
            new_unit_price=Decimal("90.00"),
            reason="Keyed the wrong price",
        )

        with self.assertRaises(EditRequestPermissionError):
            approve_or_reject(tenant_id=self.tenant.id, request_id=req.id, approver=self.admin, approved=True)

        req.refresh_from_db()
        self.line_a.refresh_from_db()
        self.assertEqual(req.status, Status.PENDING)
        self.assertEqual(self.line_a.unit_price, Decimal("100.00"))

    def test_malformed_request_id_is_not_found(self):
        with self.assertRaises(NotFoundError):
            approve_or_reject(tenant_id=self.tenant.id, request_id="not-a-uuid", approver=self.admin, approved=True)

    def test_list_narrows_to_maker(self):
        pharmacist = make_user(self.tenant, role="pharmacist")
        own = self._request(self.line_a, RequestType.PRICE_CHANGE, Decimal("90.00"))
        create_edit_request(
            tenant_id=self.tenant.id,
            requested_by=pharmacist,
            sale_id=self.sale.id,
            sale_line_item_id=self.line_b.id,
            request_type=RequestType.LINE_DELETE,
            reason="Customer changed mind",
        )

        self.assertEqual(list(list_requests(tenant_id=self.tenant.id, requested_by=self.cashier)), [own])
        self.assertEqual(list_requests(tenant_id=self.tenant.id).count(), 2)


class InclusiveEditRequestTests(TestCase):
    """
    PRICE_CHANGE under INCLUSIVE pricing: the new price is VAT-inclusive and
    the line discount stays fixed.
    """

    def setUp(self):
        self.tenant = make_tenant("Inclusive Pharmacy", pricing_mode="INCLUSIVE")
        self.branch = make_branch(self.tenant)
        self.admin = make_user(self.tenant, role="admin")
        self.cashier = make_user(self.tenant, role="cashier")
        self.product = make_product(self.tenant, selling_price=Decimal("116.00"))
        self.lot = make_lot(self.tenant, self.product, self.branch, quantity=5)

        self.sale = create_sale(
            tenant_id=self.tenant.id,
            cashier=self.cashier,
            branch_id=self.branch.id,
            line_items=[
                {
                    "inventory_id": self.lot.id,
                    "quantity": 1,
                    "unit_price": Decimal("116.00"),
                    "discount_amount": Decimal("20.00"),
                }
            ],
            payments=[{"payment_method": "CASH", "amount": Decimal("92.80")}],
        )
        self.line = self.sale.line_items.get()

    def test_approved_price_change_reprices_inclusive_sale(self):
        req = create_edit_request(
            tenant_id=self.tenant.id,
            requested_by=self.cashier,
            sale_id=self.sale.id,
            sale_line_item_id=self.line.id,
            request_type=RequestType.PRICE_CHANGE,
            new_unit_price=Decimal("58.00"),
            reason="Promotional price",
        )

        approve_or_reject(tenant_id=self.tenant.id, request_id=req.id, approver=self.admin, approved=True)

        self.sale.refresh_from_db()
        self.line.refresh_from_db()

        self.assertEqual(self.line.unit_price, Decimal("58.00"))
        self.assertEqual(self.sale.subtotal, Decimal("50.00"))
        self.assertEqual(self.sale.tax_amount, Decimal("4.80"))
        self.assertEqual(self.sale.discount_amount, Decimal("20.00"))
        self.assertEqual(self.sale.total_amount, Decimal("34.80"))
