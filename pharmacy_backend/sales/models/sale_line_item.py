# sales/models/sale_line_item.py

import uuid
from decimal import Decimal

from django.db import models
from django.db.models import F, Q

from products.models import Inventory, Product

from .sale import Sale


class SaleLineItem(models.Model):
    """
    One sold quantity from a specific inventory lot.

    Money snapshot per line (all 2dp):
    - net_amount: pre-discount net
    - discount_amount: discount actually applied to the net
    - tax_amount: tax after proportional discount adjustment
    - line_total: net - discount + tax (gross, never negative)

    returned_quantity is cumulative and only grows (Return Engine).
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    sale = models.ForeignKey(Sale, on_delete=models.CASCADE, related_name="line_items")

    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name="sale_line_items")
    inventory = models.ForeignKey(
        Inventory,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="sale_line_items",
    )

    quantity = models.PositiveIntegerField()
    unit_price = models.DecimalField(max_digits=12, decimal_places=2)

    discount_percentage = models.DecimalField(
        max_digits=5, decimal_places=2, null=True, blank=True
    )
    discount_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )

    net_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    tax_percentage = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal("0.00"))
    tax_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    line_total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    returned_quantity = models.PositiveIntegerField(default=0)

    batch_number = models.CharField(max_length=128, blank=True, default="")
    expiry_date = models.DateField(null=True, blank=True)

    prescription_reference = models.CharField(max_length=128, blank=True)
    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["sale"], name="saleline_sale_idx"),
            models.Index(fields=["product"], name="saleline_product_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(returned_quantity__lte=F("quantity")),
                name="sale_line_returned_lte_quantity",
            ),
            models.CheckConstraint(
                condition=Q(line_total__gte=0),
                name="sale_line_total_non_negative",
            ),
        ]

    @property
    def remaining_quantity(self) -> int:
        return int(self.quantity or 0) - int(self.returned_quantity or 0)

    def __str__(self):
        return f"{self.sale_id} | {self.product_id} x {self.quantity}"
