# sales/models/sale_payment.py

import uuid
from decimal import Decimal

from django.db import models

from .sale import Sale


class SalePayment(models.Model):
    """
    Payment legs for a Sale (split payments allowed).

    RULES (enforced in sale_service.create_sale):
    - non-credit sale: sum(amount) == sale.total_amount within tolerance
    - credit sale: sum(amount) <= sale.total_amount
    - reference_number required for electronic methods
    """

    class Method(models.TextChoices):
        CASH = "CASH", "Cash"
        TILL = "TILL", "Till"
        FAMILY_BANK = "FAMILY_BANK", "Family Bank"
        WATU_SIMU = "WATU_SIMU", "Watu Simu"
        MOGO = "MOGO", "Mogo"
        ONFON_N1 = "ONFON_N1", "Onfon N1"
        ONFON_N2 = "ONFON_N2", "Onfon N2"
        ONFON_GLEX = "ONFON_GLEX", "Onfon Glex"
        CREDIT = "CREDIT", "Credit"

    REFERENCE_NOT_REQUIRED = {Method.CASH, Method.CREDIT}

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    sale = models.ForeignKey(Sale, on_delete=models.CASCADE, related_name="payments")

    payment_method = models.CharField(max_length=32, choices=Method.choices)
    amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    reference_number = models.CharField(max_length=128, blank=True, default="")
    notes = models.CharField(max_length=255, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["sale"], name="salepay_sale_idx"),
            models.Index(fields=["payment_method"], name="salepay_method_idx"),
        ]

    def __str__(self):
        return f"{self.sale_id} | {self.payment_method} | {self.amount}"
