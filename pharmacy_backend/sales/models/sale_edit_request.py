# sales/models/sale_edit_request.py

"""
SALE EDIT REQUEST (MAKER-CHECKER)

A non-privileged user proposes a PRICE_CHANGE or LINE_DELETE against a
completed sale; an admin approves or rejects it exactly once.

Allowed status moves live in sales.services.edit_request_lifecycle.
sale_line_item becomes NULL after an approved LINE_DELETE removes the line.
"""

import uuid

from django.conf import settings
from django.db import models

from tenants.models import Tenant

from .sale import Sale
from .sale_line_item import SaleLineItem

User = settings.AUTH_USER_MODEL


class SaleEditRequest(models.Model):
    class RequestType(models.TextChoices):
        PRICE_CHANGE = "PRICE_CHANGE", "Price change"
        LINE_DELETE = "LINE_DELETE", "Line delete"

    class Status(models.TextChoices):
        PENDING = "PENDING", "Pending"
        APPROVED = "APPROVED", "Approved"
        REJECTED = "REJECTED", "Rejected"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    tenant = models.ForeignKey(Tenant, on_delete=models.PROTECT, related_name="sale_edit_requests")
    sale = models.ForeignKey(Sale, on_delete=models.CASCADE, related_name="edit_requests")
    sale_line_item = models.ForeignKey(
        SaleLineItem,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="edit_requests",
    )

    request_type = models.CharField(max_length=16, choices=RequestType.choices)

    new_unit_price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    original_unit_price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)

    reason = models.TextField()

    status = models.CharField(max_length=16, choices=Status.choices, default=Status.PENDING)

    requested_by = models.ForeignKey(
        User, on_delete=models.SET_NULL, null=True, related_name="sale_edit_requests"
    )
    approved_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="decided_sale_edit_requests",
    )
    approved_at = models.DateTimeField(null=True, blank=True)
    rejection_reason = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["tenant", "status"], name="editreq_tenant_status_idx"),
            models.Index(fields=["sale"], name="editreq_sale_idx"),
        ]

    def __str__(self):
        return f"{self.request_type} | {self.sale_id} | {self.status}"
