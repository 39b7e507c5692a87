# backend/api_errors.py

"""
API ERROR NORMALIZATION

Canonical error envelope shared by every app:

    {"error": {"code": "...", "message": "..."}}

Services raise domain exceptions; views translate them here.
First matching class wins, so subclasses are listed before their bases.
"""

from rest_framework import status
from rest_framework.response import Response

from products.services.inventory_ledger import (
    DuplicateDeductionError,
    InsufficientStockError,
    InvalidAdjustmentError,
    InventoryLedgerError,
)
from sales.services.exceptions import (
    EditRequestError,
    EditRequestPermissionError,
    InvalidTransitionError,
    PaymentMismatchError,
    PrescriptionRequiredError,
    ReturnValidationError,
    SalesServiceError,
    SaleValidationError,
)
from tenants.services.tax_settings_service import TaxSettingsError
from tenants.services.tenant_scope import (
    NotFoundError,
    TenantRequiredError,
    require_tenant_id,
    tenant_id_from_request,
)


ERROR_MAP = [
    (NotFoundError, "not_found", status.HTTP_404_NOT_FOUND),
    (TenantRequiredError, "tenant_required", status.HTTP_403_FORBIDDEN),
    (EditRequestPermissionError, "permission_denied", status.HTTP_403_FORBIDDEN),
    (InsufficientStockError, "insufficient_stock", status.HTTP_409_CONFLICT),
    (DuplicateDeductionError, "duplicate_deduction", status.HTTP_409_CONFLICT),
    (PaymentMismatchError, "payment_mismatch", status.HTTP_400_BAD_REQUEST),
    (PrescriptionRequiredError, "prescription_required", status.HTTP_400_BAD_REQUEST),
    (ReturnValidationError, "invalid_return", status.HTTP_400_BAD_REQUEST),
    (InvalidTransitionError, "invalid_transition", status.HTTP_400_BAD_REQUEST),
    (EditRequestError, "invalid_edit_request", status.HTTP_400_BAD_REQUEST),
    (SaleValidationError, "validation_error", status.HTTP_400_BAD_REQUEST),
    (InvalidAdjustmentError, "invalid_adjustment", status.HTTP_400_BAD_REQUEST),
    (InventoryLedgerError, "inventory_error", status.HTTP_400_BAD_REQUEST),
    (TaxSettingsError, "invalid_tax_settings", status.HTTP_400_BAD_REQUEST),
    (SalesServiceError, "sales_error", status.HTTP_400_BAD_REQUEST),
]

HANDLED_ERRORS = tuple(cls for cls, _, _ in ERROR_MAP)


def error_response(*, code: str, message: str, http_status: int):
    """
    Canonical API error response.
    """
    return Response(
        {"error": {"code": code, "message": message}},
        status=http_status,
    )


def domain_error_response(exc: Exception):
    for cls, code, http_status in ERROR_MAP:
        if isinstance(exc, cls):
            return error_response(code=code, message=str(exc), http_status=http_status)
    raise exc


class DomainErrorMixin:
    """
    APIView mixin: services raise, the view answers with the envelope.

    Also exposes the caller's tenant_id; a user without a tenant gets a
    403 before any service runs.
    """

    @property
    def tenant_id(self):
        return require_tenant_id(tenant_id_from_request(self.request))

    def handle_exception(self, exc):
        if isinstance(exc, HANDLED_ERRORS):
            return domain_error_response(exc)
        return super().handle_exception(exc)
