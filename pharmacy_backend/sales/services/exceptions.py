# sales/services/exceptions.py

"""
SALES SERVICE ERRORS

Centralized domain errors for the Sale Engine, Return Engine and the
edit-request workflow.

Tenant/not-found errors come from tenants.services.tenant_scope and
stock errors from products.services.inventory_ledger; they are re-exported
here so views can import every sales-facing error from one place.
"""

from products.services.inventory_ledger import (
    DuplicateDeductionError,
    InsufficientStockError,
    InventoryLedgerError,
)
from tenants.services.tenant_scope import NotFoundError, TenantRequiredError


class SalesServiceError(Exception):
    """Base exception for all sales service failures."""


class SaleValidationError(SalesServiceError):
    """Raised when a request violates a sales rule."""


class PaymentMismatchError(SaleValidationError):
    """Raised when payments do not reconcile with the sale total."""


class PrescriptionRequiredError(SaleValidationError):
    """Raised when a prescription-only product is sold without a reference."""


class ReturnValidationError(SaleValidationError):
    """Raised when a return exceeds what is still returnable."""


class InvalidTransitionError(SaleValidationError):
    """Raised on a status transition the lifecycle does not allow."""


class EditRequestError(SaleValidationError):
    """Raised when an edit request cannot be created or applied."""


class EditRequestPermissionError(SalesServiceError):
    """Raised when the approver lacks the approval capability."""


__all__ = [
    "SalesServiceError",
    "SaleValidationError",
    "PaymentMismatchError",
    "PrescriptionRequiredError",
    "ReturnValidationError",
    "InvalidTransitionError",
    "EditRequestError",
    "EditRequestPermissionError",
    "NotFoundError",
    "TenantRequiredError",
    "InventoryLedgerError",
    "InsufficientStockError",
    "DuplicateDeductionError",
]
