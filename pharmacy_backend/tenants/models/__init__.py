# tenants/models/__init__.py

from .tenant import Tenant, Branch
from .tax_settings import TenantTaxSettings
from .document_sequence import DocumentSequence

__all__ = [
    "Tenant",
    "Branch",
    "TenantTaxSettings",
    "DocumentSequence",
]
