# products/views/__init__.py

from .inventory import InventoryAuditLogViewSet, InventoryViewSet
from .product import ProductViewSet

__all__ = [
    "ProductViewSet",
    "InventoryViewSet",
    "InventoryAuditLogViewSet",
]
