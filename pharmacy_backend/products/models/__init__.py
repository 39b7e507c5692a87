"""
PATH: products/models/__init__.py

Products models export surface.
"""

from .product import Product
from .inventory import Inventory
from .inventory_audit_log import InventoryAuditLog

__all__ = [
    "Product",
    "Inventory",
    "InventoryAuditLog",
]
