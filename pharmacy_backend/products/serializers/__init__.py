from .inventory import (
    AdjustStockSerializer,
    InventoryAuditLogSerializer,
    InventorySerializer,
    ReceiveStockSerializer,
)
from .product import ProductSerializer

__all__ = [
    "ProductSerializer",
    "InventorySerializer",
    "InventoryAuditLogSerializer",
    "ReceiveStockSerializer",
    "AdjustStockSerializer",
]
