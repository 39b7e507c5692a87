from .inventory_ledger import (
    adjust_stock,
    deduct_stock,
    find_restore_lot,
    receive_stock,
    restore_stock,
)

__all__ = [
    "adjust_stock",
    "deduct_stock",
    "find_restore_lot",
    "receive_stock",
    "restore_stock",
]
