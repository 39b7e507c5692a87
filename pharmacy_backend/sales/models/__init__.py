# sales/models/__init__.py

"""
SALES MODELS PACKAGE EXPORTS

Purpose:
- Central export surface for sales app models.
"""

from .customer import Customer
from .sale import Sale
from .sale_line_item import SaleLineItem
from .sale_payment import SalePayment
from .sale_return import SaleReturn, SaleReturnLineItem
from .sale_edit_request import SaleEditRequest

__all__ = [
    "Customer",
    "Sale",
    "SaleLineItem",
    "SalePayment",
    "SaleReturn",
    "SaleReturnLineItem",
    "SaleEditRequest",
]
