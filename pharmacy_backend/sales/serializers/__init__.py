from .commands import (
    CreateEditRequestSerializer,
    CreateSaleReturnSerializer,
    CreateSaleSerializer,
    DateRangeSerializer,
    DecideEditRequestSerializer,
)
from .edit_request import SaleEditRequestSerializer
from .sale import CommissionSerializer, SaleLineItemSerializer, SalePaymentSerializer, SaleSerializer
from .sale_return import SaleReturnLineItemSerializer, SaleReturnSerializer

__all__ = [
    "SaleSerializer",
    "SaleLineItemSerializer",
    "SalePaymentSerializer",
    "CommissionSerializer",
    "SaleReturnSerializer",
    "SaleReturnLineItemSerializer",
    "SaleEditRequestSerializer",
    "CreateSaleSerializer",
    "CreateSaleReturnSerializer",
    "CreateEditRequestSerializer",
    "DecideEditRequestSerializer",
    "DateRangeSerializer",
]
