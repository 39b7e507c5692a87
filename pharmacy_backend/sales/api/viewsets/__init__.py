from .edit_request import SaleEditRequestViewSet
from .sale import SaleViewSet
from .sale_return import SaleReturnViewSet

__all__ = ["SaleViewSet", "SaleReturnViewSet", "SaleEditRequestViewSet"]
