# sales/api/urls.py

"""
SALES API URLS

Mounted at /api/sales/:
    sales/           list, retrieve, create, my-commission
    returns/         list, retrieve, create
    edit-requests/   list, retrieve, create, {id}/decide, pending, pending-count
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from sales.api.viewsets import SaleEditRequestViewSet, SaleReturnViewSet, SaleViewSet

router = DefaultRouter()
router.register(r"sales", SaleViewSet, basename="sales")
router.register(r"returns", SaleReturnViewSet, basename="sale-returns")
router.register(r"edit-requests", SaleEditRequestViewSet, basename="sale-edit-requests")

urlpatterns = [
    path("", include(router.urls)),
]
