# products/urls.py

"""
PRODUCTS URLS

Mounted at /api/products/:
    products/                   catalog (read-only)
    inventory/                  lots (read-only), receive, {id}/adjust
    audit-logs/                 append-only stock audit trail
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from products.views import InventoryAuditLogViewSet, InventoryViewSet, ProductViewSet

router = DefaultRouter()

router.register(r"products", ProductViewSet, basename="products")
router.register(r"inventory", InventoryViewSet, basename="inventory")
router.register(r"audit-logs", InventoryAuditLogViewSet, basename="inventory-audit-logs")

urlpatterns = [
    path("", include(router.urls)),
]
