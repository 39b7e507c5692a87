# products/views/product.py

from rest_framework import viewsets
from rest_framework.permissions import IsAuthenticated

from backend.api_errors import DomainErrorMixin
from permissions.roles import CAP_INVENTORY_VIEW, CAP_POS_SELL, HasAnyCapability
from products.filters import ProductFilter
from products.models import Product
from products.serializers import ProductSerializer


class ProductViewSet(DomainErrorMixin, viewsets.ReadOnlyModelViewSet):
    """
    Tenant product catalog (read-only; POS lookup by name, sku or barcode).
    """

    serializer_class = ProductSerializer
    filterset_class = ProductFilter
    permission_classes = [IsAuthenticated, HasAnyCapability]
    required_any_capabilities = {CAP_INVENTORY_VIEW, CAP_POS_SELL}

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return Product.objects.none()
        return Product.objects.filter(tenant_id=self.tenant_id).order_by("name")
