# sales/api/viewsets/sale_return.py

"""
SALE RETURN VIEWSET (STAFF)

- list/retrieve: sales.view
- create: pos.return (Return Engine, partial or full)
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from backend.api_errors import DomainErrorMixin
from permissions.roles import CAP_POS_RETURN, CAP_SALES_VIEW, HasCapability
from sales.api.filters import SaleReturnFilter
from sales.models import SaleReturn
from sales.serializers import CreateSaleReturnSerializer, SaleReturnSerializer
from sales.services.return_service import create_sale_return, returns_for_tenant


class SaleReturnViewSet(
    DomainErrorMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = SaleReturnSerializer
    filterset_class = SaleReturnFilter
    permission_classes = [IsAuthenticated, HasCapability]

    @property
    def required_capability(self):
        return CAP_POS_RETURN if self.action == "create" else CAP_SALES_VIEW

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return SaleReturn.objects.none()
        return returns_for_tenant(tenant_id=self.tenant_id).order_by("-return_date")

    @extend_schema(request=CreateSaleReturnSerializer, responses={201: SaleReturnSerializer})
    def create(self, request, *args, **kwargs):
        ser = CreateSaleReturnSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data

        sale_return = create_sale_return(
            tenant_id=self.tenant_id,
            processed_by=request.user,
            original_sale_id=data["original_sale_id"],
            return_reason=data["return_reason"],
            return_line_items=data["return_line_items"],
            notes=data.get("notes", ""),
        )
        return Response(SaleReturnSerializer(sale_return).data, status=status.HTTP_201_CREATED)
