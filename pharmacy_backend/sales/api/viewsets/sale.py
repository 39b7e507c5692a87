# sales/api/viewsets/sale.py

"""
======================================================
PATH: sales/api/viewsets/sale.py
======================================================
SALE VIEWSET (STAFF)

Purpose:
- Sales history (list + retrieve, tenant-scoped, filterable).
- POS sale creation (Sale Engine).
- Cashier commission summary (computed on read).

Security:
- Requires IsAuthenticated
- list/retrieve: ANY of sales.view, pos.sell
- create / my-commission: pos.sell
- Tenant comes from request.user; never from the payload.
======================================================
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from backend.api_errors import DomainErrorMixin
from permissions.roles import (
    CAP_POS_SELL,
    CAP_SALES_VIEW,
    HasAnyCapability,
    HasCapability,
)
from sales.api.filters import SaleFilter
from sales.models import Sale
from sales.serializers import (
    CommissionSerializer,
    CreateSaleSerializer,
    DateRangeSerializer,
    SaleSerializer,
)
from sales.services.sale_service import calculate_commission, create_sale, sales_for_tenant


class SaleViewSet(
    DomainErrorMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = SaleSerializer
    filterset_class = SaleFilter
    permission_classes = [IsAuthenticated]

    required_any_capabilities = {CAP_SALES_VIEW, CAP_POS_SELL}
    required_capability = CAP_POS_SELL

    def get_permissions(self):
        if self.action in {"create", "my_commission"}:
            return [IsAuthenticated(), HasCapability()]
        return [IsAuthenticated(), HasAnyCapability()]

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return Sale.objects.none()
        return sales_for_tenant(tenant_id=self.tenant_id).order_by("-sale_date", "-created_at")

    # ======================================================
    # CREATE SALE
    # POST /api/sales/sales/
    # ======================================================

    @extend_schema(request=CreateSaleSerializer, responses={201: SaleSerializer})
    def create(self, request, *args, **kwargs):
        ser = CreateSaleSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data

        sale = create_sale(
            tenant_id=self.tenant_id,
            cashier=request.user,
            branch_id=data["branch_id"],
            line_items=data["line_items"],
            payments=data.get("payments") or [],
            is_credit_sale=data.get("is_credit_sale", False),
            customer_id=data.get("customer_id"),
            customer_name=data.get("customer_name", ""),
            customer_phone=data.get("customer_phone", ""),
            discount_amount=data.get("discount_amount"),
            notes=data.get("notes", ""),
        )
        return Response(SaleSerializer(sale).data, status=status.HTTP_201_CREATED)

    # ======================================================
    # COMMISSION
    # GET /api/sales/sales/my-commission/?date_from=&date_to=
    # ======================================================

    @extend_schema(
        parameters=[
            OpenApiParameter("date_from", str, description="YYYY-MM-DD"),
            OpenApiParameter("date_to", str, description="YYYY-MM-DD"),
        ],
        responses={200: CommissionSerializer},
    )
    @action(detail=False, methods=["get"], url_path="my-commission")
    def my_commission(self, request):
        ser = DateRangeSerializer(data=request.query_params)
        ser.is_valid(raise_exception=True)

        summary = calculate_commission(
            tenant_id=self.tenant_id,
            cashier=request.user,
            date_from=ser.validated_data.get("date_from"),
            date_to=ser.validated_data.get("date_to"),
        )
        return Response(CommissionSerializer(summary).data)

