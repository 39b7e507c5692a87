"""
======================================================
PATH: products/views/inventory.py
======================================================
INVENTORY + AUDIT VIEWSETS

Purpose:
- Read inventory lots for the caller's tenant.
- Controlled quantity operations, always through the Inventory Ledger:
    POST inventory/receive/        stock intake (PURCHASE audit row)
    POST inventory/{id}/adjust/    stock count correction (ADJUSTMENT audit row)
- Read the append-only audit trail.

Lots are never created, edited or deleted through this API directly.
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from backend.api_errors import DomainErrorMixin
from permissions.roles import (
    CAP_AUDIT_VIEW,
    CAP_INVENTORY_ADJUST,
    CAP_INVENTORY_RECEIVE,
    CAP_INVENTORY_VIEW,
    CAP_POS_SELL,
    HasAnyCapability,
    HasCapability,
)
from products.filters import InventoryAuditLogFilter, InventoryFilter
from products.models import Inventory, InventoryAuditLog
from products.serializers import (
    AdjustStockSerializer,
    InventoryAuditLogSerializer,
    InventorySerializer,
    ReceiveStockSerializer,
)
from products.services.inventory_ledger import adjust_stock, receive_stock


class InventoryViewSet(DomainErrorMixin, viewsets.ReadOnlyModelViewSet):
    serializer_class = InventorySerializer
    filterset_class = InventoryFilter
    permission_classes = [IsAuthenticated]

    required_any_capabilities = {CAP_INVENTORY_VIEW, CAP_POS_SELL}

    def get_permissions(self):
        if self.action == "receive":
            self.required_capability = CAP_INVENTORY_RECEIVE
            return [IsAuthenticated(), HasCapability()]
        if self.action == "adjust":
            self.required_capability = CAP_INVENTORY_ADJUST
            return [IsAuthenticated(), HasCapability()]
        return [IsAuthenticated(), HasAnyCapability()]

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return Inventory.objects.none()
        return (
            Inventory.objects
            .filter(branch__tenant_id=self.tenant_id)
            .select_related("product", "branch")
            .order_by("product__name", "expiry_date", "created_at")
        )

    @extend_schema(request=ReceiveStockSerializer, responses={201: InventoryAuditLogSerializer})
    @action(detail=False, methods=["post"], url_path="receive")
    def receive(self, request):
        ser = ReceiveStockSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        audit = receive_stock(
            tenant_id=self.tenant_id,
            performed_by=request.user,
            **ser.validated_data,
        )
        return Response(InventoryAuditLogSerializer(audit).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=AdjustStockSerializer, responses={200: InventoryAuditLogSerializer})
    @action(detail=True, methods=["post"], url_path="adjust")
    def adjust(self, request, pk=None):
        ser = AdjustStockSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        audit = adjust_stock(
            tenant_id=self.tenant_id,
            inventory_id=pk,
            new_quantity=ser.validated_data["new_quantity"],
            reason=ser.validated_data["reason"],
            performed_by=request.user,
        )
        return Response(InventoryAuditLogSerializer(audit).data)


class InventoryAuditLogViewSet(DomainErrorMixin, viewsets.ReadOnlyModelViewSet):
    serializer_class = InventoryAuditLogSerializer
    filterset_class = InventoryAuditLogFilter
    permission_classes = [IsAuthenticated, HasAnyCapability]
    required_any_capabilities = {CAP_AUDIT_VIEW, CAP_INVENTORY_VIEW}

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return InventoryAuditLog.objects.none()
        return (
            InventoryAuditLog.objects
            .filter(tenant_id=self.tenant_id)
            .select_related("product")
            .order_by("-performed_at")
        )
