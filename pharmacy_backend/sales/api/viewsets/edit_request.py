# sales/api/viewsets/edit_request.py

"""
SALE EDIT REQUEST VIEWSET (MAKER-CHECKER)

Endpoints:
- GET  edit-requests/                 list (filter: status, sale, request_type);
                                      makers see only their own requests
- POST edit-requests/                 create (maker: sales.edit_request)
- POST edit-requests/{id}/decide/     approve / reject (checker: sales.edit_approve)
- GET  edit-requests/pending/         pending queue (checker)
- GET  edit-requests/pending-count/   badge counter (checker)
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema, inline_serializer
from rest_framework import mixins, serializers, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from backend.api_errors import DomainErrorMixin
from permissions.roles import (
    CAP_SALES_EDIT_APPROVE,
    CAP_SALES_EDIT_REQUEST,
    HasAnyCapability,
    HasCapability,
    user_has_capability,
)
from sales.api.filters import SaleEditRequestFilter
from sales.models import SaleEditRequest
from sales.serializers import (
    CreateEditRequestSerializer,
    DecideEditRequestSerializer,
    SaleEditRequestSerializer,
)
from sales.services.edit_request_service import (
    approve_or_reject,
    create_edit_request,
    list_pending,
    list_requests,
    pending_count,
)


class SaleEditRequestViewSet(
    DomainErrorMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = SaleEditRequestSerializer
    filterset_class = SaleEditRequestFilter
    permission_classes = [IsAuthenticated]

    required_any_capabilities = {CAP_SALES_EDIT_REQUEST, CAP_SALES_EDIT_APPROVE}

    def get_permissions(self):
        if self.action == "create":
            self.required_capability = CAP_SALES_EDIT_REQUEST
            return [IsAuthenticated(), HasCapability()]
        if self.action in {"decide", "pending", "pending_count"}:
            self.required_capability = CAP_SALES_EDIT_APPROVE
            return [IsAuthenticated(), HasCapability()]
        return [IsAuthenticated(), HasAnyCapability()]

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return SaleEditRequest.objects.none()
        user = self.request.user
        if user_has_capability(user, CAP_SALES_EDIT_APPROVE):
            return list_requests(tenant_id=self.tenant_id)
        return list_requests(tenant_id=self.tenant_id, requested_by=user)

    @extend_schema(request=CreateEditRequestSerializer, responses={201: SaleEditRequestSerializer})
    def create(self, request, *args, **kwargs):
        ser = CreateEditRequestSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data

        edit_request = create_edit_request(
            tenant_id=self.tenant_id,
            requested_by=request.user,
            sale_id=data["sale_id"],
            sale_line_item_id=data["sale_line_item_id"],
            request_type=data["request_type"],
            new_unit_price=data.get("new_unit_price"),
            reason=data["reason"],
        )
        return Response(
            SaleEditRequestSerializer(edit_request).data,
            status=status.HTTP_201_CREATED,
        )

    @extend_schema(request=DecideEditRequestSerializer, responses={200: SaleEditRequestSerializer})
    @action(detail=True, methods=["post"], url_path="decide")
    def decide(self, request, pk=None):
        ser = DecideEditRequestSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        edit_request = approve_or_reject(
            tenant_id=self.tenant_id,
            request_id=pk,
            approver=request.user,
            approved=ser.validated_data["approved"],
            rejection_reason=ser.validated_data.get("rejection_reason", ""),
        )
        return Response(SaleEditRequestSerializer(edit_request).data)

    @extend_schema(responses={200: SaleEditRequestSerializer(many=True)})
    @action(detail=False, methods=["get"], url_path="pending")
    def pending(self, request):
        qs = list_pending(tenant_id=self.tenant_id)
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(SaleEditRequestSerializer(page, many=True).data)
        return Response(SaleEditRequestSerializer(qs, many=True).data)

    @extend_schema(
        responses={200: inline_serializer("PendingCount", {"count": serializers.IntegerField()})}
    )
    @action(detail=False, methods=["get"], url_path="pending-count")
    def pending_count(self, request):
        return Response({"count": pending_count(tenant_id=self.tenant_id)})
