# tenants/views.py

"""
TENANT SETTINGS API

GET /api/tenants/tax-settings/   current tenant's VAT settings (lazily created)
PUT /api/tenants/tax-settings/   update (settings.tax_edit)
GET /api/tenants/branches/       active branches of the caller's tenant
"""

from drf_spectacular.utils import extend_schema
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from backend.api_errors import DomainErrorMixin
from permissions.roles import CAP_SETTINGS_TAX_EDIT, HasCapability, IsStaff
from tenants.models import Branch
from tenants.serializers import (
    BranchSerializer,
    TenantTaxSettingsSerializer,
    TenantTaxSettingsUpdateSerializer,
)
from tenants.services.tax_settings_service import get_tax_settings, update_tax_settings


class TaxSettingsView(DomainErrorMixin, APIView):
    permission_classes = [IsAuthenticated]
    required_capability = CAP_SETTINGS_TAX_EDIT

    def get_permissions(self):
        if self.request.method == "PUT":
            return [IsAuthenticated(), HasCapability()]
        return [IsAuthenticated()]

    @extend_schema(responses={200: TenantTaxSettingsSerializer})
    def get(self, request):
        tax_settings = get_tax_settings(tenant_id=self.tenant_id)
        return Response(TenantTaxSettingsSerializer(tax_settings).data)

    @extend_schema(
        request=TenantTaxSettingsUpdateSerializer,
        responses={200: TenantTaxSettingsSerializer},
    )
    def put(self, request):
        ser = TenantTaxSettingsUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        tax_settings = update_tax_settings(tenant_id=self.tenant_id, **ser.validated_data)
        return Response(TenantTaxSettingsSerializer(tax_settings).data)


class BranchListView(DomainErrorMixin, APIView):
    permission_classes = [IsAuthenticated, IsStaff]

    @extend_schema(responses={200: BranchSerializer(many=True)})
    def get(self, request):
        qs = Branch.objects.filter(tenant_id=self.tenant_id, is_active=True).order_by("name")
        return Response(BranchSerializer(qs, many=True).data)
