# users/views/me.py

"""
GET /api/auth/me/

Who is logged in, which tenant they act for, and the capability strings
the POS client uses to show or hide actions.
"""

from django.contrib.auth import get_user_model
from drf_spectacular.utils import extend_schema, extend_schema_field
from rest_framework import serializers
from rest_framework.generics import RetrieveAPIView
from rest_framework.permissions import IsAuthenticated

from permissions.roles import capabilities_for


class MeSerializer(serializers.ModelSerializer):
    tenant_name = serializers.CharField(source="tenant.name", default=None, read_only=True)
    capabilities = serializers.SerializerMethodField()

    class Meta:
        model = get_user_model()
        fields = [
            "id",
            "email",
            "first_name",
            "last_name",
            "full_name",
            "role",
            "tenant_id",
            "tenant_name",
            "capabilities",
        ]
        read_only_fields = fields

    @extend_schema_field(serializers.ListField(child=serializers.CharField()))
    def get_capabilities(self, user):
        return sorted(capabilities_for(user))


@extend_schema(description="Current user profile, tenant and capabilities")
class MeView(RetrieveAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = MeSerializer

    def get_object(self):
        return self.request.user
