# tenants/serializers.py

from rest_framework import serializers

from tenants.models import Branch, TenantTaxSettings


class BranchSerializer(serializers.ModelSerializer):
    class Meta:
        model = Branch
        fields = [
            "id",
            "name",
            "code",
            "address",
            "phone",
            "is_active",
        ]
        read_only_fields = fields


class TenantTaxSettingsSerializer(serializers.ModelSerializer):
    class Meta:
        model = TenantTaxSettings
        fields = [
            "id",
            "charge_vat",
            "default_vat_rate",
            "pricing_mode",
            "updated_at",
        ]
        read_only_fields = fields


class TenantTaxSettingsUpdateSerializer(serializers.Serializer):
    charge_vat = serializers.BooleanField(required=False)
    default_vat_rate = serializers.DecimalField(
        max_digits=5, decimal_places=2, required=False
    )
    pricing_mode = serializers.ChoiceField(
        choices=TenantTaxSettings.PricingMode.choices, required=False
    )
