# sales/serializers/edit_request.py

from rest_framework import serializers

from sales.models import SaleEditRequest


class SaleEditRequestSerializer(serializers.ModelSerializer):
    sale_number = serializers.CharField(source="sale.sale_number", read_only=True)
    requested_by_email = serializers.CharField(source="requested_by.email", read_only=True)
    approved_by_email = serializers.SerializerMethodField()

    class Meta:
        model = SaleEditRequest
        fields = [
            "id",
            "sale",
            "sale_number",
            "sale_line_item",
            "request_type",
            "original_unit_price",
            "new_unit_price",
            "reason",
            "status",
            "requested_by",
            "requested_by_email",
            "approved_by",
            "approved_by_email",
            "approved_at",
            "rejection_reason",
            "created_at",
        ]
        read_only_fields = fields

    def get_approved_by_email(self, obj):
        approver = getattr(obj, "approved_by", None)
        return getattr(approver, "email", None)
