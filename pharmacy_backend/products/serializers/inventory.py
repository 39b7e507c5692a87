# products/serializers/inventory.py

from rest_framework import serializers

from products.models import Inventory, InventoryAuditLog


class InventorySerializer(serializers.ModelSerializer):
    """
    Inventory lot (read-only). Quantity changes go through the ledger.
    """

    product_name = serializers.CharField(source="product.name", read_only=True)
    sku = serializers.CharField(source="product.sku", read_only=True)
    branch_name = serializers.CharField(source="branch.name", read_only=True)

    class Meta:
        model = Inventory
        fields = [
            "id",
            "product",
            "product_name",
            "sku",
            "branch",
            "branch_name",
            "batch_number",
            "expiry_date",
            "quantity",
            "unit_cost",
            "selling_price",
            "location",
            "last_restocked",
        ]
        read_only_fields = fields


class InventoryAuditLogSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)

    class Meta:
        model = InventoryAuditLog
        fields = [
            "id",
            "product",
            "product_name",
            "branch",
            "inventory",
            "transaction_type",
            "quantity_changed",
            "quantity_before",
            "quantity_after",
            "unit_cost",
            "selling_price",
            "total_value",
            "batch_number",
            "expiry_date",
            "source_reference",
            "source_type",
            "source_id",
            "performed_by",
            "performed_at",
            "notes",
        ]
        read_only_fields = fields


# ==========================================================
# COMMANDS
# ==========================================================

class ReceiveStockSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    branch_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)
    source_reference = serializers.CharField(max_length=64)
    unit_cost = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, allow_null=True
    )
    selling_price = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, allow_null=True
    )
    batch_number = serializers.CharField(required=False, allow_blank=True, default="")
    expiry_date = serializers.DateField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class AdjustStockSerializer(serializers.Serializer):
    new_quantity = serializers.IntegerField(min_value=0)
    reason = serializers.CharField()
