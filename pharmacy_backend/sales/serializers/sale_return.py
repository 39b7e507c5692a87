# sales/serializers/sale_return.py

from rest_framework import serializers

from sales.models import SaleReturn, SaleReturnLineItem


class SaleReturnLineItemSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)

    class Meta:
        model = SaleReturnLineItem
        fields = [
            "id",
            "original_sale_line_item",
            "product",
            "product_name",
            "quantity_returned",
            "unit_price",
            "refund_amount",
            "restore_to_inventory",
            "notes",
        ]
        read_only_fields = fields


class SaleReturnSerializer(serializers.ModelSerializer):
    line_items = SaleReturnLineItemSerializer(many=True, read_only=True)
    sale_number = serializers.CharField(source="original_sale.sale_number", read_only=True)

    class Meta:
        model = SaleReturn
        fields = [
            "id",
            "return_number",
            "original_sale",
            "sale_number",
            "return_reason",
            "total_refund_amount",
            "status",
            "processed_by",
            "notes",
            "return_date",
            "line_items",
        ]
        read_only_fields = fields
