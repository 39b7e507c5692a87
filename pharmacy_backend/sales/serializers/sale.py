# sales/serializers/sale.py

from rest_framework import serializers

from sales.models import Sale, SaleLineItem, SalePayment


class SalePaymentSerializer(serializers.ModelSerializer):
    class Meta:
        model = SalePayment
        fields = [
            "id",
            "payment_method",
            "amount",
            "reference_number",
            "notes",
            "created_at",
        ]
        read_only_fields = fields


class SaleLineItemSerializer(serializers.ModelSerializer):
    """
    Sale line (read-only). Designed for receipts + UI display.
    """

    product_name = serializers.CharField(source="product.name", read_only=True)
    sku = serializers.CharField(source="product.sku", read_only=True)
    remaining_quantity = serializers.IntegerField(read_only=True)

    class Meta:
        model = SaleLineItem
        fields = [
            "id",
            "product",
            "product_name",
            "sku",
            "inventory",
            "batch_number",
            "expiry_date",
            "quantity",
            "returned_quantity",
            "remaining_quantity",
            "unit_price",
            "discount_percentage",
            "discount_amount",
            "net_amount",
            "tax_percentage",
            "tax_amount",
            "line_total",
            "prescription_reference",
            "notes",
        ]
        read_only_fields = fields


class SaleSerializer(serializers.ModelSerializer):
    line_items = SaleLineItemSerializer(many=True, read_only=True)
    payments = SalePaymentSerializer(many=True, read_only=True)
    branch_name = serializers.CharField(source="branch.name", read_only=True)
    cashier_email = serializers.SerializerMethodField()

    class Meta:
        model = Sale
        fields = [
            "id",
            "sale_number",
            "branch",
            "branch_name",
            "customer",
            "customer_name",
            "customer_phone",
            "subtotal",
            "discount_amount",
            "declared_discount_amount",
            "tax_amount",
            "total_amount",
            "effective_tax_rate",
            "pricing_mode",
            "status",
            "return_status",
            "is_credit_sale",
            "notes",
            "cashier",
            "cashier_email",
            "sale_date",
            "line_items",
            "payments",
        ]
        read_only_fields = fields

    def get_cashier_email(self, obj):
        cashier = getattr(obj, "cashier", None)
        return getattr(cashier, "email", None)


class CommissionSerializer(serializers.Serializer):
    sales_count = serializers.IntegerField()
    gross_margin = serializers.DecimalField(max_digits=14, decimal_places=2)
    commission_rate = serializers.DecimalField(max_digits=5, decimal_places=4)
    commission = serializers.DecimalField(max_digits=14, decimal_places=2)
