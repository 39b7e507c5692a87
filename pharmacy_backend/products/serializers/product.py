# products/serializers/product.py

from rest_framework import serializers

from products.models import Product


class ProductSerializer(serializers.ModelSerializer):
    class Meta:
        model = Product
        fields = [
            "id",
            "sku",
            "name",
            "barcode",
            "unit_cost",
            "selling_price",
            "tax_classification",
            "tax_rate",
            "requires_prescription",
            "is_active",
        ]
        read_only_fields = fields
