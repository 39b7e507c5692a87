# products/filters.py

import django_filters
from django.db.models import Q

from products.models import Inventory, InventoryAuditLog, Product


class ProductFilter(django_filters.FilterSet):
    q = django_filters.CharFilter(method="filter_q")

    class Meta:
        model = Product
        fields = ["tax_classification", "requires_prescription", "is_active"]

    def filter_q(self, queryset, name, value):
        value = (value or "").strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(name__icontains=value) | Q(sku__iexact=value) | Q(barcode__iexact=value)
        )


class InventoryFilter(django_filters.FilterSet):
    product = django_filters.UUIDFilter(field_name="product_id")
    branch = django_filters.UUIDFilter(field_name="branch_id")
    in_stock = django_filters.BooleanFilter(method="filter_in_stock")

    class Meta:
        model = Inventory
        fields = ["product", "branch", "batch_number"]

    def filter_in_stock(self, queryset, name, value):
        if value is None:
            return queryset
        return queryset.filter(quantity__gt=0) if value else queryset.filter(quantity=0)


class InventoryAuditLogFilter(django_filters.FilterSet):
    product = django_filters.UUIDFilter(field_name="product_id")
    branch = django_filters.UUIDFilter(field_name="branch_id")
    inventory = django_filters.UUIDFilter(field_name="inventory_id")
    date_from = django_filters.DateFilter(field_name="performed_at", lookup_expr="date__gte")
    date_to = django_filters.DateFilter(field_name="performed_at", lookup_expr="date__lte")

    class Meta:
        model = InventoryAuditLog
        fields = [
            "product",
            "branch",
            "inventory",
            "source_reference",
            "source_type",
            "transaction_type",
        ]
