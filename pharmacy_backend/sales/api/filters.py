# sales/api/filters.py

import django_filters
from django.db.models import Q

from sales.models import Sale, SaleEditRequest, SaleReturn


class SaleFilter(django_filters.FilterSet):
    branch = django_filters.UUIDFilter(field_name="branch_id")
    status = django_filters.ChoiceFilter(choices=Sale.Status.choices)
    return_status = django_filters.ChoiceFilter(choices=Sale.ReturnStatus.choices)
    date_from = django_filters.DateFilter(field_name="sale_date", lookup_expr="date__gte")
    date_to = django_filters.DateFilter(field_name="sale_date", lookup_expr="date__lte")
    q = django_filters.CharFilter(method="filter_q")

    class Meta:
        model = Sale
        fields = ["branch", "status", "return_status", "is_credit_sale"]

    def filter_q(self, queryset, name, value):
        value = (value or "").strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(sale_number__icontains=value)
            | Q(customer_name__icontains=value)
            | Q(customer_phone__icontains=value)
        )


class SaleReturnFilter(django_filters.FilterSet):
    original_sale = django_filters.UUIDFilter(field_name="original_sale_id")
    date_from = django_filters.DateFilter(field_name="return_date", lookup_expr="date__gte")
    date_to = django_filters.DateFilter(field_name="return_date", lookup_expr="date__lte")

    class Meta:
        model = SaleReturn
        fields = ["original_sale", "status"]


class SaleEditRequestFilter(django_filters.FilterSet):
    sale = django_filters.UUIDFilter(field_name="sale_id")
    status = django_filters.ChoiceFilter(choices=SaleEditRequest.Status.choices)
    request_type = django_filters.ChoiceFilter(choices=SaleEditRequest.RequestType.choices)

    class Meta:
        model = SaleEditRequest
        fields = ["sale", "status", "request_type"]
