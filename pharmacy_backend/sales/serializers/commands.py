# sales/serializers/commands.py

"""
Command serializers.

They do NOT touch the database. They only shape and type-check input;
business validation lives in the services.
"""

from rest_framework import serializers

from sales.models import SaleEditRequest, SalePayment


# ==========================================================
# CREATE SALE
# ==========================================================

class SaleLineInputSerializer(serializers.Serializer):
    inventory_id = serializers.UUIDField()
    product_id = serializers.UUIDField(required=False)
    quantity = serializers.IntegerField()
    unit_price = serializers.DecimalField(max_digits=12, decimal_places=2)
    discount_amount = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, allow_null=True
    )
    discount_percentage = serializers.DecimalField(
        max_digits=5, decimal_places=2, required=False, allow_null=True
    )
    prescription_reference = serializers.CharField(required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class SalePaymentInputSerializer(serializers.Serializer):
    payment_method = serializers.ChoiceField(choices=SalePayment.Method.choices)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    reference_number = serializers.CharField(required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class CreateSaleSerializer(serializers.Serializer):
    branch_id = serializers.UUIDField()
    line_items = SaleLineInputSerializer(many=True, allow_empty=False)
    payments = SalePaymentInputSerializer(many=True, required=False, default=list)
    is_credit_sale = serializers.BooleanField(required=False, default=False)
    customer_id = serializers.UUIDField(required=False, allow_null=True)
    customer_name = serializers.CharField(required=False, allow_blank=True, default="")
    customer_phone = serializers.CharField(required=False, allow_blank=True, default="")
    discount_amount = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, allow_null=True
    )
    notes = serializers.CharField(required=False, allow_blank=True, default="")


# ==========================================================
# CREATE RETURN
# ==========================================================

class ReturnLineInputSerializer(serializers.Serializer):
    original_sale_line_item_id = serializers.UUIDField()
    quantity_returned = serializers.IntegerField()
    unit_price = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, allow_null=True
    )
    restore_to_inventory = serializers.BooleanField(required=False, default=True)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class CreateSaleReturnSerializer(serializers.Serializer):
    original_sale_id = serializers.UUIDField()
    return_reason = serializers.CharField(allow_blank=True)
    return_line_items = ReturnLineInputSerializer(many=True, allow_empty=False)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


# ==========================================================
# EDIT REQUESTS
# ==========================================================

class CreateEditRequestSerializer(serializers.Serializer):
    sale_id = serializers.UUIDField()
    sale_line_item_id = serializers.UUIDField()
    request_type = serializers.ChoiceField(choices=SaleEditRequest.RequestType.choices)
    new_unit_price = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, allow_null=True
    )
    reason = serializers.CharField(allow_blank=True)


class DecideEditRequestSerializer(serializers.Serializer):
    approved = serializers.BooleanField()
    rejection_reason = serializers.CharField(required=False, allow_blank=True, default="")


# ==========================================================
# REPORTING
# ==========================================================

class DateRangeSerializer(serializers.Serializer):
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)
