# sales/admin.py

from django.contrib import admin

from sales.models import (
    Customer,
    Sale,
    SaleEditRequest,
    SaleLineItem,
    SalePayment,
    SaleReturn,
    SaleReturnLineItem,
)


# ======================================================
# SALE ADMIN
# ======================================================


class SaleLineItemInline(admin.TabularInline):
    model = SaleLineItem
    extra = 0
    can_delete = False
    fields = (
        "product",
        "batch_number",
        "quantity",
        "returned_quantity",
        "unit_price",
        "discount_amount",
        "tax_amount",
        "line_total",
    )
    readonly_fields = fields


class SalePaymentInline(admin.TabularInline):
    model = SalePayment
    extra = 0
    can_delete = False
    fields = ("payment_method", "amount", "reference_number")
    readonly_fields = fields


@admin.register(Sale)
class SaleAdmin(admin.ModelAdmin):
    list_display = (
        "sale_number",
        "tenant",
        "branch",
        "status",
        "return_status",
        "total_amount",
        "cashier",
        "sale_date",
    )
    readonly_fields = (
        "sale_number",
        "subtotal",
        "discount_amount",
        "tax_amount",
        "total_amount",
        "effective_tax_rate",
        "return_status",
        "created_at",
    )
    search_fields = ("sale_number", "customer_name", "customer_phone")
    list_filter = ("status", "return_status", "is_credit_sale", "sale_date")
    inlines = [SaleLineItemInline, SalePaymentInline]


# ======================================================
# RETURN ADMIN
# ======================================================


class SaleReturnLineItemInline(admin.TabularInline):
    model = SaleReturnLineItem
    extra = 0
    can_delete = False
    fields = ("product", "quantity_returned", "unit_price", "refund_amount", "restore_to_inventory")
    readonly_fields = fields


@admin.register(SaleReturn)
class SaleReturnAdmin(admin.ModelAdmin):
    list_display = ("return_number", "original_sale", "total_refund_amount", "status", "return_date")
    readonly_fields = ("return_number", "original_sale", "total_refund_amount", "processed_by")
    search_fields = ("return_number", "original_sale__sale_number")
    inlines = [SaleReturnLineItemInline]


# ======================================================
# EDIT REQUEST ADMIN (read-only; decisions go through the API)
# ======================================================


@admin.register(SaleEditRequest)
class SaleEditRequestAdmin(admin.ModelAdmin):
    list_display = ("sale", "request_type", "status", "requested_by", "approved_by", "created_at")
    list_filter = ("request_type", "status")
    search_fields = ("sale__sale_number", "reason")

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ("name", "phone", "tenant", "is_active")
    search_fields = ("name", "phone", "email")
