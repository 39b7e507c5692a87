# products/admin.py
"""
=====================================================
PATH: products/admin.py
=====================================================

Admin rules:
- Products are editable.
- Inventory lot quantities are read-only here; stock moves only through
  the Inventory Ledger (receive / adjust / sale / return).
- InventoryAuditLog is append-only: no add, no change, no delete.
"""

from __future__ import annotations

from django.contrib import admin

from products.models import Inventory, InventoryAuditLog, Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "sku",
        "tenant",
        "tax_classification",
        "selling_price",
        "requires_prescription",
        "is_active",
    )
    list_filter = ("tax_classification", "requires_prescription", "is_active")
    search_fields = ("name", "sku", "barcode")


@admin.register(Inventory)
class InventoryAdmin(admin.ModelAdmin):
    list_display = ("product", "branch", "batch_number", "expiry_date", "quantity", "unit_cost")
    list_filter = ("branch",)
    search_fields = ("product__name", "product__sku", "batch_number")
    readonly_fields = ("quantity", "last_restocked", "created_at", "updated_at")

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(InventoryAuditLog)
class InventoryAuditLogAdmin(admin.ModelAdmin):
    list_display = (
        "performed_at",
        "transaction_type",
        "product",
        "branch",
        "quantity_changed",
        "quantity_after",
        "source_reference",
    )
    list_filter = ("transaction_type", "source_type")
    search_fields = ("source_reference", "product__name", "batch_number")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
