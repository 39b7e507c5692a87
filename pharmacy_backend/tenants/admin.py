# tenants/admin.py

from django.contrib import admin

from tenants.models import Branch, DocumentSequence, Tenant, TenantTaxSettings


class BranchInline(admin.TabularInline):
    model = Branch
    extra = 0
    fields = ("name", "code", "phone", "is_active")


@admin.register(Tenant)
class TenantAdmin(admin.ModelAdmin):
    list_display = ("name", "is_active", "created_at")
    search_fields = ("name",)
    inlines = [BranchInline]


@admin.register(Branch)
class BranchAdmin(admin.ModelAdmin):
    list_display = ("name", "code", "tenant", "is_active")
    list_filter = ("is_active",)
    search_fields = ("name", "code")


@admin.register(TenantTaxSettings)
class TenantTaxSettingsAdmin(admin.ModelAdmin):
    list_display = ("tenant", "charge_vat", "default_vat_rate", "pricing_mode")


@admin.register(DocumentSequence)
class DocumentSequenceAdmin(admin.ModelAdmin):
    list_display = ("tenant", "kind", "last_value", "updated_at")
    readonly_fields = ("tenant", "kind", "last_value", "updated_at")
