# users/admin.py

"""
Staff users in Django Admin, filtered and grouped by tenant.
"""

from __future__ import annotations

from django.contrib import admin
from django.contrib.auth import get_user_model
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin

from permissions.roles import capabilities_for

User = get_user_model()


@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    ordering = ("tenant__name", "email")
    list_display = ("email", "tenant", "role", "is_active", "is_superuser")
    list_filter = ("tenant", "role", "is_active")
    list_select_related = ("tenant",)
    search_fields = ("email", "first_name", "last_name", "tenant__name")
    autocomplete_fields = ("tenant",)
    readonly_fields = ("capability_list", "last_login", "created_at", "updated_at")

    fieldsets = (
        (None, {"fields": ("email", "password")}),
        ("Tenant & role", {"fields": ("tenant", "role", "capability_list")}),
        ("Profile", {"fields": ("first_name", "last_name")}),
        ("Access", {"fields": ("is_active", "is_staff", "is_superuser")}),
        ("Timestamps", {"fields": ("last_login", "created_at", "updated_at")}),
    )

    add_fieldsets = (
        (
            None,
            {
                "classes": ("wide",),
                "fields": ("email", "password1", "password2", "tenant", "role"),
            },
        ),
    )

    @admin.display(description="Capabilities")
    def capability_list(self, obj):
        return ", ".join(sorted(capabilities_for(obj))) or "-"
