"""
PATH: users/models/user.py

STAFF USER (email login, one tenant each)

- API requests take their tenant from request.user.tenant_id and pass it
  down to the services explicitly.
- Superusers may have no tenant; they only use Django admin.
"""

from __future__ import annotations

import uuid

from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.core.exceptions import ValidationError
from django.db import models


class UserManager(BaseUserManager):
    use_in_migrations = True

    def _resolve_email(self, email, username) -> str:
        email = (email or "").strip()
        username = (username or "").strip()
        if email:
            return self.normalize_email(email)
        if username:
            # Username-style calls (seed scripts, tests) get a local address.
            return self.normalize_email(f"{username.lower()}@local.test")
        raise ValueError("An email address is required (or provide username=...)")

    def create_user(self, email=None, password=None, **extra_fields):
        email = self._resolve_email(email, extra_fields.pop("username", ""))
        extra_fields.setdefault("is_active", True)

        user = self.model(email=email, **extra_fields)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()

        # clean() enforces the tenant rule for staff users.
        user.full_clean(exclude=["password"])
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        if not password:
            raise ValueError("Superuser must have a password")

        for flag in ("is_staff", "is_superuser", "is_active"):
            if extra_fields.setdefault(flag, True) is not True:
                raise ValueError(f"Superuser must have {flag}=True")
        extra_fields.setdefault("role", "admin")

        return self.create_user(email=email, password=password, **extra_fields)


class User(AbstractBaseUser, PermissionsMixin):
    ROLE_CHOICES = [
        ("admin", "Admin"),
        ("manager", "Manager"),
        ("pharmacist", "Pharmacist"),
        ("cashier", "Cashier"),
        ("reception", "Reception"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    tenant = models.ForeignKey(
        "tenants.Tenant",
        on_delete=models.PROTECT,
        related_name="users",
        null=True,
        blank=True,
    )

    email = models.EmailField(unique=True)

    first_name = models.CharField(max_length=100, blank=True)
    last_name = models.CharField(max_length=100, blank=True)

    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default="cashier")

    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["tenant", "role"], name="user_tenant_role_idx"),
        ]

    def clean(self):
        if self.email:
            self.email = self.__class__.objects.normalize_email(self.email).strip()
        if not self.email:
            raise ValidationError("User must have an email")
        if not self.tenant_id and not self.is_superuser:
            raise ValidationError({"tenant": "Staff users must belong to a tenant"})

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __str__(self):
        return f"{self.email} ({self.role})"
