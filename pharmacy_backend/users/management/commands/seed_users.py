# users/management/commands/seed_users.py

from __future__ import annotations

from dataclasses import dataclass

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from permissions.roles import (
    ROLE_ADMIN,
    ROLE_CASHIER,
    ROLE_MANAGER,
    ROLE_PHARMACIST,
)
from tenants.models import Branch, Tenant
from tenants.services.tax_settings_service import get_tax_settings


@dataclass(frozen=True)
class SeedStaff:
    role: str
    local_part: str
    first_name: str = ""
    last_name: str = ""


SEED_STAFF = [
    SeedStaff(ROLE_ADMIN, "admin", "System", "Admin"),
    SeedStaff(ROLE_MANAGER, "manager", "Store", "Manager"),
    SeedStaff(ROLE_PHARMACIST, "pharmacist", "Lead", "Pharmacist"),
    SeedStaff(ROLE_CASHIER, "cashier", "Front", "Desk"),
]


class Command(BaseCommand):
    help = "Seed a tenant, its main branch and one staff user per role."

    def add_arguments(self, parser):
        parser.add_argument("--tenant", type=str, default="Demo Pharmacy")
        parser.add_argument("--domain", type=str, default="example.com")
        parser.add_argument(
            "--password",
            type=str,
            default="Pass1234!",
            help="Password for seeded users (default: Pass1234!)",
        )
        parser.add_argument(
            "--force-password",
            action="store_true",
            help="Reset password for existing seeded users too.",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        tenant_name = (options.get("tenant") or "").strip()
        domain = (options.get("domain") or "").strip().lower()
        password = options.get("password") or ""
        force_password = bool(options.get("force_password"))

        if not tenant_name:
            raise CommandError("--tenant cannot be empty.")
        if not password or len(password) < 6:
            raise CommandError("--password must be at least 6 characters.")

        tenant, _ = Tenant.objects.get_or_create(name=tenant_name)
        branch, _ = Branch.objects.get_or_create(
            tenant=tenant, code="MAIN", defaults={"name": "Main Branch"}
        )
        get_tax_settings(tenant_id=tenant.id)

        self.stdout.write(f"Seeding users for tenant='{tenant.name}' (branch {branch.code}) ...")

        outcomes = {"created": 0, "updated": 0}
        for staff in SEED_STAFF:
            email = f"{staff.local_part}@{domain}"
            outcome = self._upsert(
                staff=staff,
                email=email,
                tenant=tenant,
                password=password,
                force_password=force_password,
            )
            outcomes[outcome] += 1
            self.stdout.write(f"{outcome:<8} {staff.role:<11} {email}")

        self.stdout.write(
            self.style.SUCCESS(
                f"Tenant '{tenant.name}': {outcomes['created']} created, "
                f"{outcomes['updated']} updated."
            )
        )

    def _upsert(self, *, staff: SeedStaff, email: str, tenant, password: str, force_password: bool) -> str:
        User = get_user_model()
        user = User.objects.filter(email=email).first()

        if user is None:
            User.objects.create_user(
                email=email,
                password=password,
                tenant=tenant,
                role=staff.role,
                first_name=staff.first_name,
                last_name=staff.last_name,
                is_staff=True,
            )
            return "created"

        if user.tenant_id != tenant.id:
            raise CommandError(f"{email} already belongs to another tenant.")

        user.role = staff.role
        user.is_active = True
        if force_password:
            user.set_password(password)
        user.save()
        return "updated"
