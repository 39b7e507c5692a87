# tenants/services/tenant_scope.py

"""
TENANT SCOPE

Every engine operation receives tenant_id explicitly. These helpers are the
only place that turns an id into a tenant-owned row.

HARD RULES:
- tenant_id must never be None inside a state-changing operation
- a row owned by another tenant is reported exactly like a missing row
"""

from __future__ import annotations

import uuid

from tenants.models import Branch, Tenant


class TenantScopeError(Exception):
    pass


class TenantRequiredError(TenantScopeError):
    """Raised when an operation is invoked without a tenant."""


class NotFoundError(TenantScopeError):
    """Missing row, or a row that belongs to a different tenant."""


def require_tenant_id(tenant_id):
    if tenant_id is None or str(tenant_id).strip() == "":
        raise TenantRequiredError("Tenant context is required for this operation")
    return tenant_id


def parse_id(value, *, label: str) -> uuid.UUID:
    """
    Ids arrive as strings from URLs and JSON bodies. A malformed id cannot
    match any row, so it is reported as not found.
    """
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value).strip())
    except (TypeError, ValueError, AttributeError) as exc:
        raise NotFoundError(f"{label} not found: {value}") from exc


def get_tenant(*, tenant_id) -> Tenant:
    require_tenant_id(tenant_id)
    try:
        return Tenant.objects.get(id=parse_id(tenant_id, label="Tenant"), is_active=True)
    except Tenant.DoesNotExist as exc:
        raise NotFoundError(f"Tenant not found: {tenant_id}") from exc


def get_branch_for_tenant(*, tenant_id, branch_id) -> Branch:
    require_tenant_id(tenant_id)
    branch = Branch.objects.filter(
        id=parse_id(branch_id, label="Branch"), tenant_id=tenant_id
    ).first()
    if branch is None:
        raise NotFoundError(f"Branch not found: {branch_id}")
    if not branch.is_active:
        raise NotFoundError(f"Branch is inactive: {branch_id}")
    return branch


def tenant_id_from_request(request):
    """
    Resolve the caller's tenant from the authenticated user.
    Returns None when the user is not attached to a tenant.
    """
    user = getattr(request, "user", None)
    return getattr(user, "tenant_id", None)
