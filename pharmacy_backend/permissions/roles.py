# permissions/roles.py

from __future__ import annotations

from typing import Optional

from rest_framework.permissions import BasePermission


# =========================================================
# ROLE CONSTANTS (STAFF JOB ROLES)
# =========================================================
# They describe what the staff member does, not the tenant's business.
ROLE_ADMIN = "admin"
ROLE_MANAGER = "manager"
ROLE_PHARMACIST = "pharmacist"
ROLE_CASHIER = "cashier"
ROLE_RECEPTION = "reception"

STAFF_ROLES = {
    ROLE_ADMIN,
    ROLE_MANAGER,
    ROLE_PHARMACIST,
    ROLE_CASHIER,
    ROLE_RECEPTION,
}


# =========================================================
# CAPABILITIES (THE REAL PERMISSION LANGUAGE)
# =========================================================
# Views should protect capabilities, not raw roles.
CAP_POS_SELL = "pos.sell"
CAP_POS_RETURN = "pos.return"

CAP_SALES_VIEW = "sales.view"
CAP_SALES_EDIT_REQUEST = "sales.edit_request"   # maker
CAP_SALES_EDIT_APPROVE = "sales.edit_approve"   # checker

CAP_INVENTORY_VIEW = "inventory.view"
CAP_INVENTORY_RECEIVE = "inventory.receive"
CAP_INVENTORY_ADJUST = "inventory.adjust"     # sensitive manual adjustments

CAP_SETTINGS_TAX_EDIT = "settings.tax_edit"

CAP_AUDIT_VIEW = "audit.view"

ALL_CAPABILITIES = {
    CAP_POS_SELL,
    CAP_POS_RETURN,
    CAP_SALES_VIEW,
    CAP_SALES_EDIT_REQUEST,
    CAP_SALES_EDIT_APPROVE,
    CAP_INVENTORY_VIEW,
    CAP_INVENTORY_RECEIVE,
    CAP_INVENTORY_ADJUST,
    CAP_SETTINGS_TAX_EDIT,
    CAP_AUDIT_VIEW,
}


# =========================================================
# ROLE → CAPABILITY MAP (DEFAULT)
# =========================================================
ROLE_CAPABILITIES: dict[str, set[str]] = {
    ROLE_ADMIN: {
        # admin can do everything
        *ALL_CAPABILITIES,
    },
    ROLE_MANAGER: {
        CAP_POS_SELL,
        CAP_POS_RETURN,
        CAP_SALES_VIEW,
        CAP_SALES_EDIT_REQUEST,
        CAP_INVENTORY_VIEW,
        CAP_INVENTORY_RECEIVE,
        CAP_AUDIT_VIEW,
        # approving edits stays with admin (maker-checker)
    },
    ROLE_CASHIER: {
        CAP_POS_SELL,
        CAP_SALES_VIEW,
        CAP_SALES_EDIT_REQUEST,
    },
    ROLE_PHARMACIST: {
        CAP_POS_SELL,
        CAP_POS_RETURN,
        CAP_SALES_VIEW,
        CAP_SALES_EDIT_REQUEST,
        CAP_INVENTORY_VIEW,
        CAP_INVENTORY_RECEIVE,
    },
    ROLE_RECEPTION: set(),
}


# =========================================================
# Helpers
# =========================================================
def get_user_role(user) -> Optional[str]:
    return getattr(user, "role", None)


def capabilities_for(user) -> set[str]:
    if not user or not getattr(user, "is_authenticated", False):
        return set()
    return set(ROLE_CAPABILITIES.get(get_user_role(user), set()))


def user_has_capability(user, capability: str) -> bool:
    return capability in capabilities_for(user)


# =========================================================
# DRF permission classes
# =========================================================
class HasCapability(BasePermission):
    """
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_POS_RETURN

    A view that forgets required_capability is closed, not open.
    """

    def has_permission(self, request, view):
        required = getattr(view, "required_capability", None)
        return bool(required) and user_has_capability(request.user, required)


class HasAnyCapability(BasePermission):
    """required_any_capabilities = {CAP_SALES_VIEW, CAP_AUDIT_VIEW}"""

    def has_permission(self, request, view):
        required = set(getattr(view, "required_any_capabilities", None) or ())
        return bool(required & capabilities_for(request.user))


class IsStaff(BasePermission):
    """Any authenticated user holding one of STAFF_ROLES (reception included)."""

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return get_user_role(user) in STAFF_ROLES
