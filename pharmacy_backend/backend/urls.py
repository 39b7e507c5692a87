# backend/urls.py
"""
PROJECT URLS

Everything the POS client calls is under /api/:

    auth/        JWT create/refresh, me/
    tenants/     tax-settings/, branches/
    products/    products/, inventory/, audit-logs/
    sales/       sales/, returns/, edit-requests/

/api/health/ is public and checks DB connectivity.
The Django admin mount point comes from ADMIN_PATH.
"""

from __future__ import annotations

from django.conf import settings
from django.contrib import admin
from django.db import connections
from django.db.utils import OperationalError
from django.urls import include, path
from django.views.generic import RedirectView
from drf_spectacular.utils import extend_schema
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

API_INDEX = {
    "auth": {
        "jwt_create": "/api/auth/jwt/create/",
        "jwt_refresh": "/api/auth/jwt/refresh/",
        "me": "/api/auth/me/",
    },
    "pos": {
        "sales": "/api/sales/sales/",
        "returns": "/api/sales/returns/",
        "edit_requests": "/api/sales/edit-requests/",
    },
    "inventory": {
        "products": "/api/products/products/",
        "lots": "/api/products/inventory/",
        "audit_logs": "/api/products/audit-logs/",
    },
    "tenant": {
        "tax_settings": "/api/tenants/tax-settings/",
        "branches": "/api/tenants/branches/",
    },
    "docs": {
        "swagger": "/api/docs/",
        "schema": "/api/schema/",
    },
}


# ------------------ API INDEX (PUBLIC) ------------------
@extend_schema(responses={200: {"type": "object"}})
@api_view(["GET"])
@permission_classes([AllowAny])
def api_index(request):
    return Response({"message": "Pharmacy POS API is running", **API_INDEX})


# ------------------ HEALTH CHECK (PUBLIC) ------------------
@extend_schema(
    responses={
        200: {
            "type": "object",
            "properties": {
                "status": {"type": "string"},
                "db": {"type": "string"},
            },
        },
        503: {
            "type": "object",
            "properties": {
                "status": {"type": "string"},
                "db": {"type": "string"},
                "error": {"type": "string"},
            },
        },
    },
)
@api_view(["GET"])
@permission_classes([AllowAny])
def health_check(request):
    try:
        with connections["default"].cursor() as cursor:
            cursor.execute("SELECT 1;")
            cursor.fetchone()
    except OperationalError as e:
        return Response({"status": "degraded", "db": "down", "error": str(e)}, status=503)
    return Response({"status": "ok", "db": "ok"})


# ------------------ ADMIN PATH ------------------
# Keep the trailing slash.
ADMIN_PATH = getattr(settings, "ADMIN_PATH", "admin/")
if not ADMIN_PATH.endswith("/"):
    ADMIN_PATH = f"{ADMIN_PATH}/"


# ------------------ API ROUTES (ALL UNDER /api/) ------------------
api_urlpatterns = [
    path("", api_index, name="api-index"),
    path("health/", health_check, name="health-check"),
    # OpenAPI / Swagger
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    path("docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger-ui"),
    # JWT (SimpleJWT)
    path("auth/jwt/create/", TokenObtainPairView.as_view(), name="jwt-create"),
    path("auth/jwt/refresh/", TokenRefreshView.as_view(), name="jwt-refresh"),
    path("auth/", include("users.urls")),
    # App modules
    path("tenants/", include("tenants.urls")),
    path("products/", include("products.urls")),
    path("sales/", include("sales.api.urls")),
]

urlpatterns = [
    path(ADMIN_PATH, admin.site.urls),
    path("", RedirectView.as_view(url="/api/docs/", permanent=False), name="root"),
    path("api/", include(api_urlpatterns)),
]
