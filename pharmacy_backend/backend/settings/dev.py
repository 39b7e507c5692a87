# backend/settings/dev.py
"""
PATH: backend/settings/dev.py

LOCAL DEVELOPMENT

SQLite by default (DATABASE_URL overrides), browsable API on, and the
POS service loggers turned up to DEBUG.
"""

from __future__ import annotations

from .base import *  # noqa: F403
from .base import LOGGING, REST_FRAMEWORK, TESTING, env

DEBUG = True

ALLOWED_HOSTS = env.list("ALLOWED_HOSTS", default=["localhost", "127.0.0.1"])
CORS_ALLOWED_ORIGINS = env.list("CORS_ALLOWED_ORIGINS", default=["http://localhost:5173"])
CSRF_TRUSTED_ORIGINS = env.list("CSRF_TRUSTED_ORIGINS", default=["http://localhost:5173"])

# Session auth lets the browsable API log in through /admin/.
REST_FRAMEWORK["DEFAULT_AUTHENTICATION_CLASSES"] = (
    "rest_framework_simplejwt.authentication.JWTAuthentication",
    "rest_framework.authentication.SessionAuthentication",
)
REST_FRAMEWORK["DEFAULT_RENDERER_CLASSES"] = (
    "rest_framework.renderers.JSONRenderer",
    "rest_framework.renderers.BrowsableAPIRenderer",
)

# Test runs stay quiet; see base.LOGGING.
if not TESTING:
    LOGGING["loggers"].update(
        {
            "sales": {"handlers": ["console"], "level": "DEBUG", "propagate": False},
            "products": {"handlers": ["console"], "level": "DEBUG", "propagate": False},
            "tenants": {"handlers": ["console"], "level": "DEBUG", "propagate": False},
        }
    )
