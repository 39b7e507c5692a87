# backend/settings/__init__.py
"""
PATH: backend/settings/__init__.py

Pick a module with DJANGO_SETTINGS_MODULE:
- backend.settings.dev   (default for manage.py, wsgi, asgi)
- backend.settings.prod

Nothing is imported here.
"""
