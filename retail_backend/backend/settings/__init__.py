# backend/settings/__init__.py
"""
PATH: backend/settings/__init__.py

Settings package. Loads nothing by itself; pick a module with
DJANGO_SETTINGS_MODULE:
- backend.settings.dev   (local development and the test suite)
- backend.settings.prod  (deployed API)
"""
