# backend/settings/dev.py
"""
PATH: backend/settings/dev.py

LOCAL DEVELOPMENT SETTINGS
Used by runserver and by the test suite (pytest / manage.py test).
"""

from __future__ import annotations

from .base import *  # noqa: F403
from .base import LOGGING, env

DEBUG = True

ALLOWED_HOSTS = env.list("ALLOWED_HOSTS", default=["localhost", "127.0.0.1", "testserver"])

CORS_ALLOWED_ORIGINS = env.list("CORS_ALLOWED_ORIGINS", default=["http://localhost:5173"])
CSRF_TRUSTED_ORIGINS = env.list("CSRF_TRUSTED_ORIGINS", default=["http://localhost:5173"])

# Local stand-in for the tax authority unless one is configured.
INVOICE_AUTHORIZER = (
    env("INVOICE_AUTHORIZER", default="")
    or "sales.services.authorization.OfflineAuthorizer"
).strip()

# Ledger postings are chatty at INFO; keep test output readable.
if TESTING:  # noqa: F405
    for _name in ("branches", "products", "cash", "current_accounts", "sales"):
        LOGGING["loggers"][_name]["level"] = "WARNING"
