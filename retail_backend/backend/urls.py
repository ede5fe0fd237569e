# backend/urls.py
"""
PROJECT URLS

Everything lives under /api/:
- /api/health/          DB probe + e-invoicing backlog (AllowAny)
- /api/auth/jwt/...     SimpleJWT token pair / refresh
- /api/schema/, /api/docs/
- ledger modules: products, cash, current-accounts, sales

The Django admin path comes from settings.ADMIN_PATH (default "admin/").
"""

from __future__ import annotations

from django.conf import settings
from django.contrib import admin
from django.db import connections
from django.db.utils import DatabaseError
from django.urls import include, path
from django.views.generic import RedirectView
from drf_spectacular.utils import extend_schema, inline_serializer
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView
from rest_framework import serializers
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

MODULES = {
    "stock": "/api/products/stock/",
    "cash": "/api/cash/",
    "current_accounts": "/api/current-accounts/",
    "sales": "/api/sales/",
    "budgets": "/api/sales/budgets/",
}


# ------------------ API ROOT (PUBLIC) ------------------
@extend_schema(
    responses=inline_serializer(
        name="ApiRoot",
        fields={
            "message": serializers.CharField(),
            "docs": serializers.DictField(),
            "modules": serializers.DictField(),
        },
    )
)
@api_view(["GET"])
@permission_classes([AllowAny])
def api_root(request):
    return Response(
        {
            "message": "Retail Ledger API is running",
            "docs": {"swagger": "/api/docs/", "schema": "/api/schema/"},
            "modules": MODULES,
        }
    )


# ------------------ HEALTH CHECK (PUBLIC) ------------------
@extend_schema(
    responses={
        200: inline_serializer(
            name="Health",
            fields={
                "status": serializers.CharField(),
                "db": serializers.CharField(),
                "pending_authorizations": serializers.IntegerField(),
            },
        ),
        503: inline_serializer(
            name="HealthDegraded",
            fields={
                "status": serializers.CharField(),
                "db": serializers.CharField(),
                "error": serializers.CharField(),
            },
        ),
    },
)
@api_view(["GET"])
@permission_classes([AllowAny])
def health_check(request):
    """
    - DB connection answers SELECT 1
    - pending_authorizations: active sales still waiting on (or failed at)
      the e-invoicing hand-off
    """
    from sales.models import Sale

    try:
        with connections["default"].cursor() as cursor:
            cursor.execute("SELECT 1;")
            cursor.fetchone()
        backlog = Sale.objects.filter(
            status=Sale.STATUS_ACTIVE,
            authorization_status__in=[Sale.AUTH_PENDING, Sale.AUTH_FAILED],
        ).count()
    except DatabaseError as e:
        return Response({"status": "degraded", "db": "down", "error": str(e)}, status=503)

    return Response({"status": "ok", "db": "ok", "pending_authorizations": backlog})


ADMIN_PATH = getattr(settings, "ADMIN_PATH", "admin/")
if not ADMIN_PATH.endswith("/"):
    ADMIN_PATH = f"{ADMIN_PATH}/"


# ------------------ API ROUTES (ALL UNDER /api/) ------------------
api_urlpatterns = [
    path("", api_root, name="api-root"),
    path("health/", health_check, name="health-check"),
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    path("docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger-ui"),
    path("auth/jwt/create/", TokenObtainPairView.as_view(), name="jwt-create"),
    path("auth/jwt/refresh/", TokenRefreshView.as_view(), name="jwt-refresh"),
    path("products/", include("products.urls")),
    path("cash/", include("cash.urls")),
    path("current-accounts/", include("current_accounts.urls")),
    path("sales/", include("sales.api.urls")),
]

urlpatterns = [
    path(ADMIN_PATH, admin.site.urls),
    path("", RedirectView.as_view(url="/api/docs/", permanent=False), name="root"),
    path("api/", include(api_urlpatterns)),
]
