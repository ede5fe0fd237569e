# products/urls.py

"""
PRODUCTS URLS

Purpose:
- Register stock ledger routes under /api/products/
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from products.views import StockMovementViewSet, StockViewSet

router = DefaultRouter()

router.register(r"stock", StockViewSet, basename="stock")
router.register(r"stock-movements", StockMovementViewSet, basename="stock-movements")

urlpatterns = [
    path("", include(router.urls)),
]
