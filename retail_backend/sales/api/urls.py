# sales/api/urls.py

"""
SALES API URLS

- /api/sales/budgets/...   budget read / convert / cancel
- /api/sales/...           sale create / read / annul / authorize

The budgets prefix is registered first so the root viewset never
captures "budgets" as a primary key. SimpleRouter, since the sale list
itself sits on the empty prefix where DefaultRouter puts its root view.
"""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from sales.api.viewsets.budget import BudgetViewSet
from sales.api.viewsets.sale import SaleViewSet

router = SimpleRouter()
router.register(r"budgets", BudgetViewSet, basename="budgets")
router.register(r"", SaleViewSet, basename="sales")

urlpatterns = [
    path("", include(router.urls)),
]
