# cash/urls.py

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from cash.views import CashRegisterViewSet

router = DefaultRouter()
router.register(r"registers", CashRegisterViewSet, basename="cash-registers")

urlpatterns = [
    path("", include(router.urls)),
]
