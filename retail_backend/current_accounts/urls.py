# current_accounts/urls.py

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from current_accounts.views import CurrentAccountViewSet

router = DefaultRouter()
router.register(r"", CurrentAccountViewSet, basename="current-accounts")

urlpatterns = [
    path("", include(router.urls)),
]
