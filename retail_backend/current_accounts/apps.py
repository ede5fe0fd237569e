# current_accounts/apps.py

from django.apps import AppConfig


class CurrentAccountsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "current_accounts"
    verbose_name = "Current Accounts"
