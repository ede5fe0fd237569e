# current_accounts/admin.py

from django.contrib import admin

from current_accounts.models import (
    CurrentAccount,
    CurrentAccountMovement,
    Customer,
    Supplier,
)


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ("name", "tax_id", "email", "is_active")
    search_fields = ("name", "tax_id", "email")


@admin.register(Supplier)
class SupplierAdmin(admin.ModelAdmin):
    list_display = ("name", "tax_id", "email", "is_active")
    search_fields = ("name", "tax_id", "email")


@admin.register(CurrentAccount)
class CurrentAccountAdmin(admin.ModelAdmin):
    list_display = ("__str__", "status", "credit_limit", "opened_at")
    list_filter = ("status",)


@admin.register(CurrentAccountMovement)
class CurrentAccountMovementAdmin(admin.ModelAdmin):
    list_display = (
        "current_account",
        "movement_type",
        "amount",
        "balance_after",
        "reference",
        "created_at",
    )

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
