# cash/admin.py

from django.contrib import admin

from cash.models import CashMovement, CashRegister, MovementType, PaymentMethod


@admin.register(PaymentMethod)
class PaymentMethodAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "code",
        "affects_cash",
        "is_cash",
        "is_current_account",
        "is_store_credit",
        "is_active",
    )
    list_filter = ("is_active",)


@admin.register(MovementType)
class MovementTypeAdmin(admin.ModelAdmin):
    list_display = ("name", "code", "operation_type", "is_system", "is_active")
    list_filter = ("operation_type", "is_system")


@admin.register(CashRegister)
class CashRegisterAdmin(admin.ModelAdmin):
    list_display = (
        "branch",
        "status",
        "opened_at",
        "closed_at",
        "initial_amount",
        "expected_cash_balance",
        "final_amount",
        "cash_difference",
    )
    list_filter = ("status", "branch")
    readonly_fields = (
        "expected_cash_balance",
        "payment_method_totals",
        "cash_difference",
    )


@admin.register(CashMovement)
class CashMovementAdmin(admin.ModelAdmin):
    list_display = (
        "cash_register",
        "movement_type",
        "payment_method",
        "amount",
        "reference_kind",
        "reference_id",
        "created_at",
    )
    list_filter = ("movement_type", "payment_method")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
