# sales/admin.py

from django.contrib import admin

from sales.models import ReceiptType, Sale, SaleItem, SaleIvaBreakdown, SalePayment


# ======================================================
# RECEIPT TYPE ADMIN
# ======================================================


@admin.register(ReceiptType)
class ReceiptTypeAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "is_budget", "requires_authorization", "is_active")
    list_filter = ("is_budget", "requires_authorization", "is_active")
    search_fields = ("code", "name")


# ======================================================
# SALE ADMIN (READ-MOSTLY)
# ======================================================


class SaleItemInline(admin.TabularInline):
    model = SaleItem
    extra = 0
    can_delete = False
    readonly_fields = (
        "product",
        "quantity",
        "unit_price",
        "discount_amount",
        "iva_rate",
        "net_amount",
        "iva_amount",
        "line_total",
    )
    fields = readonly_fields


class SaleIvaBreakdownInline(admin.TabularInline):
    model = SaleIvaBreakdown
    extra = 0
    can_delete = False
    readonly_fields = ("iva_rate", "base_amount", "iva_amount")


class SalePaymentInline(admin.TabularInline):
    model = SalePayment
    extra = 0
    can_delete = False
    readonly_fields = ("payment_method", "amount", "created_at")


@admin.register(Sale)
class SaleAdmin(admin.ModelAdmin):
    list_display = (
        "receipt_number",
        "receipt_type",
        "branch",
        "status",
        "total",
        "payment_status",
        "authorization_status",
        "created_at",
    )
    list_filter = ("status", "payment_status", "authorization_status", "branch")
    search_fields = ("receipt_number", "customer__name")
    readonly_fields = (
        "receipt_number",
        "numbering_scope",
        "subtotal_gross",
        "items_discount",
        "subtotal_net",
        "total_iva",
        "discount",
        "total",
        "paid_amount",
        "payment_status",
        "converted_from_budget",
        "converted_to_sale",
        "converted_at",
        "annulled_at",
        "annulled_by",
        "created_at",
    )
    inlines = [SaleItemInline, SaleIvaBreakdownInline, SalePaymentInline]

    def has_delete_permission(self, request, obj=None):
        return False
