# products/admin.py
"""
=====================================================
PATH: products/admin.py
=====================================================

Admin rules (audit-safe stock):

- Product is master data and freely editable.
- Stock levels and movements are read-only here; quantities only change
  through products.services.stock_ledger.
"""

from __future__ import annotations

from django.contrib import admin

from products.models import Product, Stock, StockMovement


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("sku", "name", "sale_price", "iva_rate", "is_active")
    search_fields = ("sku", "name")
    list_filter = ("is_active", "iva_rate")


@admin.register(Stock)
class StockAdmin(admin.ModelAdmin):
    list_display = ("product", "branch", "current_stock", "min_stock", "max_stock")
    list_filter = ("branch",)
    search_fields = ("product__name", "product__sku")
    readonly_fields = ("current_stock",)


@admin.register(StockMovement)
class StockMovementAdmin(admin.ModelAdmin):
    list_display = (
        "product",
        "branch",
        "movement_type",
        "quantity",
        "balance_after",
        "reference_kind",
        "created_at",
    )
    list_filter = ("movement_type", "branch")
    search_fields = ("product__name", "reference_id")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
