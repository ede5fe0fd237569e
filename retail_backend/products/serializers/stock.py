# products/serializers/stock.py
"""
======================================================
PATH: products/serializers/stock.py
======================================================
STOCK SERIALIZERS

- Stock levels and movements are read-only over the API.
- The only write is a physical count, routed through set_stock_level().
"""

from __future__ import annotations

from rest_framework import serializers

from core.exceptions import NotFoundError
from core.references import reference_of
from products.models import Stock, StockMovement


class StockSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)
    sku = serializers.CharField(source="product.sku", read_only=True)
    branch_name = serializers.CharField(source="branch.name", read_only=True)
    is_below_minimum = serializers.BooleanField(read_only=True)

    class Meta:
        model = Stock
        fields = [
            "id",
            "product",
            "product_name",
            "sku",
            "branch",
            "branch_name",
            "current_stock",
            "min_stock",
            "max_stock",
            "is_below_minimum",
            "updated_at",
        ]
        read_only_fields = fields


class StockMovementSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)
    source_document = serializers.SerializerMethodField()

    class Meta:
        model = StockMovement
        fields = [
            "id",
            "product",
            "product_name",
            "branch",
            "movement_type",
            "quantity",
            "balance_after",
            "cost_price_snapshot",
            "sale_price_snapshot",
            "reference_kind",
            "reference_id",
            "source_document",
            "notes",
            "performed_by",
            "created_at",
        ]
        read_only_fields = fields

    def get_source_document(self, obj):
        """{kind, id, label} of the row that caused the movement, if any."""
        reference = reference_of(obj)
        if reference is None:
            return None
        try:
            target = reference.resolve()
        except NotFoundError:
            target = None
        return {
            "kind": reference.kind,
            "id": reference.id,
            "label": str(target) if target is not None else None,
        }


class StockCountInputSerializer(serializers.Serializer):
    counted_quantity = serializers.DecimalField(
        max_digits=12,
        decimal_places=3,
        min_value=0,
        help_text="Physically counted quantity; stock is set to this value.",
    )
    notes = serializers.CharField(required=False, allow_blank=True, default="")
