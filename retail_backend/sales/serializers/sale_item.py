# sales/serializers/sale_item.py

from rest_framework import serializers

from sales.models import SaleItem, SaleIvaBreakdown, SalePayment


class SaleItemSerializer(serializers.ModelSerializer):
    """
    Sale line item serializer (read-only).
    Designed for receipts + UI display.
    """

    product_name = serializers.CharField(source="product.name", read_only=True)
    sku = serializers.CharField(source="product.sku", read_only=True)

    class Meta:
        model = SaleItem
        fields = [
            "id",
            "product",
            "product_name",
            "sku",
            "quantity",
            "unit_price",
            "discount_type",
            "discount_value",
            "discount_amount",
            "iva_rate",
            "net_amount",
            "iva_amount",
            "line_total",
        ]
        read_only_fields = fields


class SaleIvaBreakdownSerializer(serializers.ModelSerializer):
    class Meta:
        model = SaleIvaBreakdown
        fields = ["iva_rate", "base_amount", "iva_amount"]
        read_only_fields = fields


class SalePaymentSerializer(serializers.ModelSerializer):
    payment_method_code = serializers.CharField(source="payment_method.code", read_only=True)
    payment_method_name = serializers.CharField(source="payment_method.name", read_only=True)

    class Meta:
        model = SalePayment
        fields = [
            "id",
            "payment_method",
            "payment_method_code",
            "payment_method_name",
            "amount",
            "created_at",
        ]
        read_only_fields = fields
