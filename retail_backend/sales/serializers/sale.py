# sales/serializers/sale.py

from rest_framework import serializers

from sales.models import Sale

from .sale_item import SaleItemSerializer, SaleIvaBreakdownSerializer, SalePaymentSerializer


class SaleSerializer(serializers.ModelSerializer):
    """
    Full sale / budget document (read-only).
    Returned on create, retrieve, annul and conversion.
    """

    receipt_type_code = serializers.CharField(source="receipt_type.code", read_only=True)
    is_budget = serializers.BooleanField(read_only=True)
    branch_name = serializers.CharField(source="branch.name", read_only=True)
    customer_name = serializers.SerializerMethodField()

    items = SaleItemSerializer(many=True, read_only=True)
    iva_breakdown = SaleIvaBreakdownSerializer(many=True, read_only=True)
    payments = SalePaymentSerializer(many=True, read_only=True)

    class Meta:
        model = Sale
        fields = [
            "id",
            "receipt_number",
            "receipt_type",
            "receipt_type_code",
            "is_budget",
            "branch",
            "branch_name",
            "customer",
            "customer_name",
            "operator",
            "sale_date",
            "status",
            "subtotal_gross",
            "items_discount",
            "subtotal_net",
            "total_iva",
            "discount_type",
            "discount_value",
            "discount",
            "iibb",
            "internal_tax",
            "total",
            "store_credit_applied",
            "paid_amount",
            "payment_status",
            "cash_register",
            "authorization_status",
            "authorization_code",
            "authorization_expires_at",
            "authorization_error",
            "converted_from_budget",
            "converted_to_sale",
            "converted_at",
            "annulled_at",
            "annulled_by",
            "annulment_reason",
            "notes",
            "created_at",
            "items",
            "iva_breakdown",
            "payments",
        ]
        read_only_fields = fields

    def get_customer_name(self, obj):
        customer = getattr(obj, "customer", None)
        return getattr(customer, "name", None)


class SaleListSerializer(serializers.ModelSerializer):
    receipt_type_code = serializers.CharField(source="receipt_type.code", read_only=True)

    class Meta:
        model = Sale
        fields = [
            "id",
            "receipt_number",
            "receipt_type_code",
            "branch",
            "customer",
            "sale_date",
            "status",
            "total",
            "paid_amount",
            "payment_status",
            "authorization_status",
        ]
        read_only_fields = fields
