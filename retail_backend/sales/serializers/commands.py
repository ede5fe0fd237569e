# sales/serializers/commands.py

"""
Explicit input serializers: they document ONLY what the client is allowed
to send. Amounts are validated here for shape; money rules live in the
services.
"""

from rest_framework import serializers

from sales.services.sale_builder import AMOUNT, PERCENT

DISCOUNT_CHOICES = [PERCENT, AMOUNT]


class SaleLineInputSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.DecimalField(max_digits=12, decimal_places=3)
    unit_price = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        required=False,
        allow_null=True,
        default=None,
        help_text="Overrides the catalog sale price when given.",
    )
    discount_type = serializers.ChoiceField(
        choices=DISCOUNT_CHOICES, required=False, allow_blank=True, default=""
    )
    discount_value = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, default=0
    )


class PaymentInputSerializer(serializers.Serializer):
    payment_method_id = serializers.UUIDField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)


class CreateSaleInputSerializer(serializers.Serializer):
    branch_id = serializers.UUIDField()
    receipt_type_id = serializers.UUIDField()
    customer_id = serializers.UUIDField(required=False, allow_null=True, default=None)
    cash_register_id = serializers.UUIDField(required=False, allow_null=True, default=None)

    items = SaleLineInputSerializer(many=True, allow_empty=False)
    payments = PaymentInputSerializer(many=True, required=False, default=list)

    discount_type = serializers.ChoiceField(
        choices=DISCOUNT_CHOICES, required=False, allow_blank=True, default=""
    )
    discount_value = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, default=0
    )
    iibb = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, default=0)
    internal_tax = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, default=0
    )
    store_credit = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, default=0
    )
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class AnnulSaleInputSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="")


class ConvertBudgetInputSerializer(serializers.Serializer):
    receipt_type_id = serializers.UUIDField()
    payment_method_id = serializers.UUIDField()
    cash_register_id = serializers.UUIDField(required=False, allow_null=True, default=None)


class CancelBudgetInputSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="")
