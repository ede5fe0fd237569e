# cash/serializers/register.py

from rest_framework import serializers

from cash.models import CashMovement, CashRegister


class CashMovementSerializer(serializers.ModelSerializer):
    """
    Drawer ledger row (read-only).
    signed_amount carries the direction of the movement type.
    """

    movement_type_code = serializers.CharField(source="movement_type.code", read_only=True)
    operation_type = serializers.CharField(source="movement_type.operation_type", read_only=True)
    payment_method_name = serializers.SerializerMethodField()
    signed_amount = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = CashMovement
        fields = [
            "id",
            "cash_register",
            "movement_type",
            "movement_type_code",
            "operation_type",
            "payment_method",
            "payment_method_name",
            "amount",
            "signed_amount",
            "description",
            "reference_kind",
            "reference_id",
            "affects_balance",
            "metadata",
            "operator",
            "created_at",
        ]
        read_only_fields = fields

    def get_payment_method_name(self, obj):
        pm = getattr(obj, "payment_method", None)
        return getattr(pm, "name", None)


class CashRegisterSerializer(serializers.ModelSerializer):
    branch_name = serializers.CharField(source="branch.name", read_only=True)

    class Meta:
        model = CashRegister
        fields = [
            "id",
            "branch",
            "branch_name",
            "operator",
            "status",
            "opened_at",
            "closed_at",
            "initial_amount",
            "final_amount",
            "expected_cash_balance",
            "payment_method_totals",
            "cash_difference",
            "opening_notes",
            "closing_notes",
        ]
        read_only_fields = fields


class OpenRegisterInputSerializer(serializers.Serializer):
    branch_id = serializers.UUIDField()
    initial_amount = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=0, default=0
    )
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class CloseRegisterInputSerializer(serializers.Serializer):
    final_amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class CashMovementInputSerializer(serializers.Serializer):
    movement_type = serializers.SlugField(
        help_text="deposit / withdrawal / expense, or a custom non-system type code",
    )
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    payment_method_id = serializers.UUIDField(required=False, allow_null=True)
    description = serializers.CharField(required=False, allow_blank=True, default="")
