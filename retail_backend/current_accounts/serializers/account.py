# current_accounts/serializers/account.py

from rest_framework import serializers

from current_accounts.models import CurrentAccount, CurrentAccountMovement
from current_accounts.services.ledger import (
    available_credit,
    available_store_credit,
    get_balance,
)


class CurrentAccountMovementSerializer(serializers.ModelSerializer):
    movement_type_code = serializers.CharField(source="movement_type.code", read_only=True)

    class Meta:
        model = CurrentAccountMovement
        fields = [
            "id",
            "movement_type",
            "movement_type_code",
            "payment_method",
            "amount",
            "balance_after",
            "description",
            "reference",
            "reference_kind",
            "reference_id",
            "metadata",
            "performed_by",
            "created_at",
        ]
        read_only_fields = fields


class CurrentAccountSerializer(serializers.ModelSerializer):
    """
    Account header with derived balances (never stored).
    """

    subject_name = serializers.SerializerMethodField()
    balance = serializers.SerializerMethodField()
    store_credit = serializers.SerializerMethodField()
    available_credit = serializers.SerializerMethodField()

    class Meta:
        model = CurrentAccount
        fields = [
            "id",
            "customer",
            "supplier",
            "subject_name",
            "status",
            "credit_limit",
            "balance",
            "store_credit",
            "available_credit",
            "opened_at",
        ]
        read_only_fields = fields

    def get_subject_name(self, obj):
        return str(obj.subject)

    def get_balance(self, obj):
        return str(get_balance(obj))

    def get_store_credit(self, obj):
        return str(available_store_credit(obj))

    def get_available_credit(self, obj):
        room = available_credit(obj)
        return None if room is None else str(room)


class AccountPaymentInputSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    payment_method_id = serializers.UUIDField()
    branch_id = serializers.UUIDField(required=False, allow_null=True)
    cash_register_id = serializers.UUIDField(required=False, allow_null=True)
    description = serializers.CharField(required=False, allow_blank=True, default="")
