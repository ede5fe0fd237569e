# current_accounts/views.py

"""
CURRENT ACCOUNT ENDPOINTS

- GET  /api/current-accounts/
- GET  /api/current-accounts/<id>/
- GET  /api/current-accounts/<id>/movements/
- POST /api/current-accounts/<id>/payments/
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from branches.models import Branch
from cash.models import CashRegister, PaymentMethod
from core.api import error_response, ledger_error_response
from core.exceptions import LedgerError
from current_accounts.models import CurrentAccount
from current_accounts.serializers import (
    AccountPaymentInputSerializer,
    CurrentAccountMovementSerializer,
    CurrentAccountSerializer,
)
from current_accounts.services.ledger import process_payment


class CurrentAccountViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    queryset = CurrentAccount.objects.select_related("customer", "supplier")
    serializer_class = CurrentAccountSerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ["customer", "supplier", "status"]

    @extend_schema(responses={200: CurrentAccountMovementSerializer(many=True)})
    @action(detail=True, methods=["get"], url_path="movements")
    def movements(self, request, pk=None):
        account = self.get_object()
        rows = account.movements.select_related("movement_type")
        return Response(CurrentAccountMovementSerializer(rows, many=True).data)

    @extend_schema(
        request=AccountPaymentInputSerializer,
        responses={201: CurrentAccountMovementSerializer},
        description="Register a payment; cash-affecting methods also post to the open register.",
    )
    @action(detail=True, methods=["post"], url_path="payments")
    def payments(self, request, pk=None):
        account = self.get_object()

        serializer = AccountPaymentInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        payment_method = PaymentMethod.objects.filter(
            id=data["payment_method_id"], is_active=True
        ).first()
        if payment_method is None:
            return error_response(
                kind="not_found",
                message="Invalid payment_method_id.",
                http_status=status.HTTP_404_NOT_FOUND,
            )

        branch = None
        if data.get("branch_id"):
            branch = Branch.objects.filter(id=data["branch_id"]).first()
            if branch is None:
                return error_response(
                    kind="not_found",
                    message="Invalid branch_id.",
                    http_status=status.HTTP_404_NOT_FOUND,
                )
        register = None
        if data.get("cash_register_id"):
            register = CashRegister.objects.filter(id=data["cash_register_id"]).first()
            if register is None:
                return error_response(
                    kind="not_found",
                    message="Invalid cash_register_id.",
                    http_status=status.HTTP_404_NOT_FOUND,
                )

        try:
            movement = process_payment(
                account=account,
                amount=data["amount"],
                payment_method=payment_method,
                branch=branch,
                register=register,
                description=data.get("description", ""),
                user=request.user,
            )
        except LedgerError as exc:
            return ledger_error_response(exc)

        return Response(
            CurrentAccountMovementSerializer(movement).data,
            status=status.HTTP_201_CREATED,
        )
