# sales/api/viewsets/budget.py

"""
======================================================
PATH: sales/api/viewsets/budget.py
======================================================
BUDGET VIEWSET (STAFF)

- GET  /api/sales/budgets/
- GET  /api/sales/budgets/<id>/
- POST /api/sales/budgets/<id>/convert/   draft budget -> active sale
- POST /api/sales/budgets/<id>/cancel/    draft budget -> cancelled
======================================================
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from cash.models import CashRegister, PaymentMethod
from core.api import ledger_error_response
from core.exceptions import LedgerError
from sales.api.viewsets.sale import UUID_REGEX, _not_found, run_authorization, sale_queryset
from sales.models import ReceiptType
from sales.serializers import (
    CancelBudgetInputSerializer,
    ConvertBudgetInputSerializer,
    SaleListSerializer,
    SaleSerializer,
)
from sales.services.budget_conversion import cancel_budget, convert_budget


class BudgetViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    permission_classes = [IsAuthenticated]
    lookup_value_regex = UUID_REGEX
    filterset_fields = ["branch", "status", "customer"]

    def get_queryset(self):
        return sale_queryset().filter(receipt_type__is_budget=True)

    def get_serializer_class(self):
        if self.action == "list":
            return SaleListSerializer
        return SaleSerializer

    @extend_schema(
        request=ConvertBudgetInputSerializer,
        responses={201: SaleSerializer},
        description="Convert a draft budget into an active sale paid with one method.",
    )
    @action(detail=True, methods=["post"], url_path="convert")
    def convert(self, request, pk=None):
        budget = self.get_object()

        serializer = ConvertBudgetInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        receipt_type = ReceiptType.objects.filter(
            id=data["receipt_type_id"], is_active=True
        ).first()
        payment_method = PaymentMethod.objects.filter(
            id=data["payment_method_id"], is_active=True
        ).first()
        if receipt_type is None or payment_method is None:
            return _not_found("Invalid receipt_type_id or payment_method_id.")

        register = None
        if data.get("cash_register_id"):
            register = CashRegister.objects.filter(id=data["cash_register_id"]).first()
            if register is None:
                return _not_found("Invalid cash_register_id.")

        try:
            sale = convert_budget(
                budget=budget,
                receipt_type=receipt_type,
                payment_method=payment_method,
                user=request.user,
                cash_register=register,
            )
        except LedgerError as exc:
            return ledger_error_response(exc)

        authorization = run_authorization(sale)
        body = dict(SaleSerializer(sale_queryset().get(pk=sale.pk)).data)
        body["authorization"] = authorization
        return Response(body, status=status.HTTP_201_CREATED)

    @extend_schema(
        request=CancelBudgetInputSerializer,
        responses={200: SaleSerializer},
    )
    @action(detail=True, methods=["post"], url_path="cancel")
    def cancel(self, request, pk=None):
        budget = self.get_object()

        serializer = CancelBudgetInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            budget = cancel_budget(
                budget=budget,
                user=request.user,
                reason=serializer.validated_data.get("reason", ""),
            )
        except LedgerError as exc:
            return ledger_error_response(exc)

        return Response(SaleSerializer(sale_queryset().get(pk=budget.pk)).data)
