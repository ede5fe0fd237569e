# sales/api/viewsets/sale.py

"""
======================================================
PATH: sales/api/viewsets/sale.py
======================================================
SALE VIEWSET (STAFF)

Endpoints:
- POST /api/sales/                  create a sale or a budget
- GET  /api/sales/                  list (filters: branch, status, customer, ...)
- GET  /api/sales/<id>/             retrieve
- POST /api/sales/<id>/annul/       compensating reversal
- POST /api/sales/<id>/authorize/   retry the e-invoicing hand-off

Create rules:
- Backend authoritative for totals, stock and payment reconciliation.
- The sale commits first; authorization runs afterwards and its outcome
  is reported under "authorization" (a failure never reverts the sale).
======================================================
"""

from __future__ import annotations

import logging

from drf_spectacular.utils import extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from branches.models import Branch
from cash.models import CashRegister
from core.api import error_response, ledger_error_response
from core.exceptions import ExternalAuthorizationError, LedgerError
from current_accounts.models import Customer
from sales.models import ReceiptType, Sale
from sales.serializers import (
    AnnulSaleInputSerializer,
    CreateSaleInputSerializer,
    SaleListSerializer,
    SaleSerializer,
)
from sales.services.annulment_service import annul_sale
from sales.services.authorization import authorize_sale
from sales.services.sale_service import create_sale

logger = logging.getLogger(__name__)

UUID_REGEX = r"[0-9a-fA-F-]{36}"


def _not_found(message: str):
    return error_response(
        kind="not_found",
        message=message,
        http_status=status.HTTP_404_NOT_FOUND,
    )


def run_authorization(sale: Sale) -> dict:
    """Post-commit hand-off; returns the outcome instead of raising."""
    try:
        authorize_sale(sale=sale)
    except ExternalAuthorizationError as exc:
        return {"status": sale.authorization_status, "error": exc.message}
    return {
        "status": sale.authorization_status,
        "code": sale.authorization_code or None,
    }


def sale_queryset():
    return (
        Sale.objects.select_related("receipt_type", "branch", "customer")
        .prefetch_related("items__product", "iva_breakdown", "payments__payment_method")
        .order_by("-created_at")
    )


class SaleViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    permission_classes = [IsAuthenticated]
    lookup_value_regex = UUID_REGEX
    filterset_fields = [
        "branch",
        "status",
        "payment_status",
        "customer",
        "receipt_type",
        "authorization_status",
    ]

    def get_queryset(self):
        return sale_queryset()

    def get_serializer_class(self):
        if self.action == "list":
            return SaleListSerializer
        return SaleSerializer

    # ======================================================
    # CREATE
    # ======================================================

    @extend_schema(
        request=CreateSaleInputSerializer,
        responses={201: SaleSerializer},
        description=(
            "Create a sale (stock, cash and current account postings in one "
            "transaction) or a budget (draft, no side effects)."
        ),
    )
    def create(self, request):
        serializer = CreateSaleInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        branch = Branch.objects.filter(id=data["branch_id"], is_active=True).first()
        if branch is None:
            return _not_found("Invalid branch_id or branch is inactive.")

        receipt_type = ReceiptType.objects.filter(
            id=data["receipt_type_id"], is_active=True
        ).first()
        if receipt_type is None:
            return _not_found("Invalid receipt_type_id.")

        customer = None
        if data.get("customer_id"):
            customer = Customer.objects.filter(id=data["customer_id"]).first()
            if customer is None:
                return _not_found("Invalid customer_id.")

        register = None
        if data.get("cash_register_id"):
            register = CashRegister.objects.filter(id=data["cash_register_id"]).first()
            if register is None:
                return _not_found("Invalid cash_register_id.")

        try:
            sale = create_sale(
                branch=branch,
                receipt_type=receipt_type,
                lines=[dict(line) for line in data["items"]],
                payments=[dict(p) for p in data.get("payments", [])],
                customer=customer,
                user=request.user,
                cash_register=register,
                discount_type=data.get("discount_type", ""),
                discount_value=data.get("discount_value", 0),
                iibb=data.get("iibb", 0),
                internal_tax=data.get("internal_tax", 0),
                store_credit=data.get("store_credit", 0),
                notes=data.get("notes", ""),
            )
        except LedgerError as exc:
            return ledger_error_response(exc)

        authorization = None
        if not sale.is_budget:
            authorization = run_authorization(sale)

        body = dict(SaleSerializer(sale_queryset().get(pk=sale.pk)).data)
        body["authorization"] = authorization
        return Response(body, status=status.HTTP_201_CREATED)

    # ======================================================
    # ANNUL
    # ======================================================

    @extend_schema(
        request=AnnulSaleInputSerializer,
        responses={200: SaleSerializer},
        description="Annul an active sale by appending compensating postings.",
    )
    @action(detail=True, methods=["post"], url_path="annul")
    def annul(self, request, pk=None):
        sale = self.get_object()

        serializer = AnnulSaleInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            sale = annul_sale(
                sale=sale,
                user=request.user,
                reason=serializer.validated_data.get("reason", ""),
            )
        except LedgerError as exc:
            return ledger_error_response(exc)

        return Response(SaleSerializer(sale_queryset().get(pk=sale.pk)).data)

    # ======================================================
    # AUTHORIZE (RETRY)
    # ======================================================

    @extend_schema(
        request=None,
        responses={200: SaleSerializer},
        description="Retry the e-invoicing authorization of an active sale.",
    )
    @action(detail=True, methods=["post"], url_path="authorize")
    def authorize(self, request, pk=None):
        sale = self.get_object()

        try:
            sale = authorize_sale(sale=sale)
        except LedgerError as exc:
            return ledger_error_response(exc)

        return Response(SaleSerializer(sale).data)
