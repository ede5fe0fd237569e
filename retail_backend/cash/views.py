# cash/views.py

"""
CASH REGISTER ENDPOINTS

- POST /api/cash/registers/open/
- GET  /api/cash/registers/current/?branch=<uuid>
- GET  /api/cash/registers/<id>/
- POST /api/cash/registers/<id>/close/
- GET  /api/cash/registers/<id>/movements/
- POST /api/cash/registers/<id>/movements/
"""

from __future__ import annotations

from django.core.exceptions import ValidationError as DjangoValidationError
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from branches.models import Branch
from cash.models import CashRegister, PaymentMethod
from cash.serializers import (
    CashMovementInputSerializer,
    CashMovementSerializer,
    CashRegisterSerializer,
    CloseRegisterInputSerializer,
    OpenRegisterInputSerializer,
)
from cash.services.cash_ledger import get_open_register
from cash.services.registers import close_register, open_register, post_manual_movement
from core.api import error_response, ledger_error_response
from core.exceptions import LedgerError


class CashRegisterViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    queryset = CashRegister.objects.select_related("branch", "operator")
    serializer_class = CashRegisterSerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ["branch", "status"]

    @extend_schema(
        request=OpenRegisterInputSerializer,
        responses={201: CashRegisterSerializer},
        description="Open a cash register for a branch (one open register per branch).",
    )
    @action(detail=False, methods=["post"], url_path="open")
    def open(self, request):
        serializer = OpenRegisterInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            branch = Branch.objects.get(id=data["branch_id"], is_active=True)
        except Branch.DoesNotExist:
            return error_response(
                kind="not_found",
                message="Invalid branch_id or branch is inactive.",
                http_status=status.HTTP_404_NOT_FOUND,
            )

        try:
            register = open_register(
                branch=branch,
                user=request.user,
                initial_amount=data["initial_amount"],
                notes=data.get("notes", ""),
            )
        except LedgerError as exc:
            return ledger_error_response(exc)

        return Response(CashRegisterSerializer(register).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        parameters=[OpenApiParameter("branch", str, required=True)],
        responses={200: CashRegisterSerializer},
    )
    @action(detail=False, methods=["get"], url_path="current")
    def current(self, request):
        branch_id = (request.query_params.get("branch") or "").strip()
        try:
            branch = Branch.objects.filter(id=branch_id).first() if branch_id else None
        except DjangoValidationError:
            branch = None
        register = get_open_register(branch) if branch else None
        if register is None:
            return error_response(
                kind="register_closed",
                message="No open cash register for this branch.",
                http_status=status.HTTP_404_NOT_FOUND,
            )
        return Response(CashRegisterSerializer(register).data)

    @extend_schema(
        request=CloseRegisterInputSerializer,
        responses={200: CashRegisterSerializer},
        description="Close the register; stores final_amount and cash_difference.",
    )
    @action(detail=True, methods=["post"], url_path="close")
    def close(self, request, pk=None):
        register = self.get_object()

        serializer = CloseRegisterInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            register = close_register(
                register=register,
                final_amount=serializer.validated_data["final_amount"],
                user=request.user,
                notes=serializer.validated_data.get("notes", ""),
            )
        except LedgerError as exc:
            return ledger_error_response(exc)

        return Response(CashRegisterSerializer(register).data)

    @extend_schema(
        request=CashMovementInputSerializer,
        responses={200: CashMovementSerializer(many=True), 201: CashMovementSerializer},
    )
    @action(detail=True, methods=["get", "post"], url_path="movements")
    def movements(self, request, pk=None):
        register = self.get_object()

        if request.method == "GET":
            rows = register.movements.select_related("movement_type", "payment_method")
            return Response(CashMovementSerializer(rows, many=True).data)

        serializer = CashMovementInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        payment_method = None
        if data.get("payment_method_id"):
            payment_method = PaymentMethod.objects.filter(
                id=data["payment_method_id"], is_active=True
            ).first()
            if payment_method is None:
                return error_response(
                    kind="not_found",
                    message="Invalid payment_method_id.",
                    http_status=status.HTTP_404_NOT_FOUND,
                )

        try:
            movement = post_manual_movement(
                register=register,
                movement_type_code=data["movement_type"],
                amount=data["amount"],
                payment_method=payment_method,
                description=data.get("description", ""),
                user=request.user,
            )
        except LedgerError as exc:
            return ledger_error_response(exc)

        return Response(CashMovementSerializer(movement).data, status=status.HTTP_201_CREATED)
