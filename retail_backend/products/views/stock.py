"""
======================================================
PATH: products/views/stock.py
======================================================
STOCK LEDGER VIEWSETS

- GET  /api/products/stock/                 (filter: branch, product)
- GET  /api/products/stock/<id>/
- POST /api/products/stock/<id>/count/      (physical count -> ADJUSTMENT)
- GET  /api/products/stock-movements/       (filter: branch, product, movement_type, reference_id)
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.api import ledger_error_response
from core.exceptions import LedgerError
from products.models import Stock, StockMovement
from products.serializers import (
    StockCountInputSerializer,
    StockMovementSerializer,
    StockSerializer,
)
from products.services.stock_ledger import set_stock_level


class StockViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    queryset = Stock.objects.select_related("product", "branch")
    serializer_class = StockSerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ["branch", "product"]

    @extend_schema(
        request=StockCountInputSerializer,
        responses={200: StockSerializer},
        description="Record a physical count; writes one ADJUSTMENT movement for the difference.",
    )
    @action(detail=True, methods=["post"], url_path="count")
    def count(self, request, pk=None):
        stock = self.get_object()

        serializer = StockCountInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            set_stock_level(
                product=stock.product,
                branch=stock.branch,
                counted_quantity=serializer.validated_data["counted_quantity"],
                user=request.user,
                notes=serializer.validated_data.get("notes", ""),
            )
        except LedgerError as exc:
            return ledger_error_response(exc)

        stock.refresh_from_db()
        return Response(StockSerializer(stock).data, status=status.HTTP_200_OK)


class StockMovementViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = StockMovement.objects.select_related("product", "branch").order_by(
        "-created_at"
    )
    serializer_class = StockMovementSerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ["branch", "product", "movement_type", "reference_id"]
