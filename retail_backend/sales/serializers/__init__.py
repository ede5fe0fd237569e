from .commands import (
    AnnulSaleInputSerializer,
    CancelBudgetInputSerializer,
    ConvertBudgetInputSerializer,
    CreateSaleInputSerializer,
)
from .sale import SaleListSerializer, SaleSerializer
from .sale_item import SaleItemSerializer, SaleIvaBreakdownSerializer, SalePaymentSerializer

__all__ = [
    "SaleSerializer",
    "SaleListSerializer",
    "SaleItemSerializer",
    "SaleIvaBreakdownSerializer",
    "SalePaymentSerializer",
    "CreateSaleInputSerializer",
    "AnnulSaleInputSerializer",
    "ConvertBudgetInputSerializer",
    "CancelBudgetInputSerializer",
]
