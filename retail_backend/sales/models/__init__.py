# sales/models/__init__.py

"""
SALES MODELS PACKAGE EXPORTS

Purpose:
- Central export surface for sales app models.
"""

from .receipt_type import ReceiptType
from .sale import Sale
from .sale_item import SaleItem
from .sale_iva_breakdown import SaleIvaBreakdown
from .sale_payment import SalePayment

__all__ = [
    "ReceiptType",
    "Sale",
    "SaleItem",
    "SaleIvaBreakdown",
    "SalePayment",
]
