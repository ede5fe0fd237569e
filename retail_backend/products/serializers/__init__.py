# products/serializers/__init__.py

from .stock import StockCountInputSerializer, StockMovementSerializer, StockSerializer

__all__ = [
    "StockSerializer",
    "StockMovementSerializer",
    "StockCountInputSerializer",
]
