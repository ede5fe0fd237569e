# products/views/__init__.py

"""
Products views package exports.
"""

from .stock import StockMovementViewSet, StockViewSet

__all__ = [
    "StockViewSet",
    "StockMovementViewSet",
]
