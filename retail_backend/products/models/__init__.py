"""
PATH: products/models/__init__.py

Products models export surface.
"""

from .product import Product
from .stock import Stock
from .stock_movement import StockMovement

__all__ = [
    "Product",
    "Stock",
    "StockMovement",
]
