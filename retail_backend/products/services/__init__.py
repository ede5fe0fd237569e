from .stock_ledger import current_stock, decrease, increase, set_stock_level

__all__ = [
    "increase",
    "decrease",
    "set_stock_level",
    "current_stock",
]
