# current_accounts/models/__init__.py

from .account import CurrentAccount
from .movement import CurrentAccountMovement
from .party import Customer, Supplier

__all__ = [
    "Customer",
    "Supplier",
    "CurrentAccount",
    "CurrentAccountMovement",
]
