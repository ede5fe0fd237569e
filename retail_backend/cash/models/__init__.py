# cash/models/__init__.py

"""
CASH MODELS PACKAGE EXPORTS
"""

from .cash_movement import CashMovement
from .cash_register import CashRegister
from .movement_type import MovementType
from .payment_method import PaymentMethod

__all__ = [
    "PaymentMethod",
    "MovementType",
    "CashRegister",
    "CashMovement",
]
