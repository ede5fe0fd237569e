# cash/serializers/__init__.py

from .register import (
    CashMovementInputSerializer,
    CashMovementSerializer,
    CashRegisterSerializer,
    CloseRegisterInputSerializer,
    OpenRegisterInputSerializer,
)

__all__ = [
    "CashRegisterSerializer",
    "CashMovementSerializer",
    "OpenRegisterInputSerializer",
    "CloseRegisterInputSerializer",
    "CashMovementInputSerializer",
]
