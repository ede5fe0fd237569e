# current_accounts/serializers/__init__.py

from .account import (
    AccountPaymentInputSerializer,
    CurrentAccountMovementSerializer,
    CurrentAccountSerializer,
)

__all__ = [
    "CurrentAccountSerializer",
    "CurrentAccountMovementSerializer",
    "AccountPaymentInputSerializer",
]
