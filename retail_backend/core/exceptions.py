# core/exceptions.py

"""
LEDGER DOMAIN ERRORS

Centralized error taxonomy shared by every ledger service
(stock, cash drawer, current accounts, sales).

RULES:
- Every error carries a stable `kind` used by the API layer.
- Offending values travel in `details` (never only in the message).
- Raising any of these inside a transaction.atomic block aborts the
  whole unit of work. ExternalAuthorizationError is the only one raised
  after commit.
"""

from __future__ import annotations


class LedgerError(Exception):
    """Base exception for all ledger operation failures."""

    kind = "ledger_error"

    def __init__(self, message: str = "", **details):
        self.message = message or self.__class__.__doc__ or self.kind
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict:
        payload = {"kind": self.kind, "message": self.message}
        for key, value in self.details.items():
            payload[key] = value if isinstance(value, (int, bool, type(None))) else str(value)
        return payload


class ValidationError(LedgerError):
    """Malformed input: bad line item, discount, quantity or reference."""

    kind = "validation_error"


class NotFoundError(ValidationError):
    """A referenced entity does not exist."""

    kind = "not_found"


class CreditLimitExceededError(ValidationError):
    """Posting would push a current account above its credit limit."""

    kind = "credit_limit_exceeded"


class PaymentMismatchError(LedgerError):
    """Payment total is outside the auto-correction window."""

    kind = "payment_mismatch"


class InsufficientStockError(LedgerError):
    """Stock decrease rejected by the negative-stock policy."""

    kind = "insufficient_stock"


class RegisterClosedError(LedgerError):
    """A cash posting targets a missing or closed register."""

    kind = "register_closed"


class AlreadyAnnulledError(LedgerError):
    """The sale is already annulled."""

    kind = "already_annulled"


class ConversionPreconditionError(LedgerError):
    """The document is not in a state that allows the requested transition."""

    kind = "conversion_precondition"


class ExternalAuthorizationError(LedgerError):
    """The e-invoicing collaborator rejected or failed the authorization."""

    kind = "external_authorization"
