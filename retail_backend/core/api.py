# core/api.py

"""
API ERROR NORMALIZATION

Every ledger endpoint answers domain failures with the same body:

    {"kind": "...", "message": "...", ...offending values}
"""

from __future__ import annotations

from rest_framework import status
from rest_framework.response import Response

from core.exceptions import (
    AlreadyAnnulledError,
    ConversionPreconditionError,
    ExternalAuthorizationError,
    InsufficientStockError,
    LedgerError,
    NotFoundError,
    PaymentMismatchError,
    RegisterClosedError,
)

_STATUS_BY_ERROR = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (PaymentMismatchError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (InsufficientStockError, status.HTTP_409_CONFLICT),
    (RegisterClosedError, status.HTTP_409_CONFLICT),
    (AlreadyAnnulledError, status.HTTP_409_CONFLICT),
    (ConversionPreconditionError, status.HTTP_409_CONFLICT),
    (ExternalAuthorizationError, status.HTTP_502_BAD_GATEWAY),
)


def http_status_for(exc: LedgerError) -> int:
    for error_class, http_status in _STATUS_BY_ERROR:
        if isinstance(exc, error_class):
            return http_status
    return status.HTTP_400_BAD_REQUEST


def error_response(*, kind: str, message: str, http_status: int, **details):
    """
    Canonical API error response.
    """
    body = {"kind": kind, "message": message}
    body.update(details)
    return Response(body, status=http_status)


def ledger_error_response(exc: LedgerError):
    return Response(exc.to_dict(), status=http_status_for(exc))
