# sales/services/authorization.py

"""
E-INVOICING HAND-OFF

Runs strictly AFTER the sale transaction commits. A failure never
reverts the sale: it is recorded on the sale (authorization_status =
failed, authorization_error) and raised as ExternalAuthorizationError
so the caller can report it and retry later.

The authorizer is a plain class configured through
settings.INVOICE_AUTHORIZER (dotted path). It returns an
AuthorizationResult or raises.
"""

from __future__ import annotations

import datetime
import logging
import uuid
from dataclasses import dataclass

from django.conf import settings
from django.db import transaction
from django.utils import timezone
from django.utils.module_loading import import_string

from core.exceptions import ConversionPreconditionError, ExternalAuthorizationError
from sales.models import Sale

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthorizationResult:
    code: str
    expires_at: datetime.date | None = None


class InvoiceAuthorizer:
    """Base collaborator. Subclasses talk to the tax authority."""

    def authorize(self, sale: Sale) -> AuthorizationResult:
        raise NotImplementedError


class OfflineAuthorizer(InvoiceAuthorizer):
    """
    Local stand-in for development: issues a random code valid for
    ten days.
    """

    validity_days = 10

    def authorize(self, sale: Sale) -> AuthorizationResult:
        return AuthorizationResult(
            code=uuid.uuid4().hex[:14].upper(),
            expires_at=timezone.localdate() + datetime.timedelta(days=self.validity_days),
        )


def get_authorizer() -> InvoiceAuthorizer | None:
    path = getattr(settings, "INVOICE_AUTHORIZER", "")
    if not path:
        return None
    return import_string(path)()


def _store(sale: Sale, **fields) -> Sale:
    for name, value in fields.items():
        setattr(sale, name, value)
    with transaction.atomic():
        sale.save(update_fields=list(fields))
    return sale


def authorize_sale(*, sale: Sale, authorizer: InvoiceAuthorizer | None = None) -> Sale:
    if not sale.receipt_type.requires_authorization:
        if sale.authorization_status != Sale.AUTH_NOT_REQUIRED:
            _store(sale, authorization_status=Sale.AUTH_NOT_REQUIRED)
        return sale

    if sale.status != Sale.STATUS_ACTIVE:
        raise ConversionPreconditionError(
            f"Only active sales can be authorized (sale is {sale.status})",
            sale_id=sale.pk,
            status=sale.status,
        )

    if sale.authorization_status == Sale.AUTH_AUTHORIZED:
        return sale

    authorizer = authorizer or get_authorizer()
    if authorizer is None:
        _store(
            sale,
            authorization_status=Sale.AUTH_FAILED,
            authorization_error="No invoice authorizer configured",
        )
        raise ExternalAuthorizationError(
            "No invoice authorizer configured", sale_id=sale.pk
        )

    try:
        result = authorizer.authorize(sale)
    except Exception as exc:
        logger.error(
            "Invoice authorization failed",
            extra={"sale_id": str(sale.pk), "error": str(exc)},
            exc_info=True,
        )
        _store(
            sale,
            authorization_status=Sale.AUTH_FAILED,
            authorization_error=str(exc)[:1000],
        )
        raise ExternalAuthorizationError(
            f"Invoice authorization failed: {exc}",
            sale_id=sale.pk,
        ) from exc

    _store(
        sale,
        authorization_status=Sale.AUTH_AUTHORIZED,
        authorization_code=result.code,
        authorization_expires_at=result.expires_at,
        authorization_error="",
    )
    logger.info(
        "Invoice authorized",
        extra={"sale_id": str(sale.pk), "authorization_code": result.code},
    )
    return sale
