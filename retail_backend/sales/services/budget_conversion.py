# sales/services/budget_conversion.py

"""
BUDGET -> SALE CONVERSION

A budget (quote) is a draft Sale with a budget receipt type and no ledger
side effects. Conversion runs the full active-sale pipeline over the
budget lines and links both documents; cancellation closes the budget.

PRECONDITIONS (ConversionPreconditionError):
- the document is a draft budget, not converted, not cancelled
- it has at least one line and total > 0
- the target receipt type is not a budget

PRICING:
- BUDGET_CONVERSION_REPRICE=True  -> current catalog sale_price
- BUDGET_CONVERSION_REPRICE=False -> the price quoted on the budget
Line discounts, the header discount and manual taxes are carried over.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from core.exceptions import ConversionPreconditionError, NotFoundError
from sales.models import Sale
from sales.services.sale_builder import build_sale, resolve_lines
from sales.services.sale_lifecycle import validate_transition
from sales.services.sale_service import create_sale

logger = logging.getLogger(__name__)


def _lock_budget(budget) -> Sale:
    budget_id = getattr(budget, "pk", budget)
    try:
        return (
            Sale.objects.select_for_update()
            .select_related("receipt_type", "branch", "customer")
            .get(pk=budget_id)
        )
    except (Sale.DoesNotExist, ValueError) as exc:
        raise NotFoundError(f"Budget {budget_id} not found", sale_id=budget_id) from exc


def _check_open_budget(budget: Sale):
    if not budget.is_budget:
        raise ConversionPreconditionError(
            f"Document {budget.receipt_number} is not a budget",
            sale_id=budget.pk,
        )
    if budget.converted_to_sale_id:
        raise ConversionPreconditionError(
            f"Budget {budget.receipt_number} was already converted",
            sale_id=budget.pk,
            converted_to_sale_id=budget.converted_to_sale_id,
        )
    if budget.status != Sale.STATUS_DRAFT:
        raise ConversionPreconditionError(
            f"Budget {budget.receipt_number} is {budget.status}",
            sale_id=budget.pk,
            status=budget.status,
        )


def _reprice() -> bool:
    return bool(getattr(settings, "BUDGET_CONVERSION_REPRICE", True))


def budget_lines(budget: Sale) -> list[dict]:
    reprice = _reprice()
    return [
        {
            "product_id": str(item.product_id),
            "quantity": item.quantity,
            "unit_price": None if reprice else item.unit_price,
            "discount_type": item.discount_type,
            "discount_value": item.discount_value,
        }
        for item in budget.items.all()
    ]


@transaction.atomic
def convert_budget(
    *,
    budget,
    receipt_type,
    payment_method,
    user=None,
    cash_register=None,
) -> Sale:
    """
    Returns the new active sale; the whole new total is paid with
    `payment_method`.
    """
    budget = _lock_budget(budget)
    _check_open_budget(budget)

    if budget.total <= Decimal("0.00"):
        raise ConversionPreconditionError(
            f"Budget {budget.receipt_number} has no positive total",
            sale_id=budget.pk,
            total=budget.total,
        )
    if receipt_type is None or receipt_type.is_budget:
        raise ConversionPreconditionError(
            "A budget can only be converted into a non-budget receipt type",
            sale_id=budget.pk,
        )

    lines = budget_lines(budget)
    if not lines:
        raise ConversionPreconditionError(
            f"Budget {budget.receipt_number} has no lines",
            sale_id=budget.pk,
        )

    validate_transition(sale=budget, target_status=Sale.STATUS_ACTIVE)

    totals = build_sale(
        resolve_lines(lines),
        discount_type=budget.discount_type,
        discount_value=budget.discount_value,
        iibb=budget.iibb,
        internal_tax=budget.internal_tax,
    )
    if totals.total <= Decimal("0.00"):
        raise ConversionPreconditionError(
            f"Budget {budget.receipt_number} re-prices to a zero total",
            sale_id=budget.pk,
            total=totals.total,
        )

    sale = create_sale(
        branch=budget.branch,
        receipt_type=receipt_type,
        lines=lines,
        payments=[{"payment_method_id": str(payment_method.pk), "amount": totals.total}],
        customer=budget.customer,
        user=user,
        cash_register=cash_register,
        discount_type=budget.discount_type,
        discount_value=budget.discount_value,
        iibb=budget.iibb,
        internal_tax=budget.internal_tax,
        notes=budget.notes,
        converted_from_budget=budget,
    )

    budget.converted_to_sale = sale
    budget.converted_at = timezone.now()
    budget.save(update_fields=["converted_to_sale", "converted_at"])

    logger.info(
        "Budget converted",
        extra={
            "budget_id": str(budget.pk),
            "sale_id": str(sale.pk),
            "budget_total": str(budget.total),
            "sale_total": str(sale.total),
            "repriced": _reprice(),
        },
    )
    return sale


@transaction.atomic
def cancel_budget(*, budget, user=None, reason: str = "") -> Sale:
    budget = _lock_budget(budget)
    _check_open_budget(budget)
    validate_transition(sale=budget, target_status=Sale.STATUS_CANCELLED)

    budget.status = Sale.STATUS_CANCELLED
    if reason:
        budget.notes = f"{budget.notes}\n{reason}".strip()
    budget.save(update_fields=["status", "notes"])

    logger.info(
        "Budget cancelled",
        extra={
            "budget_id": str(budget.pk),
            "user_id": getattr(user, "pk", None),
        },
    )
    return budget
