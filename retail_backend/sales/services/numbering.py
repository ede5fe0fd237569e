# sales/services/numbering.py

"""
RECEIPT NUMBERING

- 8-digit zero-padded, sequential per branch and numbering scope
- every non-budget receipt type shares the "sale" scope of its branch
- budgets number per (branch, budget receipt type): "budget:<code>"
- the branch row is locked while the next number is taken
"""

from __future__ import annotations

from django.db import transaction

from branches.models import Branch
from sales.models import Sale

RECEIPT_NUMBER_WIDTH = 8
SALE_SCOPE = "sale"


def numbering_scope_for(receipt_type) -> str:
    if receipt_type.is_budget:
        return f"budget:{receipt_type.code}"
    return SALE_SCOPE


def format_receipt_number(value: int) -> str:
    return str(value).zfill(RECEIPT_NUMBER_WIDTH)


@transaction.atomic
def next_receipt_number(*, branch, receipt_type) -> tuple[str, str]:
    """Returns (scope, receipt_number)."""
    Branch.objects.select_for_update().get(pk=branch.pk)

    scope = numbering_scope_for(receipt_type)
    last = (
        Sale.objects.filter(branch=branch, numbering_scope=scope)
        .order_by("-receipt_number")
        .values_list("receipt_number", flat=True)
        .first()
    )
    next_value = int(last) + 1 if last else 1
    return scope, format_receipt_number(next_value)
