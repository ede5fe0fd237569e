"""
SALE LIFECYCLE DOMAIN RULES

This module defines the ONLY allowed lifecycle transitions
for Sale entities.

    draft  -> active      (budget conversion creates the active sale)
    draft  -> cancelled   (budget cancellation)
    active -> annulled    (compensating reversal)

DESIGN PRINCIPLES:
- No database writes
- No stock mutation
- No side effects
- Single source of truth
"""

from core.exceptions import AlreadyAnnulledError, ConversionPreconditionError
from sales.models import Sale

# ============================================================
# STATE DEFINITIONS
# ============================================================

TERMINAL_STATES = {
    Sale.STATUS_ANNULLED,
    Sale.STATUS_CANCELLED,
}

ALLOWED_TRANSITIONS = {
    Sale.STATUS_DRAFT: {
        Sale.STATUS_ACTIVE,
        Sale.STATUS_CANCELLED,
    },
    Sale.STATUS_ACTIVE: {
        Sale.STATUS_ANNULLED,
    },
}


# ============================================================
# DOMAIN RULES
# ============================================================


def can_transition(*, from_status: str, to_status: str) -> bool:
    if from_status in TERMINAL_STATES:
        return False

    return to_status in ALLOWED_TRANSITIONS.get(from_status, set())


def validate_transition(*, sale: Sale, target_status: str):
    if can_transition(from_status=sale.status, to_status=target_status):
        return

    if sale.status == Sale.STATUS_ANNULLED and target_status == Sale.STATUS_ANNULLED:
        raise AlreadyAnnulledError(
            f"Sale {sale.receipt_number} is already annulled",
            sale_id=sale.id,
            annulled_at=sale.annulled_at,
        )

    raise ConversionPreconditionError(
        f"Sale {sale.id} cannot transition from "
        f"'{sale.status}' to '{target_status}'",
        sale_id=sale.id,
        status=sale.status,
        target_status=target_status,
    )
