# cash/services/cash_ledger.py

"""
CASH DRAWER LEDGER SERVICE

Purpose:
- Post immutable CashMovement rows to an OPEN register.
- Keep the register's cached aggregates equal to recompute(movements).

Rules:
- Posting to a missing or closed register raises RegisterClosedError.
- A register from another branch than the posting's raises ValidationError.
- The register row is locked (select_for_update) before posting.
- amount is stored unsigned; the movement type decides the direction.
- Aggregates are recomputed eagerly after every posting.
"""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.db import transaction

from cash.models import CashMovement, CashRegister, MovementType
from cash.services.aggregates import lines_for_register, recompute
from core.exceptions import RegisterClosedError, ValidationError
from core.references import Reference

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")


def _money(v) -> Decimal:
    try:
        return Decimal(str(v or "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError("amount must be a number", amount=v) from exc


def get_open_register(branch) -> CashRegister | None:
    """Explicit lookup; never cached."""
    return (
        CashRegister.objects.filter(branch=branch, status=CashRegister.STATUS_OPEN)
        .order_by("-opened_at")
        .first()
    )


def lock_open_register(*, register: CashRegister | None = None, branch=None) -> CashRegister:
    """
    Lock the target register and ensure it is open.

    register wins over branch; with only a branch, its open register is used.
    With both, the register must belong to that branch.
    """
    if register is None:
        if branch is None:
            raise RegisterClosedError("No cash register given for a cash posting")
        register = get_open_register(branch)
        if register is None:
            logger.warning(
                "Cash posting rejected: no open register",
                extra={"branch_id": str(branch.pk)},
            )
            raise RegisterClosedError(
                f"Branch {branch} has no open cash register",
                branch_id=branch.pk,
            )

    locked = CashRegister.objects.select_for_update().get(pk=register.pk)
    if branch is not None and locked.branch_id != branch.pk:
        logger.warning(
            "Cash posting rejected: register belongs to another branch",
            extra={"register_id": str(locked.pk), "branch_id": str(branch.pk)},
        )
        raise ValidationError(
            f"Cash register {locked.pk} does not belong to branch {branch}",
            register_id=locked.pk,
            register_branch_id=locked.branch_id,
            branch_id=branch.pk,
        )
    if not locked.is_open:
        logger.warning(
            "Cash posting rejected: register closed",
            extra={"register_id": str(locked.pk), "status": locked.status},
        )
        raise RegisterClosedError(
            f"Cash register {locked.pk} is {locked.status}",
            register_id=locked.pk,
            status=locked.status,
        )
    return locked


def _resolve_movement_type(movement_type) -> MovementType:
    if isinstance(movement_type, MovementType):
        return movement_type
    return MovementType.system(movement_type)


@transaction.atomic
def post_movement(
    *,
    amount,
    movement_type,
    register: CashRegister | None = None,
    branch=None,
    payment_method=None,
    description: str = "",
    reference: Reference | None = None,
    user=None,
    affects_balance: bool = True,
    metadata: dict | None = None,
    recompute_now: bool = True,
) -> CashMovement:
    magnitude = abs(_money(amount))
    if magnitude <= Decimal("0.00"):
        raise ValidationError("Cash movement amount must be > 0", amount=amount)

    locked = lock_open_register(register=register, branch=branch)
    mtype = _resolve_movement_type(movement_type)

    ref_fields = reference.as_fields() if reference else {}
    movement = CashMovement.objects.create(
        cash_register=locked,
        movement_type=mtype,
        payment_method=payment_method,
        amount=magnitude,
        description=(description or mtype.name)[:255],
        operator=user,
        affects_balance=affects_balance,
        metadata=metadata or {},
        **ref_fields,
    )

    if recompute_now:
        recompute_register(locked)

    logger.info(
        "Cash movement posted",
        extra={
            "register_id": str(locked.pk),
            "movement_id": str(movement.pk),
            "movement_type": mtype.code,
            "signed_amount": str(movement.signed_amount),
        },
    )
    return movement


@transaction.atomic
def recompute_register(register: CashRegister) -> CashRegister:
    """
    Rebuild cached aggregates from the movements. Allowed on closed registers
    too: annulments may post compensations elsewhere but still refresh here.
    """
    locked = CashRegister.objects.select_for_update().get(pk=register.pk)
    aggregates = recompute(locked.initial_amount, lines_for_register(locked))

    locked.expected_cash_balance = aggregates.expected_cash_balance
    locked.payment_method_totals = aggregates.totals_as_json()
    update_fields = ["expected_cash_balance", "payment_method_totals"]

    if locked.final_amount is not None:
        locked.cash_difference = _money(locked.final_amount) - aggregates.expected_cash_balance
        update_fields.append("cash_difference")

    locked.save(update_fields=update_fields)

    if register is not locked:
        register.expected_cash_balance = locked.expected_cash_balance
        register.payment_method_totals = locked.payment_method_totals
        register.cash_difference = locked.cash_difference
    return locked
