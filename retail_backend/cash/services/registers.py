# cash/services/registers.py

"""
CASH REGISTER LIFECYCLE

open_register:
- one open register per branch; a second open attempt is rejected
- initial_amount >= 0 seeds expected_cash_balance

close_register:
- only an open register can be closed (RegisterClosedError otherwise)
- aggregates are recomputed from scratch before closing
- cash_difference = final_amount - expected_cash_balance

post_manual_movement:
- operator drawer movements (deposit, withdrawal, expense, ...)
  through the same cash ledger posting path as sales
"""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.db import IntegrityError, transaction
from django.utils import timezone

from cash.models import CashRegister, MovementType
from cash.services.aggregates import cash_difference
from cash.services.cash_ledger import get_open_register, post_movement, recompute_register
from core.exceptions import RegisterClosedError, ValidationError
from core.references import Reference

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")

MANUAL_MOVEMENT_TYPES = {
    MovementType.DEPOSIT,
    MovementType.WITHDRAWAL,
    MovementType.EXPENSE,
}


def _money(v, *, field_name: str) -> Decimal:
    try:
        return Decimal(str(v if v not in (None, "") else "0.00")).quantize(
            TWOPLACES, rounding=ROUND_HALF_UP
        )
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError(f"{field_name} must be a number", **{field_name: v}) from exc


@transaction.atomic
def open_register(*, branch, user=None, initial_amount=0, notes: str = "") -> CashRegister:
    amount = _money(initial_amount, field_name="initial_amount")
    if amount < Decimal("0.00"):
        raise ValidationError("initial_amount cannot be negative", initial_amount=amount)

    existing = get_open_register(branch)
    if existing is not None:
        raise ValidationError(
            f"Branch {branch} already has an open cash register",
            register_id=existing.pk,
        )

    try:
        with transaction.atomic():
            register = CashRegister.objects.create(
                branch=branch,
                operator=user,
                initial_amount=amount,
                expected_cash_balance=amount,
                opening_notes=notes or "",
            )
    except IntegrityError as exc:
        # concurrent open for the same branch
        raise ValidationError(
            f"Branch {branch} already has an open cash register"
        ) from exc

    logger.info(
        "Cash register opened",
        extra={
            "register_id": str(register.pk),
            "branch_id": str(branch.pk),
            "initial_amount": str(amount),
        },
    )
    return register


@transaction.atomic
def close_register(*, register: CashRegister, final_amount, user=None, notes: str = "") -> CashRegister:
    locked = CashRegister.objects.select_for_update().get(pk=register.pk)
    if not locked.is_open:
        raise RegisterClosedError(
            f"Cash register {locked.pk} is already closed",
            register_id=locked.pk,
            status=locked.status,
        )

    final = _money(final_amount, field_name="final_amount")
    if final < Decimal("0.00"):
        raise ValidationError("final_amount cannot be negative", final_amount=final)

    locked = recompute_register(locked)

    locked.final_amount = final
    locked.cash_difference = cash_difference(
        final_amount=final,
        expected_cash_balance=locked.expected_cash_balance,
    )
    locked.status = CashRegister.STATUS_CLOSED
    locked.closed_at = timezone.now()
    locked.closing_notes = notes or ""
    locked.save(
        update_fields=[
            "final_amount",
            "cash_difference",
            "status",
            "closed_at",
            "closing_notes",
        ]
    )

    logger.info(
        "Cash register closed",
        extra={
            "register_id": str(locked.pk),
            "expected_cash_balance": str(locked.expected_cash_balance),
            "final_amount": str(final),
            "cash_difference": str(locked.cash_difference),
            "closed_by": str(getattr(user, "pk", "")),
        },
    )
    return locked


def post_manual_movement(
    *,
    register: CashRegister,
    movement_type_code: str,
    amount,
    payment_method=None,
    description: str = "",
    user=None,
):
    if movement_type_code not in MANUAL_MOVEMENT_TYPES:
        mtype = MovementType.objects.filter(
            code=movement_type_code, is_active=True, is_system=False
        ).first()
        if mtype is None:
            raise ValidationError(
                f"Unknown manual movement type '{movement_type_code}'",
                movement_type=movement_type_code,
            )
    else:
        mtype = MovementType.system(movement_type_code)

    return post_movement(
        register=register,
        movement_type=mtype,
        amount=amount,
        payment_method=payment_method,
        description=description,
        reference=Reference.to("cash_register", register),
        user=user,
    )
