# current_accounts/services/ledger.py

"""
CURRENT ACCOUNT LEDGER SERVICE

Purpose:
- Append signed, immutable movements to a customer/supplier account.
- Process account payments (credit the account, and post the cash side
  to the branch's open register when the method affects cash).

Rules:
- The account row is locked (select_for_update) before every posting.
- balance is always sum(movements); balance_after snapshots it per row.
- Suspended / closed accounts reject postings.
- Positive postings cannot take the balance above credit_limit
  (unless enforce_limit=False).
- compensation=True (annulment reversals) bypasses both checks.
"""

from __future__ import annotations

import logging
import uuid
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.db import transaction

from cash.models import MovementType
from cash.services.cash_ledger import post_movement
from core.exceptions import CreditLimitExceededError, ValidationError
from core.references import ACCOUNT_PAYMENT, Reference
from current_accounts.models import CurrentAccount, CurrentAccountMovement

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")


def _money(v) -> Decimal:
    try:
        return Decimal(str(v or "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError("amount must be a number", amount=v) from exc


def get_or_open_account(*, customer=None, supplier=None) -> CurrentAccount:
    if (customer is None) == (supplier is None):
        raise ValidationError("Exactly one of customer or supplier is required")
    if customer is not None:
        account, _ = CurrentAccount.objects.get_or_create(customer=customer)
    else:
        account, _ = CurrentAccount.objects.get_or_create(supplier=supplier)
    return account


def get_balance(account: CurrentAccount) -> Decimal:
    return _money(account.compute_balance())


def available_store_credit(account: CurrentAccount | None) -> Decimal:
    """Favour balance the subject can spend: -balance when the balance is negative."""
    if account is None:
        return Decimal("0.00")
    balance = get_balance(account)
    return -balance if balance < 0 else Decimal("0.00")


def customer_store_credit(customer) -> Decimal:
    if customer is None:
        return Decimal("0.00")
    account = CurrentAccount.objects.filter(customer=customer).first()
    return available_store_credit(account)


def available_credit(account: CurrentAccount) -> Decimal | None:
    """Room left under credit_limit; None when unlimited."""
    if account.credit_limit is None:
        return None
    return _money(account.credit_limit) - get_balance(account)


@transaction.atomic
def post(
    *,
    account: CurrentAccount,
    amount,
    movement_type,
    description: str = "",
    reference: str = "",
    source: Reference | None = None,
    payment_method=None,
    metadata: dict | None = None,
    user=None,
    enforce_limit: bool = True,
    compensation: bool = False,
    movement_id=None,
) -> CurrentAccountMovement:
    signed = _money(amount)
    if signed == 0:
        raise ValidationError("Current account movement amount cannot be zero", amount=amount)

    locked = CurrentAccount.objects.select_for_update().get(pk=account.pk)
    if not locked.is_active and not compensation:
        raise ValidationError(
            f"Current account {locked.pk} is {locked.status}",
            account_id=locked.pk,
            status=locked.status,
        )

    balance = get_balance(locked)
    new_balance = balance + signed

    if (
        enforce_limit
        and not compensation
        and signed > 0
        and locked.credit_limit is not None
        and new_balance > _money(locked.credit_limit)
    ):
        logger.warning(
            "Current account posting rejected: credit limit",
            extra={
                "account_id": str(locked.pk),
                "balance": str(balance),
                "amount": str(signed),
                "credit_limit": str(locked.credit_limit),
            },
        )
        raise CreditLimitExceededError(
            f"Posting {signed} exceeds the credit limit of {locked.credit_limit}",
            account_id=locked.pk,
            balance=balance,
            amount=signed,
            credit_limit=locked.credit_limit,
        )

    mtype = movement_type if isinstance(movement_type, MovementType) else MovementType.system(movement_type)
    ref_fields = source.as_fields() if source else {}

    extra_fields = {"id": movement_id} if movement_id else {}
    return CurrentAccountMovement.objects.create(
        current_account=locked,
        movement_type=mtype,
        payment_method=payment_method,
        amount=signed,
        balance_after=new_balance,
        description=(description or mtype.name)[:255],
        reference=reference or "",
        metadata=metadata or {},
        performed_by=user,
        **ref_fields,
        **extra_fields,
    )


@transaction.atomic
def process_payment(
    *,
    account: CurrentAccount,
    amount,
    payment_method=None,
    branch=None,
    register=None,
    description: str = "",
    user=None,
) -> CurrentAccountMovement:
    """
    Reduce what the subject owes by `amount`.

    When the method affects cash, the inflow is posted to `register` (or the
    branch's open register) in the same unit of work; RegisterClosedError
    aborts both sides.
    """
    value = _money(amount)
    if value <= Decimal("0.00"):
        raise ValidationError("Payment amount must be > 0", amount=amount)

    if payment_method is not None and (
        payment_method.is_current_account or payment_method.is_store_credit
    ):
        raise ValidationError(
            f"{payment_method.name} cannot settle a current account",
            payment_method=payment_method.code,
        )

    movement_id = uuid.uuid4()
    metadata = {}

    if payment_method is not None and payment_method.affects_cash:
        cash_movement = post_movement(
            register=register,
            branch=branch,
            amount=value,
            movement_type=MovementType.ACCOUNT_PAYMENT,
            payment_method=payment_method,
            description=f"Payment from {account.subject}",
            reference=Reference(kind=ACCOUNT_PAYMENT, id=str(movement_id)),
            user=user,
            metadata={"current_account_movement_id": str(movement_id)},
        )
        metadata["cash_movement_id"] = str(cash_movement.pk)
        metadata["cash_register_id"] = str(cash_movement.cash_register_id)

    movement = post(
        account=account,
        amount=-value,
        movement_type=MovementType.ACCOUNT_PAYMENT,
        description=description or "Current account payment",
        payment_method=payment_method,
        metadata=metadata,
        user=user,
        movement_id=movement_id,
    )

    logger.info(
        "Current account payment processed",
        extra={
            "account_id": str(account.pk),
            "movement_id": str(movement.pk),
            "amount": str(value),
            "balance_after": str(movement.balance_after),
        },
    )
    return movement
