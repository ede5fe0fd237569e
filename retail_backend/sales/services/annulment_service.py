# sales/services/annulment_service.py

"""
SALE ANNULMENT (COMPENSATING REVERSAL)

Annulment never edits or deletes ledger rows. It appends the opposite
postings and moves the sale to its terminal `annulled` state:

1. stock:   one increase per line (reference sale_annulment)
2. cash:    one opposite-direction movement per original sale movement
3. account: one opposite-sign movement per original sale movement
4. sale:    status annulled + timestamp / operator / reason
5. every affected register is recomputed

Any failure aborts the whole annulment.
"""

from __future__ import annotations

import logging

from django.db import transaction
from django.utils import timezone

from cash.models import CashMovement, CashRegister, MovementType
from cash.services.cash_ledger import get_open_register, post_movement, recompute_register
from core.exceptions import ConversionPreconditionError, NotFoundError, RegisterClosedError
from core.references import SALE, SALE_ANNULMENT, Reference
from current_accounts.models import CurrentAccountMovement
from current_accounts.services import ledger as account_ledger
from products.models import StockMovement
from products.services import stock_ledger
from sales.models import Sale
from sales.services.sale_lifecycle import validate_transition

logger = logging.getLogger(__name__)


def _compensation_register(original: CashRegister, branch) -> CashRegister:
    if original.is_open:
        return original
    fallback = get_open_register(branch)
    if fallback is None:
        raise RegisterClosedError(
            f"Register {original.pk} is closed and branch {branch} has no open register",
            register_id=original.pk,
            branch_id=branch.pk,
        )
    return fallback


def _reverse_stock(*, sale: Sale, user, reference: Reference):
    for item in sale.items.select_related("product"):
        stock_ledger.increase(
            product=item.product,
            branch=sale.branch,
            quantity=item.quantity,
            movement_type=StockMovement.MovementType.SALE_ANNULMENT,
            reference=reference,
            user=user,
            notes=f"Annulment of sale {sale.receipt_number}",
            sale_price=item.unit_price,
        )


def _reverse_cash(*, sale: Sale, user, reference: Reference) -> set:
    touched = set()
    originals = (
        CashMovement.objects.filter(reference_kind=SALE, reference_id=str(sale.pk))
        .select_related("cash_register", "movement_type", "payment_method")
        .order_by("created_at")
    )
    for original in originals:
        target = _compensation_register(original.cash_register, sale.branch)
        code = (
            MovementType.SALE_ANNULMENT
            if original.movement_type.sign > 0
            else MovementType.SALE
        )
        post_movement(
            register=target,
            amount=original.amount,
            movement_type=code,
            payment_method=original.payment_method,
            description=f"Annulment of sale {sale.receipt_number}",
            reference=reference,
            user=user,
            metadata={"original_movement_id": str(original.pk)},
            recompute_now=False,
        )
        touched.add(original.cash_register_id)
        touched.add(target.pk)
    return touched


def _reverse_current_account(*, sale: Sale, user, reference: Reference):
    originals = (
        CurrentAccountMovement.objects.filter(reference_kind=SALE, reference_id=str(sale.pk))
        .select_related("current_account", "payment_method")
        .order_by("created_at")
    )
    for original in originals:
        account_ledger.post(
            account=original.current_account,
            amount=-original.amount,
            movement_type=MovementType.ACCOUNT_ANNULMENT,
            description=f"Annulment of sale {sale.receipt_number}",
            reference=sale.receipt_number,
            source=reference,
            payment_method=original.payment_method,
            metadata={"original_movement_id": str(original.pk)},
            user=user,
            compensation=True,
        )


@transaction.atomic
def annul_sale(*, sale, user=None, reason: str = "") -> Sale:
    """
    sale: Sale instance or primary key.
    """
    sale_id = getattr(sale, "pk", sale)
    try:
        locked = (
            Sale.objects.select_for_update()
            .select_related("receipt_type", "branch")
            .get(pk=sale_id)
        )
    except (Sale.DoesNotExist, ValueError) as exc:
        raise NotFoundError(f"Sale {sale_id} not found", sale_id=sale_id) from exc

    if locked.is_budget or locked.status in (Sale.STATUS_DRAFT, Sale.STATUS_CANCELLED):
        raise ConversionPreconditionError(
            f"Budget {locked.receipt_number} cannot be annulled; cancel it instead",
            sale_id=locked.pk,
            status=locked.status,
        )

    validate_transition(sale=locked, target_status=Sale.STATUS_ANNULLED)

    reference = Reference.to(SALE_ANNULMENT, locked)

    _reverse_stock(sale=locked, user=user, reference=reference)
    touched = _reverse_cash(sale=locked, user=user, reference=reference)
    _reverse_current_account(sale=locked, user=user, reference=reference)

    locked.status = Sale.STATUS_ANNULLED
    locked.annulled_at = timezone.now()
    locked.annulled_by = user
    locked.annulment_reason = reason or ""
    locked.save(update_fields=["status", "annulled_at", "annulled_by", "annulment_reason"])

    for register in CashRegister.objects.filter(pk__in=touched):
        recompute_register(register)

    logger.info(
        "Sale annulled",
        extra={
            "sale_id": str(locked.pk),
            "receipt_number": locked.receipt_number,
            "registers": sorted(str(pk) for pk in touched),
            "reason": locked.annulment_reason,
        },
    )
    return locked
