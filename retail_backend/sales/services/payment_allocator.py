# sales/services/payment_allocator.py

"""
PAYMENT ALLOCATOR

Reconciles submitted payments against a sale total and settles the
sale's payment status.

RECONCILIATION (target = total - store_credit):
- |target - sum(payments)| <= PAYMENT_MISMATCH_TOLERANCE   -> accepted as is
- |target - sum(payments)| <= PAYMENT_AUTO_CORRECTION_LIMIT -> the LAST payment
  line absorbs the difference (it must stay > 0)
- otherwise PaymentMismatchError carrying both sums

STORE CREDIT:
- virtual payment method; stored as a SalePayment, never a cash movement
- requires a customer whose favour balance covers it, and <= total

SETTLEMENT:
- paid = payments whose method affects cash (not current account) + store credit
- total == 0 or paid >= total - tolerance -> paid (paid_amount = total)
- paid > 0 -> partial, else pending
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError

from cash.models import PaymentMethod
from core.exceptions import PaymentMismatchError, ValidationError
from current_accounts.services.ledger import customer_store_credit
from sales.models import Sale

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")

STORE_CREDIT_CODE = "store_credit"


def _money(v) -> Decimal:
    try:
        return Decimal(str(v if v not in (None, "") else "0.00")).quantize(
            TWOPLACES, rounding=ROUND_HALF_UP
        )
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError("amount must be a number", amount=v) from exc


def mismatch_tolerance() -> Decimal:
    return _money(getattr(settings, "PAYMENT_MISMATCH_TOLERANCE", "0.01"))


def auto_correction_limit() -> Decimal:
    return _money(getattr(settings, "PAYMENT_AUTO_CORRECTION_LIMIT", "1000.00"))


def store_credit_method() -> PaymentMethod:
    method = PaymentMethod.objects.filter(is_store_credit=True, is_active=True).first()
    if method is not None:
        return method
    method, _ = PaymentMethod.objects.get_or_create(
        code=STORE_CREDIT_CODE,
        defaults={
            "name": "Store credit",
            "affects_cash": False,
            "is_store_credit": True,
        },
    )
    return method


@dataclass
class PaymentLine:
    payment_method: PaymentMethod
    amount: Decimal


@dataclass
class Allocation:
    payments: list[PaymentLine]
    store_credit: Decimal = ZERO
    adjustment: Decimal = ZERO
    warnings: list[str] = field(default_factory=list)

    @property
    def cash_lines(self) -> list[PaymentLine]:
        """Lines that post to the cash drawer."""
        return [
            p
            for p in self.payments
            if p.payment_method.affects_cash and not p.payment_method.is_current_account
        ]

    @property
    def deferred_amount(self) -> Decimal:
        return sum(
            (p.amount for p in self.payments if p.payment_method.is_current_account),
            ZERO,
        )

    def all_lines(self) -> list[PaymentLine]:
        """Persistable SalePayment lines, store credit last."""
        lines = list(self.payments)
        if self.store_credit > 0:
            lines.append(PaymentLine(payment_method=store_credit_method(), amount=self.store_credit))
        return lines


def resolve_payments(raw_payments) -> list[PaymentLine]:
    """raw_payments: iterable of {payment_method_id, amount}."""
    raw_payments = list(raw_payments or [])
    ids = {str(p.get("payment_method_id")) for p in raw_payments}
    try:
        methods = {
            str(m.pk): m for m in PaymentMethod.objects.filter(pk__in=ids, is_active=True)
        }
    except DjangoValidationError as exc:
        raise ValidationError("Malformed payment_method_id in payments") from exc

    out = []
    for idx, raw in enumerate(raw_payments):
        method = methods.get(str(raw.get("payment_method_id")))
        if method is None:
            raise ValidationError(
                f"Unknown or inactive payment method at payment {idx + 1}",
                payment=idx + 1,
                payment_method_id=raw.get("payment_method_id"),
            )
        out.append(PaymentLine(payment_method=method, amount=_money(raw.get("amount"))))
    return out


def allocate_payments(
    *,
    total,
    payments: list[PaymentLine],
    customer=None,
    store_credit=ZERO,
) -> Allocation:
    total = _money(total)
    store_credit = _money(store_credit)

    regular: list[PaymentLine] = []
    for idx, line in enumerate(payments):
        if line.amount <= ZERO:
            raise ValidationError(
                f"Payment {idx + 1} amount must be > 0",
                payment=idx + 1,
                amount=line.amount,
            )
        if line.payment_method.is_store_credit:
            store_credit += line.amount
            continue
        if line.payment_method.is_current_account and customer is None:
            raise ValidationError(
                "Current account payments require a customer",
                payment_method=line.payment_method.code,
            )
        regular.append(PaymentLine(payment_method=line.payment_method, amount=line.amount))

    if store_credit < ZERO:
        raise ValidationError("Store credit cannot be negative", store_credit=store_credit)

    if store_credit > ZERO:
        if customer is None:
            raise ValidationError("Store credit requires a customer")
        if store_credit > total:
            raise ValidationError(
                "Store credit exceeds the sale total",
                store_credit=store_credit,
                total=total,
            )
        available = customer_store_credit(customer)
        if store_credit > available:
            raise ValidationError(
                "Insufficient store credit",
                store_credit=store_credit,
                available=available,
            )

    target = total - store_credit
    submitted = sum((p.amount for p in regular), ZERO)
    difference = target - submitted

    allocation = Allocation(payments=regular, store_credit=store_credit)

    if abs(difference) <= mismatch_tolerance():
        return allocation

    if abs(difference) <= auto_correction_limit() and regular:
        last = regular[-1]
        corrected = last.amount + difference
        if corrected > ZERO:
            logger.info(
                "Payment auto-corrected on last line",
                extra={
                    "expected": str(target),
                    "received": str(submitted),
                    "adjustment": str(difference),
                    "payment_method": last.payment_method.code,
                },
            )
            last.amount = corrected
            allocation.adjustment = difference
            allocation.warnings.append(
                f"Last payment adjusted by {difference} to match the total"
            )
            return allocation

    logger.warning(
        "Payment mismatch",
        extra={"expected": str(target), "received": str(submitted)},
    )
    raise PaymentMismatchError(
        f"Payments ({submitted}) do not match the sale total ({target})",
        expected=target,
        received=submitted,
        difference=difference,
    )


def compute_settlement(*, total, payment_lines) -> tuple[Decimal, str]:
    """
    Returns (paid_amount, payment_status) for persisted or in-memory
    payment lines (anything with .payment_method and .amount).
    """
    total = _money(total)
    paid = sum(
        (_money(p.amount) for p in payment_lines if p.payment_method.is_settlement),
        ZERO,
    )

    if total <= ZERO or paid >= total - mismatch_tolerance():
        return total, Sale.PAYMENT_PAID
    if paid > ZERO:
        return paid, Sale.PAYMENT_PARTIAL
    return ZERO, Sale.PAYMENT_PENDING


def settle_sale(sale: Sale) -> Sale:
    """Recompute paid_amount / payment_status from the sale's payments."""
    lines = list(sale.payments.select_related("payment_method"))
    paid_amount, payment_status = compute_settlement(total=sale.total, payment_lines=lines)

    if (sale.paid_amount, sale.payment_status) != (paid_amount, payment_status):
        sale.paid_amount = paid_amount
        sale.payment_status = payment_status
        sale.save(update_fields=["paid_amount", "payment_status"])
    return sale
