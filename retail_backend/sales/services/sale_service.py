# sales/services/sale_service.py

"""
SALE SERVICE (UNIT OF WORK)

Purpose:
- Create a sale or a budget atomically:
    builder -> allocator -> stock ledger + cash ledger + current account ledger

GUARANTEES:
- One transaction: any domain error rolls back every posting
- Budgets persist as drafts with zero stock / cash / credit side effects
- Cash postings require an open register (RegisterClosedError otherwise);
  the register is resolved BEFORE any stock is touched
- Every cash-affecting payment posts exactly one CashMovement
- A sale with a customer posts a debit for the total and a credit per
  settled payment (current-account and store-credit lines excepted)

The e-invoicing hand-off is NOT part of this unit of work
(see sales.services.authorization).
"""

from __future__ import annotations

import logging
from decimal import Decimal

from django.db import transaction
from django.utils import timezone

from cash.models import MovementType
from cash.services.cash_ledger import lock_open_register, post_movement, recompute_register
from core.exceptions import CreditLimitExceededError, ValidationError
from core.references import SALE, Reference
from current_accounts.services import ledger as account_ledger
from products.models import StockMovement
from products.services import stock_ledger
from sales.models import Sale, SaleItem, SaleIvaBreakdown, SalePayment
from sales.services.numbering import next_receipt_number
from sales.services.payment_allocator import (
    Allocation,
    allocate_payments,
    compute_settlement,
    resolve_payments,
)
from sales.services.sale_builder import SaleTotals, build_sale, resolve_lines

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")


def _check_header(*, branch, receipt_type, customer):
    if branch is None or not branch.is_active:
        raise ValidationError("Branch is missing or inactive")
    if receipt_type is None or not receipt_type.is_active:
        raise ValidationError("Receipt type is missing or inactive")
    if customer is not None and not customer.is_active:
        raise ValidationError(
            f"Customer '{customer.name}' is inactive", customer_id=customer.pk
        )


def _check_credit_limit(*, customer, allocation: Allocation):
    """
    The sale leaves the customer's balance at
    balance + deferred + store_credit (the debit covers store credit).
    """
    if customer is None or allocation.deferred_amount <= ZERO:
        return

    account = account_ledger.get_or_open_account(customer=customer)
    room = account_ledger.available_credit(account)
    if room is None:
        return

    increase = allocation.deferred_amount + allocation.store_credit
    if increase > room:
        raise CreditLimitExceededError(
            f"Deferred payment of {allocation.deferred_amount} exceeds the available credit ({room})",
            deferred=allocation.deferred_amount,
            available_credit=room,
            credit_limit=account.credit_limit,
        )


def _persist_document(
    *,
    totals: SaleTotals,
    branch,
    receipt_type,
    customer,
    user,
    status: str,
    cash_register=None,
    allocation: Allocation | None = None,
    notes: str = "",
    sale_date=None,
    converted_from_budget=None,
) -> Sale:
    scope, receipt_number = next_receipt_number(branch=branch, receipt_type=receipt_type)

    payment_lines = allocation.all_lines() if allocation else []
    if status == Sale.STATUS_ACTIVE:
        paid_amount, payment_status = compute_settlement(
            total=totals.total, payment_lines=payment_lines
        )
    else:
        paid_amount, payment_status = ZERO, Sale.PAYMENT_PENDING

    if status == Sale.STATUS_ACTIVE and receipt_type.requires_authorization:
        authorization_status = Sale.AUTH_PENDING
    else:
        authorization_status = Sale.AUTH_NOT_REQUIRED

    sale = Sale.objects.create(
        receipt_number=receipt_number,
        numbering_scope=scope,
        receipt_type=receipt_type,
        branch=branch,
        customer=customer,
        operator=user,
        sale_date=sale_date or timezone.now(),
        status=status,
        subtotal_gross=totals.subtotal_gross,
        items_discount=totals.items_discount,
        subtotal_net=totals.subtotal_net,
        total_iva=totals.total_iva,
        discount_type=totals.discount_type,
        discount_value=totals.discount_value,
        discount=totals.discount,
        iibb=totals.iibb,
        internal_tax=totals.internal_tax,
        total=totals.total,
        store_credit_applied=allocation.store_credit if allocation else ZERO,
        paid_amount=paid_amount,
        payment_status=payment_status,
        cash_register=cash_register,
        authorization_status=authorization_status,
        converted_from_budget=converted_from_budget,
        notes=notes or "",
    )

    for line in totals.lines:
        SaleItem.objects.create(
            sale=sale,
            product=line.product,
            quantity=line.quantity,
            unit_price=line.unit_price,
            discount_type=line.discount_type,
            discount_value=line.discount_value,
            discount_amount=line.discount_amount,
            iva_rate=line.iva_rate,
            net_amount=line.net_amount,
            iva_amount=line.iva_amount,
            line_total=line.line_total,
        )

    for row in totals.iva_breakdown:
        SaleIvaBreakdown.objects.create(
            sale=sale,
            iva_rate=row.iva_rate,
            base_amount=row.base_amount,
            iva_amount=row.iva_amount,
        )

    for line in payment_lines:
        SalePayment.objects.create(
            sale=sale,
            payment_method=line.payment_method,
            amount=line.amount,
        )

    return sale


def _post_stock(*, sale: Sale, user):
    reference = Reference.to(SALE, sale)
    for item in sale.items.select_related("product"):
        stock_ledger.decrease(
            product=item.product,
            branch=sale.branch,
            quantity=item.quantity,
            movement_type=StockMovement.MovementType.SALE,
            reference=reference,
            user=user,
            notes=f"Sale {sale.receipt_number}",
            sale_price=item.unit_price,
        )


def _post_cash(*, sale: Sale, allocation: Allocation, register, user):
    reference = Reference.to(SALE, sale)
    for line in allocation.cash_lines:
        post_movement(
            register=register,
            amount=line.amount,
            movement_type=MovementType.SALE,
            payment_method=line.payment_method,
            description=f"Sale {sale.receipt_number}",
            reference=reference,
            user=user,
            recompute_now=False,
        )
    if allocation.cash_lines:
        recompute_register(register)


def _post_current_account(*, sale: Sale, allocation: Allocation, user):
    if sale.customer is None:
        return

    account = account_ledger.get_or_open_account(customer=sale.customer)
    source = Reference.to(SALE, sale)

    account_ledger.post(
        account=account,
        amount=sale.total,
        movement_type=MovementType.SALE,
        description=f"Sale {sale.receipt_number}",
        reference=sale.receipt_number,
        source=source,
        user=user,
        enforce_limit=False,
    )

    for line in allocation.payments:
        if line.payment_method.is_current_account:
            continue
        account_ledger.post(
            account=account,
            amount=-line.amount,
            movement_type=MovementType.ACCOUNT_PAYMENT,
            description=f"Payment {line.payment_method.name} - sale {sale.receipt_number}",
            reference=sale.receipt_number,
            source=source,
            payment_method=line.payment_method,
            user=user,
        )


@transaction.atomic
def create_sale(
    *,
    branch,
    receipt_type,
    lines,
    payments=None,
    customer=None,
    user=None,
    cash_register=None,
    discount_type: str = "",
    discount_value=ZERO,
    iibb=ZERO,
    internal_tax=ZERO,
    store_credit=ZERO,
    notes: str = "",
    sale_date=None,
    converted_from_budget=None,
) -> Sale:
    """
    lines:    [{product_id, quantity, unit_price?, discount_type?, discount_value?}]
    payments: [{payment_method_id, amount}] (ignored for budgets)
    """
    _check_header(branch=branch, receipt_type=receipt_type, customer=customer)

    totals = build_sale(
        resolve_lines(lines),
        discount_type=discount_type,
        discount_value=discount_value,
        iibb=iibb,
        internal_tax=internal_tax,
    )

    # --------------------------------------------------
    # BUDGET: draft document, no ledger side effects
    # --------------------------------------------------
    if receipt_type.is_budget:
        budget = _persist_document(
            totals=totals,
            branch=branch,
            receipt_type=receipt_type,
            customer=customer,
            user=user,
            status=Sale.STATUS_DRAFT,
            notes=notes,
            sale_date=sale_date,
        )
        logger.info(
            "Budget created",
            extra={
                "sale_id": str(budget.pk),
                "receipt_number": budget.receipt_number,
                "total": str(budget.total),
            },
        )
        return budget

    # --------------------------------------------------
    # 1. PAYMENTS (reconcile before any write)
    # --------------------------------------------------
    allocation = allocate_payments(
        total=totals.total,
        payments=resolve_payments(payments),
        customer=customer,
        store_credit=store_credit,
    )
    _check_credit_limit(customer=customer, allocation=allocation)

    # --------------------------------------------------
    # 2. REGISTER (fail before stock is touched)
    # --------------------------------------------------
    register = cash_register
    if allocation.cash_lines:
        register = lock_open_register(register=cash_register, branch=branch)

    # --------------------------------------------------
    # 3. DOCUMENT
    # --------------------------------------------------
    sale = _persist_document(
        totals=totals,
        branch=branch,
        receipt_type=receipt_type,
        customer=customer,
        user=user,
        status=Sale.STATUS_ACTIVE,
        cash_register=register,
        allocation=allocation,
        notes=notes,
        sale_date=sale_date,
        converted_from_budget=converted_from_budget,
    )

    # --------------------------------------------------
    # 4. LEDGERS
    # --------------------------------------------------
    _post_stock(sale=sale, user=user)
    _post_cash(sale=sale, allocation=allocation, register=register, user=user)
    _post_current_account(sale=sale, allocation=allocation, user=user)

    logger.info(
        "Sale created",
        extra={
            "sale_id": str(sale.pk),
            "receipt_number": sale.receipt_number,
            "branch_id": str(branch.pk),
            "total": str(sale.total),
            "paid_amount": str(sale.paid_amount),
            "payment_status": sale.payment_status,
            "payment_adjustment": str(allocation.adjustment),
        },
    )
    return sale
