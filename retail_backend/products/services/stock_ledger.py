# products/services/stock_ledger.py

"""
STOCK LEDGER SERVICE

Purpose:
- The ONLY writer of Stock.current_stock.
- Every quantity change writes exactly one immutable StockMovement with
  price snapshots and a {kind, id} reference to the causing document.

Rules:
- The (product, branch) Stock row is locked (select_for_update) and created
  on first use.
- quantity must be > 0; direction comes from the operation.
- Negative stock is allowed unless settings.STOCK_ALLOW_NEGATIVE is False,
  in which case decrease() raises InsufficientStockError.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from django.conf import settings
from django.db import transaction

from core.exceptions import InsufficientStockError, ValidationError
from core.references import Reference
from products.models import Stock, StockMovement

logger = logging.getLogger(__name__)

THREEPLACES = Decimal("0.001")


@dataclass(frozen=True)
class StockChange:
    stock: Stock
    movement: StockMovement


def _to_quantity(value) -> Decimal:
    if isinstance(value, bool):
        raise ValidationError("quantity must be a number", quantity=value)
    try:
        qty = Decimal(str(value)).quantize(THREEPLACES)
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise ValidationError("quantity must be a number", quantity=value) from exc
    if qty <= 0:
        raise ValidationError("quantity must be greater than zero", quantity=qty)
    return qty


def _negative_stock_allowed() -> bool:
    return bool(getattr(settings, "STOCK_ALLOW_NEGATIVE", True))


def lock_stock(*, product, branch) -> Stock:
    """Return the (product, branch) stock row locked for update, creating it at zero."""
    stock, _ = Stock.objects.get_or_create(product=product, branch=branch)
    return Stock.objects.select_for_update().get(pk=stock.pk)


def _apply(
    *,
    product,
    branch,
    delta: Decimal,
    movement_type: str,
    reference: Reference | None,
    user=None,
    notes: str = "",
    sale_price=None,
) -> StockChange:
    stock = lock_stock(product=product, branch=branch)

    stock.current_stock = (stock.current_stock or Decimal("0")) + delta
    stock.save(update_fields=["current_stock", "updated_at"])

    ref_fields = reference.as_fields() if reference else {}
    movement = StockMovement.objects.create(
        product=product,
        branch=branch,
        movement_type=movement_type,
        quantity=delta,
        balance_after=stock.current_stock,
        cost_price_snapshot=product.cost_price,
        sale_price_snapshot=product.sale_price if sale_price is None else sale_price,
        notes=notes or "",
        performed_by=user,
        **ref_fields,
    )

    return StockChange(stock=stock, movement=movement)


@transaction.atomic
def increase(
    *,
    product,
    branch,
    quantity,
    movement_type: str = StockMovement.MovementType.PURCHASE,
    reference: Reference | None = None,
    user=None,
    notes: str = "",
    sale_price=None,
) -> StockChange:
    qty = _to_quantity(quantity)
    return _apply(
        product=product,
        branch=branch,
        delta=qty,
        movement_type=movement_type,
        reference=reference,
        user=user,
        notes=notes,
        sale_price=sale_price,
    )


@transaction.atomic
def decrease(
    *,
    product,
    branch,
    quantity,
    movement_type: str = StockMovement.MovementType.SALE,
    reference: Reference | None = None,
    user=None,
    notes: str = "",
    sale_price=None,
) -> StockChange:
    qty = _to_quantity(quantity)

    if not _negative_stock_allowed():
        available = lock_stock(product=product, branch=branch).current_stock
        if available < qty:
            logger.warning(
                "Stock decrease rejected",
                extra={
                    "product_id": str(product.pk),
                    "branch_id": str(branch.pk),
                    "available": str(available),
                    "requested": str(qty),
                },
            )
            raise InsufficientStockError(
                f"Insufficient stock for {product.name}. "
                f"Available: {available}, Requested: {qty}",
                product_id=product.pk,
                available=available,
                requested=qty,
            )

    return _apply(
        product=product,
        branch=branch,
        delta=-qty,
        movement_type=movement_type,
        reference=reference,
        user=user,
        notes=notes,
        sale_price=sale_price,
    )


@transaction.atomic
def set_stock_level(*, product, branch, counted_quantity, user=None, notes: str = ""):
    """
    Physical count: bring current_stock to counted_quantity with one
    ADJUSTMENT movement for the difference. Returns None when nothing changed.
    """
    try:
        counted = Decimal(str(counted_quantity)).quantize(THREEPLACES)
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise ValidationError(
            "counted_quantity must be a number", counted_quantity=counted_quantity
        ) from exc
    if counted < 0:
        raise ValidationError(
            "counted_quantity cannot be negative", counted_quantity=counted
        )

    stock = lock_stock(product=product, branch=branch)
    delta = counted - (stock.current_stock or Decimal("0"))
    if delta == 0:
        return None

    return _apply(
        product=product,
        branch=branch,
        delta=delta,
        movement_type=StockMovement.MovementType.ADJUSTMENT,
        reference=Reference(kind="manual"),
        user=user,
        notes=notes,
    )


def current_stock(*, product, branch) -> Decimal:
    value = (
        Stock.objects.filter(product=product, branch=branch)
        .values_list("current_stock", flat=True)
        .first()
    )
    return value if value is not None else Decimal("0.000")
