# sales/services/sale_builder.py

"""
SALE AGGREGATE BUILDER (PURE)

Computes line totals, the VAT breakdown and the sale total from line
inputs. No database writes; resolve_lines() is the only query.

PER LINE:
    base     = quantity * unit_price
    discount = base * pct / 100          (percent)
             | min(value, base)          (fixed amount)
    net      = base - discount           (rounded once)
    iva      = net * iva_rate / 100      (rounded once)

SALE:
    breakdown[rate] = (sum(line.net), sum(line.iva))
    subtotal_net    = sum(breakdown.base)
    total_iva       = sum(breakdown.iva)
    discount        = header discount on (subtotal_net + total_iva)
    total           = subtotal_net + total_iva - discount + iibb + internal_tax

Rounding: ROUND_HALF_UP to 2 places, once per line. Breakdown rows and the
header are sums of rounded line values, so sum(line_total) equals
subtotal_net + total_iva and the total identity holds exactly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.core.exceptions import ValidationError as DjangoValidationError

from core.exceptions import NotFoundError, ValidationError
from products.models import Product

TWOPLACES = Decimal("0.01")
THREEPLACES = Decimal("0.001")
HUNDRED = Decimal("100")
ZERO = Decimal("0.00")

PERCENT = "percent"
AMOUNT = "amount"
DISCOUNT_TYPES = {PERCENT, AMOUNT}


def _money(v) -> Decimal:
    return Decimal(v).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _decimal(value, *, field_name: str, default=None) -> Decimal:
    if value is None or value == "":
        if default is None:
            raise ValidationError(f"{field_name} is required", **{field_name: value})
        return Decimal(default)
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a number", **{field_name: value})
    try:
        return Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise ValidationError(
            f"{field_name} must be a number", **{field_name: value}
        ) from exc


# ============================================================
# INPUT / OUTPUT SHAPES
# ============================================================


@dataclass(frozen=True)
class LineInput:
    product: Product
    quantity: Decimal
    unit_price: Decimal | None = None
    discount_type: str = ""
    discount_value: Decimal = ZERO


@dataclass(frozen=True)
class BuiltLine:
    product: Product
    quantity: Decimal
    unit_price: Decimal
    discount_type: str
    discount_value: Decimal
    discount_amount: Decimal
    iva_rate: Decimal
    net_amount: Decimal
    iva_amount: Decimal
    line_total: Decimal
    gross_amount: Decimal


@dataclass(frozen=True)
class IvaRow:
    iva_rate: Decimal
    base_amount: Decimal
    iva_amount: Decimal


@dataclass(frozen=True)
class SaleTotals:
    lines: list[BuiltLine]
    iva_breakdown: list[IvaRow]
    subtotal_gross: Decimal
    items_discount: Decimal
    subtotal_net: Decimal
    total_iva: Decimal
    discount_type: str
    discount_value: Decimal
    discount: Decimal
    iibb: Decimal
    internal_tax: Decimal
    total: Decimal
    warnings: list[str] = field(default_factory=list)


# ============================================================
# LINE RESOLUTION (catalog lookup)
# ============================================================


def resolve_lines(raw_lines) -> list[LineInput]:
    """
    raw_lines: iterable of dicts {product_id, quantity, unit_price?,
    discount_type?, discount_value?}. A given unit_price overrides the
    catalog sale_price.
    """
    raw_lines = list(raw_lines or [])
    if not raw_lines:
        raise ValidationError("A sale needs at least one line item")

    ids = {str(line.get("product_id")) for line in raw_lines}
    try:
        products = {str(p.pk): p for p in Product.objects.filter(pk__in=ids)}
    except DjangoValidationError as exc:
        raise ValidationError("Malformed product_id in line items") from exc

    out = []
    for idx, line in enumerate(raw_lines):
        product_id = str(line.get("product_id"))
        product = products.get(product_id)
        if product is None:
            raise NotFoundError(
                f"Unknown product at line {idx + 1}",
                line=idx + 1,
                product_id=product_id,
            )
        if not product.is_active:
            raise ValidationError(
                f"Product '{product.name}' is inactive",
                line=idx + 1,
                product_id=product_id,
            )

        unit_price = line.get("unit_price")
        out.append(
            LineInput(
                product=product,
                quantity=_decimal(line.get("quantity"), field_name="quantity"),
                unit_price=(
                    None
                    if unit_price in (None, "")
                    else _decimal(unit_price, field_name="unit_price")
                ),
                discount_type=(line.get("discount_type") or "").strip().lower(),
                discount_value=_decimal(
                    line.get("discount_value"), field_name="discount_value", default="0"
                ),
            )
        )
    return out


# ============================================================
# BUILDER
# ============================================================


def _line_discount(*, base: Decimal, discount_type: str, discount_value: Decimal, line_no: int) -> Decimal:
    if not discount_type or discount_value == 0:
        return Decimal("0")
    if discount_type not in DISCOUNT_TYPES:
        raise ValidationError(
            f"Unknown discount type '{discount_type}' at line {line_no}",
            line=line_no,
            discount_type=discount_type,
        )
    if discount_value < 0:
        raise ValidationError(
            f"Negative discount at line {line_no}",
            line=line_no,
            discount_value=discount_value,
        )
    if discount_type == PERCENT:
        if discount_value > HUNDRED:
            raise ValidationError(
                f"Percent discount above 100 at line {line_no}",
                line=line_no,
                discount_value=discount_value,
            )
        return base * discount_value / HUNDRED
    # fixed amounts are capped at the line base
    return min(discount_value, base)


def build_line(line: LineInput, *, line_no: int = 1) -> BuiltLine:
    quantity = Decimal(line.quantity).quantize(THREEPLACES, rounding=ROUND_HALF_UP)
    if quantity <= 0:
        raise ValidationError(
            f"Quantity must be greater than zero at line {line_no}",
            line=line_no,
            quantity=quantity,
        )

    unit_price = _money(
        line.unit_price if line.unit_price is not None else line.product.sale_price
    )
    if unit_price < 0:
        raise ValidationError(
            f"Negative unit price at line {line_no}",
            line=line_no,
            unit_price=unit_price,
        )

    iva_rate = Decimal(line.product.iva_rate or 0)
    base = quantity * unit_price
    discount = _line_discount(
        base=base,
        discount_type=line.discount_type,
        discount_value=Decimal(line.discount_value or 0),
        line_no=line_no,
    )

    net_amount = _money(base - discount)
    iva_amount = _money(net_amount * iva_rate / HUNDRED)

    return BuiltLine(
        product=line.product,
        quantity=quantity,
        unit_price=unit_price,
        discount_type=line.discount_type if discount else "",
        discount_value=_money(line.discount_value or 0) if discount else ZERO,
        discount_amount=_money(discount),
        iva_rate=_money(iva_rate),
        net_amount=net_amount,
        iva_amount=iva_amount,
        line_total=net_amount + iva_amount,
        gross_amount=_money(base),
    )


def build_iva_breakdown(lines: list[BuiltLine]) -> list[IvaRow]:
    """Per-rate sums of the already rounded line amounts."""
    bases: dict[Decimal, Decimal] = {}
    taxes: dict[Decimal, Decimal] = {}
    for line in lines:
        bases[line.iva_rate] = bases.get(line.iva_rate, ZERO) + line.net_amount
        taxes[line.iva_rate] = taxes.get(line.iva_rate, ZERO) + line.iva_amount

    return [
        IvaRow(iva_rate=rate, base_amount=base, iva_amount=taxes[rate])
        for rate, base in sorted(bases.items())
    ]


def _header_discount(*, base: Decimal, discount_type: str, discount_value: Decimal) -> Decimal:
    if not discount_type or discount_value == 0:
        return ZERO
    if discount_type not in DISCOUNT_TYPES:
        raise ValidationError(
            f"Unknown discount type '{discount_type}'", discount_type=discount_type
        )
    if discount_value < 0:
        raise ValidationError("Negative sale discount", discount_value=discount_value)

    if discount_type == PERCENT:
        if discount_value > HUNDRED:
            raise ValidationError(
                "Percent discount above 100", discount_value=discount_value
            )
        return _money(base * discount_value / HUNDRED)

    amount = _money(discount_value)
    if amount > base:
        raise ValidationError(
            "Sale discount exceeds the discountable amount",
            discount=amount,
            discountable=base,
        )
    return amount


def build_sale(
    lines: list[LineInput],
    *,
    discount_type: str = "",
    discount_value=ZERO,
    iibb=ZERO,
    internal_tax=ZERO,
) -> SaleTotals:
    if not lines:
        raise ValidationError("A sale needs at least one line item")

    built = [build_line(line, line_no=idx + 1) for idx, line in enumerate(lines)]
    breakdown = build_iva_breakdown(built)

    subtotal_gross = sum((line.gross_amount for line in built), ZERO)
    subtotal_net = sum((row.base_amount for row in breakdown), ZERO)
    total_iva = sum((row.iva_amount for row in breakdown), ZERO)

    discount_type = (discount_type or "").strip().lower()
    discount_value = _decimal(discount_value, field_name="discount_value", default="0")
    discount = _header_discount(
        base=subtotal_net + total_iva,
        discount_type=discount_type,
        discount_value=discount_value,
    )

    iibb = _money(_decimal(iibb, field_name="iibb", default="0"))
    internal_tax = _money(_decimal(internal_tax, field_name="internal_tax", default="0"))
    if iibb < 0 or internal_tax < 0:
        raise ValidationError(
            "Manual taxes cannot be negative", iibb=iibb, internal_tax=internal_tax
        )

    total = subtotal_net + total_iva - discount + iibb + internal_tax

    warnings = [
        f"{line.product.name}: unit price is zero"
        for line in built
        if line.unit_price == 0
    ]

    return SaleTotals(
        lines=built,
        iva_breakdown=breakdown,
        subtotal_gross=subtotal_gross,
        items_discount=subtotal_gross - subtotal_net,
        subtotal_net=subtotal_net,
        total_iva=total_iva,
        discount_type=discount_type if discount else "",
        discount_value=_money(discount_value) if discount else ZERO,
        discount=discount,
        iibb=iibb,
        internal_tax=internal_tax,
        total=_money(total),
        warnings=warnings,
    )
