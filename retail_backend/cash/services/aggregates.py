# cash/services/aggregates.py

"""
REGISTER AGGREGATES (PURE)

expected_cash_balance and payment_method_totals are derived from the
register's movements and nothing else:

- movements with affects_balance=False are ignored
- expected_cash_balance = initial_amount + signed amounts of movements whose
  payment method is physical cash (or that carry no method: manual drawer
  movements)
- payment_method_totals groups signed amounts by payment method name
  ("Undefined" when the movement has no method)

No database writes here; cash.services.cash_ledger persists the result.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

TWOPLACES = Decimal("0.01")
UNDEFINED_METHOD = "Undefined"


def _money(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class MovementLine:
    signed_amount: Decimal
    method_name: str | None = None
    is_cash: bool = True
    affects_balance: bool = True


@dataclass(frozen=True)
class RegisterAggregates:
    expected_cash_balance: Decimal
    payment_method_totals: dict = field(default_factory=dict)

    def totals_as_json(self) -> dict:
        return {name: str(amount) for name, amount in self.payment_method_totals.items()}


def recompute(initial_amount, movements: Iterable[MovementLine]) -> RegisterAggregates:
    expected = _money(initial_amount)
    totals: dict[str, Decimal] = {}

    for line in movements:
        if not line.affects_balance:
            continue

        amount = _money(line.signed_amount)
        name = line.method_name or UNDEFINED_METHOD
        totals[name] = totals.get(name, Decimal("0.00")) + amount

        if line.method_name is None or line.is_cash:
            expected += amount

    return RegisterAggregates(
        expected_cash_balance=_money(expected),
        payment_method_totals={k: _money(v) for k, v in sorted(totals.items())},
    )


def lines_for_register(register) -> list[MovementLine]:
    rows = register.movements.select_related("movement_type", "payment_method")
    return [
        MovementLine(
            signed_amount=row.signed_amount,
            method_name=row.payment_method.name if row.payment_method_id else None,
            is_cash=bool(row.payment_method.is_cash) if row.payment_method_id else True,
            affects_balance=row.affects_balance,
        )
        for row in rows
    ]


def cash_difference(*, final_amount, expected_cash_balance) -> Decimal:
    return _money(_money(final_amount) - _money(expected_cash_balance))
