# cash/tests/test_aggregates.py

from decimal import Decimal

from django.test import SimpleTestCase

from cash.services.aggregates import MovementLine, cash_difference, recompute


class RecomputeTests(SimpleTestCase):
    """
    recompute() is pure: same movements in, same aggregates out.
    """

    def test_only_cash_and_unassigned_movements_reach_expected_balance(self):
        lines = [
            MovementLine(Decimal("142.00"), "Cash", is_cash=True),
            MovementLine(Decimal("100.00"), "Card", is_cash=False),
            MovementLine(Decimal("-20.00"), None),
        ]

        result = recompute(Decimal("50.00"), lines)

        self.assertEqual(result.expected_cash_balance, Decimal("172.00"))
        self.assertEqual(
            result.payment_method_totals,
            {
                "Card": Decimal("100.00"),
                "Cash": Decimal("142.00"),
                "Undefined": Decimal("-20.00"),
            },
        )

    def test_movements_outside_balance_are_ignored(self):
        lines = [
            MovementLine(Decimal("10.00"), "Cash", is_cash=True),
            MovementLine(Decimal("99.00"), "Cash", is_cash=True, affects_balance=False),
        ]

        result = recompute(0, lines)

        self.assertEqual(result.expected_cash_balance, Decimal("10.00"))
        self.assertEqual(result.totals_as_json(), {"Cash": "10.00"})

    def test_compensation_nets_to_zero(self):
        lines = [
            MovementLine(Decimal("142.00"), "Cash", is_cash=True),
            MovementLine(Decimal("-142.00"), "Cash", is_cash=True),
        ]

        self.assertEqual(recompute(0, lines).expected_cash_balance, Decimal("0.00"))

    def test_cash_difference(self):
        self.assertEqual(
            cash_difference(final_amount="95", expected_cash_balance=Decimal("100.00")),
            Decimal("-5.00"),
        )
