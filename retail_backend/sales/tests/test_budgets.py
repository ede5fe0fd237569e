# sales/tests/test_budgets.py

from decimal import Decimal

from django.test import TestCase, override_settings

from core.exceptions import ConversionPreconditionError
from core.testing import (
    line,
    make_branch,
    make_payment_methods,
    make_product,
    make_receipt_types,
    make_user,
    open_cash_register,
    stock_up,
)
from products.services.stock_ledger import current_stock
from sales.models import Sale
from sales.services.budget_conversion import cancel_budget, convert_budget
from sales.services.sale_service import create_sale


class BudgetTestMixin:
    def setUp(self):
        self.user = make_user()
        self.branch = make_branch()
        self.methods = make_payment_methods()
        self.types = make_receipt_types()
        self.product = make_product("SKU-A", sale_price="100.00", iva_rate="21.00")
        stock_up(self.product, self.branch, 10)
        self.register = open_cash_register(self.branch, self.user)

    def _budget(self, product=None, quantity=2):
        return create_sale(
            branch=self.branch,
            receipt_type=self.types["budget"],
            lines=[line(product or self.product, quantity)],
            user=self.user,
        )

    def _convert(self, budget, **extra):
        params = {
            "budget": budget,
            "receipt_type": self.types["invoice"],
            "payment_method": self.methods["cash"],
            "user": self.user,
        }
        params.update(extra)
        return convert_budget(**params)


class ConvertBudgetTests(BudgetTestMixin, TestCase):
    """
    GUARANTEES:
    - conversion runs the full sale pipeline and links both documents
    - a budget converts at most once
    - a zero-total budget never converts
    """

    def test_conversion_creates_linked_active_sale(self):
        budget = self._budget()

        sale = self._convert(budget)

        self.assertEqual(sale.status, Sale.STATUS_ACTIVE)
        self.assertEqual(sale.total, Decimal("242.00"))
        self.assertEqual(sale.payment_status, Sale.PAYMENT_PAID)
        self.assertEqual(sale.converted_from_budget_id, budget.pk)

        budget.refresh_from_db()
        self.assertEqual(budget.converted_to_sale_id, sale.pk)
        self.assertIsNotNone(budget.converted_at)
        self.assertEqual(current_stock(product=self.product, branch=self.branch), Decimal("8.000"))

        self.register.refresh_from_db()
        self.assertEqual(self.register.expected_cash_balance, Decimal("242.00"))

    def test_conversion_reprices_from_catalog(self):
        budget = self._budget()
        self.product.sale_price = Decimal("150.00")
        self.product.save()

        sale = self._convert(budget)

        self.assertEqual(sale.subtotal_net, Decimal("300.00"))
        self.assertEqual(sale.total, Decimal("363.00"))

    @override_settings(BUDGET_CONVERSION_REPRICE=False)
    def test_conversion_keeps_quoted_price(self):
        budget = self._budget()
        self.product.sale_price = Decimal("150.00")
        self.product.save()

        sale = self._convert(budget)

        self.assertEqual(sale.total, Decimal("242.00"))

    def test_zero_total_budget_cannot_convert(self):
        freebie = make_product("SKU-FREE", sale_price="0.00", iva_rate="21.00")
        budget = self._budget(product=freebie, quantity=1)
        self.assertEqual(budget.total, Decimal("0.00"))

        with self.assertRaises(ConversionPreconditionError):
            self._convert(budget)

        self.assertFalse(Sale.objects.filter(status=Sale.STATUS_ACTIVE).exists())

    def test_second_conversion_is_rejected(self):
        budget = self._budget()
        self._convert(budget)

        with self.assertRaises(ConversionPreconditionError):
            self._convert(budget)

        self.assertEqual(Sale.objects.filter(status=Sale.STATUS_ACTIVE).count(), 1)

    def test_target_receipt_type_must_not_be_a_budget(self):
        budget = self._budget()

        with self.assertRaises(ConversionPreconditionError):
            self._convert(budget, receipt_type=self.types["budget"])

    def test_active_sale_is_not_a_budget(self):
        budget = self._budget()
        sale = self._convert(budget)

        with self.assertRaises(ConversionPreconditionError):
            self._convert(sale)


class CancelBudgetTests(BudgetTestMixin, TestCase):
    def test_cancel_budget(self):
        budget = self._budget()

        cancelled = cancel_budget(budget=budget, user=self.user, reason="expired quote")

        self.assertEqual(cancelled.status, Sale.STATUS_CANCELLED)
        self.assertIn("expired quote", cancelled.notes)

    def test_cancelled_budget_cannot_be_cancelled_or_converted(self):
        budget = self._budget()
        cancel_budget(budget=budget)

        with self.assertRaises(ConversionPreconditionError):
            cancel_budget(budget=budget)
        with self.assertRaises(ConversionPreconditionError):
            self._convert(budget)
