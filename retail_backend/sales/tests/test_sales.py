# sales/tests/test_sales.py

from decimal import Decimal

from django.test import TestCase

from cash.models import CashMovement
from cash.services.registers import close_register
from core.exceptions import (
    CreditLimitExceededError,
    PaymentMismatchError,
    RegisterClosedError,
    ValidationError,
)
from core.references import SALE
from core.testing import (
    line,
    make_branch,
    make_customer,
    make_payment_methods,
    make_product,
    make_receipt_types,
    make_user,
    open_cash_register,
    pay,
    stock_up,
)
from current_accounts.models import CurrentAccountMovement
from current_accounts.services import ledger
from products.models import StockMovement
from products.services.stock_ledger import current_stock
from sales.models import Sale, SalePayment
from sales.services.payment_allocator import settle_sale
from sales.services.sale_service import create_sale


class SaleFixtureMixin:
    def setUp(self):
        self.user = make_user()
        self.branch = make_branch()
        self.methods = make_payment_methods()
        self.types = make_receipt_types()
        self.product = make_product("SKU-A", sale_price="100.00", iva_rate="21.00")
        stock_up(self.product, self.branch, 10)
        self.register = open_cash_register(self.branch, self.user)

    def _sale(self, payments, **extra):
        params = {
            "branch": self.branch,
            "receipt_type": self.types["invoice"],
            "lines": [line(self.product, 2)],
            "payments": payments,
            "user": self.user,
        }
        params.update(extra)
        return create_sale(**params)


class CreateSaleTests(SaleFixtureMixin, TestCase):
    """
    GUARANTEES:
    - one unit of work: stock, cash and current account postings
    - totals computed by the builder and frozen on the sale
    - closed register aborts everything
    """

    # =====================================================
    # HAPPY PATH (2 @ 100, 21% VAT, cash 142 + card 100)
    # =====================================================

    def test_split_payment_sale_is_paid(self):
        sale = self._sale([pay(self.methods["cash"], "142.00"), pay(self.methods["card"], "100.00")])

        self.assertEqual(sale.status, Sale.STATUS_ACTIVE)
        self.assertEqual(sale.subtotal_net, Decimal("200.00"))
        self.assertEqual(sale.total_iva, Decimal("42.00"))
        self.assertEqual(sale.total, Decimal("242.00"))
        self.assertEqual(sale.payment_status, Sale.PAYMENT_PAID)
        self.assertEqual(sale.paid_amount, Decimal("242.00"))
        self.assertEqual(sale.receipt_number, "00000001")
        self.assertEqual(sale.iva_breakdown.count(), 1)
        self.assertEqual(SalePayment.objects.filter(sale=sale).count(), 2)

    def test_sale_decrements_stock_with_sale_reference(self):
        sale = self._sale([pay(self.methods["cash"], "242.00")])

        self.assertEqual(current_stock(product=self.product, branch=self.branch), Decimal("8.000"))
        movement = StockMovement.objects.get(movement_type=StockMovement.MovementType.SALE)
        self.assertEqual(movement.reference_kind, SALE)
        self.assertEqual(movement.reference_id, str(sale.pk))
        self.assertEqual(movement.quantity, Decimal("-2.000"))

    def test_one_cash_movement_per_cash_affecting_payment(self):
        sale = self._sale([pay(self.methods["cash"], "142.00"), pay(self.methods["card"], "100.00")])

        movements = CashMovement.objects.filter(reference_kind=SALE, reference_id=str(sale.pk))
        self.assertEqual(movements.count(), 2)
        self.register.refresh_from_db()
        self.assertEqual(self.register.expected_cash_balance, Decimal("142.00"))
        self.assertEqual(
            self.register.payment_method_totals, {"Card": "100.00", "Cash": "142.00"}
        )

    def test_receipt_numbers_are_sequential_per_branch(self):
        first = self._sale([pay(self.methods["cash"], "242.00")])
        second = self._sale([pay(self.methods["cash"], "242.00")])

        self.assertEqual(first.receipt_number, "00000001")
        self.assertEqual(second.receipt_number, "00000002")

    def test_small_payment_difference_is_absorbed_by_last_line(self):
        sale = self._sale([pay(self.methods["cash"], "142.00"), pay(self.methods["card"], "98.00")])

        card = SalePayment.objects.get(sale=sale, payment_method=self.methods["card"])
        self.assertEqual(card.amount, Decimal("100.00"))
        self.assertEqual(sale.payment_status, Sale.PAYMENT_PAID)

    # =====================================================
    # FAILURES ROLL BACK EVERYTHING
    # =====================================================

    def test_closed_register_aborts_the_whole_sale(self):
        close_register(register=self.register, final_amount="0")

        with self.assertRaises(RegisterClosedError):
            self._sale([pay(self.methods["cash"], "242.00")])

        self.assertEqual(Sale.objects.count(), 0)
        self.assertEqual(current_stock(product=self.product, branch=self.branch), Decimal("10.000"))
        self.assertFalse(
            StockMovement.objects.filter(movement_type=StockMovement.MovementType.SALE).exists()
        )

    def test_explicit_closed_register_is_rejected(self):
        closed = close_register(register=self.register, final_amount="0")
        open_cash_register(self.branch, self.user)

        with self.assertRaises(RegisterClosedError):
            self._sale([pay(self.methods["cash"], "242.00")], cash_register=closed)

    def test_register_of_another_branch_is_rejected(self):
        other_branch = make_branch("North")
        other_register = open_cash_register(other_branch, self.user)

        with self.assertRaises(ValidationError) as ctx:
            self._sale([pay(self.methods["cash"], "242.00")], cash_register=other_register)

        self.assertEqual(ctx.exception.details["register_id"], other_register.pk)
        self.assertEqual(ctx.exception.details["branch_id"], self.branch.pk)
        self.assertEqual(Sale.objects.count(), 0)
        self.assertFalse(CashMovement.objects.filter(cash_register=other_register).exists())
        self.assertEqual(current_stock(product=self.product, branch=self.branch), Decimal("10.000"))

    def test_payment_mismatch_leaves_no_trace(self):
        with self.assertRaises(PaymentMismatchError):
            self._sale([pay(self.methods["cash"], "5000.00")])

        self.assertEqual(Sale.objects.count(), 0)
        self.assertEqual(CashMovement.objects.count(), 0)

    # =====================================================
    # CUSTOMER / CURRENT ACCOUNT
    # =====================================================

    def test_customer_sale_posts_debit_and_settlement_credit(self):
        customer = make_customer()

        sale = self._sale([pay(self.methods["cash"], "242.00")], customer=customer)

        account = ledger.get_or_open_account(customer=customer)
        amounts = sorted(
            CurrentAccountMovement.objects.filter(
                reference_kind=SALE, reference_id=str(sale.pk)
            ).values_list("amount", flat=True)
        )
        self.assertEqual(amounts, [Decimal("-242.00"), Decimal("242.00")])
        self.assertEqual(ledger.get_balance(account), Decimal("0.00"))

    def test_deferred_payment_leaves_customer_owing(self):
        customer = make_customer()

        sale = self._sale([pay(self.methods["current_account"], "242.00")], customer=customer)

        self.assertEqual(sale.payment_status, Sale.PAYMENT_PENDING)
        self.assertEqual(CashMovement.objects.count(), 0)
        account = ledger.get_or_open_account(customer=customer)
        self.assertEqual(ledger.get_balance(account), Decimal("242.00"))

    def test_deferred_payment_over_credit_limit_is_rejected(self):
        customer = make_customer()
        account = ledger.get_or_open_account(customer=customer)
        account.credit_limit = Decimal("100.00")
        account.save(update_fields=["credit_limit"])

        with self.assertRaises(CreditLimitExceededError):
            self._sale([pay(self.methods["current_account"], "242.00")], customer=customer)

        self.assertEqual(Sale.objects.count(), 0)
        self.assertEqual(current_stock(product=self.product, branch=self.branch), Decimal("10.000"))

    def test_store_credit_is_consumed(self):
        customer = make_customer()
        account = ledger.get_or_open_account(customer=customer)
        ledger.process_payment(
            account=account,
            amount="42.00",
            payment_method=self.methods["cash"],
            register=self.register,
        )

        sale = self._sale(
            [pay(self.methods["cash"], "200.00")], customer=customer, store_credit="42.00"
        )

        self.assertEqual(sale.store_credit_applied, Decimal("42.00"))
        self.assertEqual(sale.payment_status, Sale.PAYMENT_PAID)
        self.assertEqual(ledger.get_balance(account), Decimal("0.00"))

    def test_mixed_deferred_payment_is_partial_and_settle_is_stable(self):
        customer = make_customer()

        sale = self._sale(
            [pay(self.methods["current_account"], "142.00"), pay(self.methods["cash"], "100.00")],
            customer=customer,
        )

        self.assertEqual(sale.payment_status, Sale.PAYMENT_PARTIAL)
        self.assertEqual(sale.paid_amount, Decimal("100.00"))

        settled = settle_sale(sale)
        self.assertEqual(settled.payment_status, Sale.PAYMENT_PARTIAL)
        self.assertEqual(settled.paid_amount, Decimal("100.00"))

    # =====================================================
    # IMMUTABILITY
    # =====================================================

    def test_active_sale_totals_cannot_be_edited(self):
        sale = self._sale([pay(self.methods["cash"], "242.00")])

        sale.total = Decimal("1.00")
        with self.assertRaises(ValueError):
            sale.save()

    def test_sales_are_never_deleted(self):
        sale = self._sale([pay(self.methods["cash"], "242.00")])

        with self.assertRaises(ValueError):
            sale.delete()


class BudgetCreationTests(SaleFixtureMixin, TestCase):
    def test_budget_is_a_draft_without_side_effects(self):
        budget = self._sale([], receipt_type=self.types["budget"])

        self.assertEqual(budget.status, Sale.STATUS_DRAFT)
        self.assertEqual(budget.numbering_scope, "budget:016")
        self.assertEqual(budget.receipt_number, "00000001")
        self.assertEqual(budget.total, Decimal("242.00"))
        self.assertEqual(current_stock(product=self.product, branch=self.branch), Decimal("10.000"))
        self.assertEqual(CashMovement.objects.count(), 0)
        self.assertEqual(budget.payments.count(), 0)

    def test_budgets_do_not_consume_sale_numbers(self):
        self._sale([], receipt_type=self.types["budget"])
        sale = self._sale([pay(self.methods["cash"], "242.00")])

        self.assertEqual(sale.receipt_number, "00000001")

    def test_budget_needs_no_open_register(self):
        close_register(register=self.register, final_amount="0")

        budget = self._sale([], receipt_type=self.types["budget"])

        self.assertEqual(budget.status, Sale.STATUS_DRAFT)
