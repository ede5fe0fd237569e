# sales/tests/test_annulment.py

from decimal import Decimal

from django.test import TestCase

from cash.models import CashMovement
from cash.services.aggregates import lines_for_register, recompute
from cash.services.registers import close_register
from core.exceptions import (
    AlreadyAnnulledError,
    ConversionPreconditionError,
    NotFoundError,
    RegisterClosedError,
)
from core.references import SALE_ANNULMENT
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
from sales.models import Sale
from sales.services.annulment_service import annul_sale
from sales.services.sale_service import create_sale


class AnnulSaleTests(TestCase):
    """
    GUARANTEES:
    - annulment appends compensations; originals stay untouched
    - stock, cash and current account return to their pre-sale state
    - a sale is annulled at most once
    """

    def setUp(self):
        self.user = make_user()
        self.branch = make_branch()
        self.methods = make_payment_methods()
        self.types = make_receipt_types()
        self.product = make_product("SKU-A", sale_price="100.00", iva_rate="21.00")
        stock_up(self.product, self.branch, 10)
        self.register = open_cash_register(self.branch, self.user)

    def _sale(self, payments=None, **extra):
        return create_sale(
            branch=self.branch,
            receipt_type=self.types["invoice"],
            lines=[line(self.product, 2)],
            payments=payments
            or [pay(self.methods["cash"], "142.00"), pay(self.methods["card"], "100.00")],
            user=self.user,
            **extra,
        )

    # =====================================================
    # COMPENSATION
    # =====================================================

    def test_annulment_restores_stock_and_compensates_cash(self):
        sale = self._sale()
        self.register.refresh_from_db()
        before = self.register.expected_cash_balance

        annulled = annul_sale(sale=sale, user=self.user, reason="customer changed mind")

        self.assertEqual(annulled.status, Sale.STATUS_ANNULLED)
        self.assertEqual(annulled.annulment_reason, "customer changed mind")
        self.assertIsNotNone(annulled.annulled_at)
        self.assertEqual(current_stock(product=self.product, branch=self.branch), Decimal("10.000"))

        compensations = CashMovement.objects.filter(
            reference_kind=SALE_ANNULMENT, reference_id=str(sale.pk)
        )
        signed = sorted(m.signed_amount for m in compensations)
        self.assertEqual(signed, [Decimal("-142.00"), Decimal("-100.00")])

        self.register.refresh_from_db()
        self.assertEqual(before - self.register.expected_cash_balance, Decimal("142.00"))

    def test_original_movements_are_kept(self):
        sale = self._sale()

        annul_sale(sale=sale)

        self.assertEqual(
            StockMovement.objects.filter(
                movement_type=StockMovement.MovementType.SALE, reference_id=str(sale.pk)
            ).count(),
            1,
        )
        self.assertEqual(
            StockMovement.objects.filter(
                movement_type=StockMovement.MovementType.SALE_ANNULMENT,
                reference_kind=SALE_ANNULMENT,
            ).count(),
            1,
        )
        self.assertEqual(CashMovement.objects.count(), 4)

    def test_register_cache_matches_recompute_after_annulment(self):
        sale = self._sale()

        annul_sale(sale=sale)

        self.register.refresh_from_db()
        fresh = recompute(self.register.initial_amount, lines_for_register(self.register))
        self.assertEqual(self.register.expected_cash_balance, fresh.expected_cash_balance)
        self.assertEqual(self.register.payment_method_totals, fresh.totals_as_json())
        self.assertEqual(self.register.expected_cash_balance, Decimal("0.00"))

    def test_annul_by_primary_key(self):
        sale = self._sale()

        annulled = annul_sale(sale=sale.pk)

        self.assertEqual(annulled.status, Sale.STATUS_ANNULLED)

    # =====================================================
    # IDEMPOTENCY / PRECONDITIONS
    # =====================================================

    def test_second_annulment_is_rejected_without_double_stock(self):
        sale = self._sale()
        annul_sale(sale=sale)

        with self.assertRaises(AlreadyAnnulledError):
            annul_sale(sale=sale)

        self.assertEqual(current_stock(product=self.product, branch=self.branch), Decimal("10.000"))
        self.assertEqual(
            CashMovement.objects.filter(reference_kind=SALE_ANNULMENT).count(), 2
        )

    def test_budget_cannot_be_annulled(self):
        budget = create_sale(
            branch=self.branch,
            receipt_type=self.types["budget"],
            lines=[line(self.product, 1)],
        )

        with self.assertRaises(ConversionPreconditionError):
            annul_sale(sale=budget)

    def test_unknown_sale(self):
        with self.assertRaises(NotFoundError):
            annul_sale(sale="00000000-0000-0000-0000-000000000000")

    # =====================================================
    # REGISTER RESOLUTION
    # =====================================================

    def test_compensation_goes_to_open_register_when_original_is_closed(self):
        sale = self._sale()
        close_register(register=self.register, final_amount="142.00")
        replacement = open_cash_register(self.branch, self.user)

        annul_sale(sale=sale)

        compensations = CashMovement.objects.filter(reference_kind=SALE_ANNULMENT)
        self.assertEqual({m.cash_register_id for m in compensations}, {replacement.pk})
        replacement.refresh_from_db()
        self.assertEqual(replacement.expected_cash_balance, Decimal("-142.00"))

        self.register.refresh_from_db()
        self.assertEqual(self.register.expected_cash_balance, Decimal("142.00"))

    def test_no_open_register_aborts_annulment(self):
        sale = self._sale()
        close_register(register=self.register, final_amount="142.00")

        with self.assertRaises(RegisterClosedError):
            annul_sale(sale=sale)

        sale.refresh_from_db()
        self.assertEqual(sale.status, Sale.STATUS_ACTIVE)
        self.assertEqual(current_stock(product=self.product, branch=self.branch), Decimal("8.000"))

    # =====================================================
    # CURRENT ACCOUNT
    # =====================================================

    def test_current_account_movements_are_compensated(self):
        customer = make_customer()
        sale = self._sale(
            payments=[pay(self.methods["current_account"], "242.00")], customer=customer
        )
        account = ledger.get_or_open_account(customer=customer)
        self.assertEqual(ledger.get_balance(account), Decimal("242.00"))

        annul_sale(sale=sale)

        self.assertEqual(ledger.get_balance(account), Decimal("0.00"))
        compensation = CurrentAccountMovement.objects.get(reference_kind=SALE_ANNULMENT)
        self.assertEqual(compensation.amount, Decimal("-242.00"))
        self.assertEqual(compensation.metadata["original_movement_id"].count("-"), 4)
