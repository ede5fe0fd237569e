# products/tests/test_stock.py

from decimal import Decimal

from django.core.exceptions import ValidationError as DjangoValidationError
from django.test import TestCase, override_settings

from core.exceptions import InsufficientStockError, ValidationError
from core.references import SALE, Reference
from core.testing import make_branch, make_product, make_user
from products.models import Stock, StockMovement
from products.services import stock_ledger


class StockLedgerTests(TestCase):
    """
    Stock ledger tests.

    GUARANTEES:
    - current_stock only changes together with a StockMovement
    - balance_after snapshots the running level
    - negative stock follows STOCK_ALLOW_NEGATIVE
    - movements are append-only
    """

    def setUp(self):
        self.user = make_user()
        self.branch = make_branch()
        self.product = make_product("SKU-STOCK")

    # =====================================================
    # INCREASE / DECREASE
    # =====================================================

    def test_increase_creates_stock_row_and_movement(self):
        change = stock_ledger.increase(
            product=self.product, branch=self.branch, quantity=10, user=self.user
        )

        self.assertEqual(change.stock.current_stock, Decimal("10.000"))
        self.assertEqual(change.movement.quantity, Decimal("10.000"))
        self.assertEqual(change.movement.balance_after, Decimal("10.000"))
        self.assertEqual(change.movement.movement_type, StockMovement.MovementType.PURCHASE)

    def test_decrease_records_signed_movement(self):
        stock_ledger.increase(product=self.product, branch=self.branch, quantity=5)

        change = stock_ledger.decrease(
            product=self.product,
            branch=self.branch,
            quantity=2,
            reference=Reference(kind=SALE, id="abc"),
        )

        self.assertEqual(change.stock.current_stock, Decimal("3.000"))
        self.assertEqual(change.movement.quantity, Decimal("-2.000"))
        self.assertEqual(change.movement.reference_kind, SALE)
        self.assertEqual(change.movement.reference_id, "abc")

    def test_stock_is_the_sum_of_movements(self):
        stock_ledger.increase(product=self.product, branch=self.branch, quantity=7)
        stock_ledger.decrease(
            product=self.product,
            branch=self.branch,
            quantity=3,
            reference=Reference(kind=SALE, id="s1"),
        )
        stock_ledger.increase(product=self.product, branch=self.branch, quantity="1.5")

        total = sum(
            StockMovement.objects.filter(product=self.product, branch=self.branch)
            .values_list("quantity", flat=True)
        )
        self.assertEqual(
            stock_ledger.current_stock(product=self.product, branch=self.branch),
            total,
        )

    def test_non_positive_quantity_is_rejected(self):
        with self.assertRaises(ValidationError):
            stock_ledger.increase(product=self.product, branch=self.branch, quantity=0)

    # =====================================================
    # NEGATIVE STOCK POLICY
    # =====================================================

    def test_negative_stock_allowed_by_default(self):
        change = stock_ledger.decrease(
            product=self.product,
            branch=self.branch,
            quantity=4,
            reference=Reference(kind=SALE, id="s2"),
        )

        self.assertEqual(change.stock.current_stock, Decimal("-4.000"))

    @override_settings(STOCK_ALLOW_NEGATIVE=False)
    def test_negative_stock_blocked_when_disabled(self):
        stock_ledger.increase(product=self.product, branch=self.branch, quantity=1)

        with self.assertRaises(InsufficientStockError) as ctx:
            stock_ledger.decrease(
                product=self.product,
                branch=self.branch,
                quantity=2,
                reference=Reference(kind=SALE, id="s3"),
            )

        self.assertEqual(ctx.exception.details["available"], Decimal("1.000"))
        self.assertEqual(
            stock_ledger.current_stock(product=self.product, branch=self.branch),
            Decimal("1.000"),
        )

    # =====================================================
    # PHYSICAL COUNT
    # =====================================================

    def test_set_stock_level_posts_one_adjustment_for_the_difference(self):
        stock_ledger.increase(product=self.product, branch=self.branch, quantity=10)

        change = stock_ledger.set_stock_level(
            product=self.product, branch=self.branch, counted_quantity=8, user=self.user
        )

        self.assertEqual(change.movement.movement_type, StockMovement.MovementType.ADJUSTMENT)
        self.assertEqual(change.movement.quantity, Decimal("-2.000"))
        self.assertEqual(change.stock.current_stock, Decimal("8.000"))

    def test_set_stock_level_without_change_posts_nothing(self):
        stock_ledger.increase(product=self.product, branch=self.branch, quantity=3)

        self.assertIsNone(
            stock_ledger.set_stock_level(
                product=self.product, branch=self.branch, counted_quantity=3
            )
        )
        self.assertEqual(StockMovement.objects.count(), 1)

    # =====================================================
    # IMMUTABILITY
    # =====================================================

    def test_movements_cannot_be_edited_or_deleted(self):
        movement = stock_ledger.increase(
            product=self.product, branch=self.branch, quantity=1
        ).movement

        movement.notes = "tampered"
        with self.assertRaises(DjangoValidationError):
            movement.save()
        with self.assertRaises(DjangoValidationError):
            movement.delete()

    def test_stock_rows_are_unique_per_product_and_branch(self):
        stock_ledger.increase(product=self.product, branch=self.branch, quantity=1)
        stock_ledger.increase(product=self.product, branch=self.branch, quantity=1)

        self.assertEqual(
            Stock.objects.filter(product=self.product, branch=self.branch).count(), 1
        )
