# sales/tests/test_builder.py

import uuid
from decimal import Decimal

from django.test import SimpleTestCase, TestCase

from core.exceptions import NotFoundError, ValidationError
from core.testing import line, make_product
from products.models import Product
from sales.services.sale_builder import LineInput, build_line, build_sale, resolve_lines


def _product(price="100.00", rate="21.00", name="Widget"):
    return Product(sku=name.upper(), name=name, sale_price=Decimal(price), iva_rate=Decimal(rate))


class SaleBuilderTests(SimpleTestCase):
    """
    Pure maths: no database access.

    total = subtotal_net + total_iva - discount + iibb + internal_tax
    """

    def _assert_identity(self, totals):
        self.assertEqual(
            totals.subtotal_net + totals.total_iva - totals.discount + totals.iibb + totals.internal_tax,
            totals.total,
        )

    # =====================================================
    # LINES
    # =====================================================

    def test_two_units_at_hundred_with_general_vat(self):
        totals = build_sale([LineInput(product=_product(), quantity=Decimal("2"))])

        self.assertEqual(totals.subtotal_net, Decimal("200.00"))
        self.assertEqual(totals.total_iva, Decimal("42.00"))
        self.assertEqual(totals.total, Decimal("242.00"))
        self.assertEqual(len(totals.iva_breakdown), 1)
        self._assert_identity(totals)

    def test_percent_line_discount_rounds_once(self):
        line = build_line(
            LineInput(
                product=_product("33.33"),
                quantity=Decimal("3"),
                discount_type="percent",
                discount_value=Decimal("10"),
            )
        )

        self.assertEqual(line.net_amount, Decimal("89.99"))
        self.assertEqual(line.iva_amount, Decimal("18.90"))
        self.assertEqual(line.line_total, Decimal("108.89"))
        self.assertEqual(line.discount_amount, Decimal("10.00"))

    def test_fixed_line_discount_is_capped_at_base(self):
        line = build_line(
            LineInput(
                product=_product("10.00"),
                quantity=Decimal("1"),
                discount_type="amount",
                discount_value=Decimal("25"),
            )
        )

        self.assertEqual(line.net_amount, Decimal("0.00"))
        self.assertEqual(line.discount_amount, Decimal("10.00"))

    def test_explicit_unit_price_overrides_catalog(self):
        line = build_line(
            LineInput(product=_product("100.00"), quantity=Decimal("1"), unit_price=Decimal("80"))
        )

        self.assertEqual(line.unit_price, Decimal("80.00"))
        self.assertEqual(line.net_amount, Decimal("80.00"))

    def test_zero_quantity_is_rejected(self):
        with self.assertRaises(ValidationError):
            build_line(LineInput(product=_product(), quantity=Decimal("0")))

    def test_percent_discount_above_hundred_is_rejected(self):
        with self.assertRaises(ValidationError):
            build_line(
                LineInput(
                    product=_product(),
                    quantity=Decimal("1"),
                    discount_type="percent",
                    discount_value=Decimal("120"),
                )
            )

    # =====================================================
    # SALE HEADER
    # =====================================================

    def test_breakdown_groups_by_rate(self):
        totals = build_sale(
            [
                LineInput(product=_product("100.00", "21.00", "A"), quantity=Decimal("1")),
                LineInput(product=_product("50.00", "10.50", "B"), quantity=Decimal("2")),
                LineInput(product=_product("20.00", "21.00", "C"), quantity=Decimal("1")),
            ]
        )

        rows = {row.iva_rate: row for row in totals.iva_breakdown}
        self.assertEqual(rows[Decimal("21.00")].base_amount, Decimal("120.00"))
        self.assertEqual(rows[Decimal("21.00")].iva_amount, Decimal("25.20"))
        self.assertEqual(rows[Decimal("10.50")].base_amount, Decimal("100.00"))
        self.assertEqual(rows[Decimal("10.50")].iva_amount, Decimal("10.50"))
        self.assertEqual(totals.total, Decimal("255.70"))
        self._assert_identity(totals)

    def test_header_percent_discount_and_manual_taxes(self):
        totals = build_sale(
            [LineInput(product=_product(), quantity=Decimal("2"))],
            discount_type="percent",
            discount_value="10",
            iibb="3.00",
            internal_tax="1.50",
        )

        self.assertEqual(totals.discount, Decimal("24.20"))
        self.assertEqual(totals.total, Decimal("222.30"))
        self._assert_identity(totals)

    def test_header_fixed_discount_above_total_is_rejected(self):
        with self.assertRaises(ValidationError):
            build_sale(
                [LineInput(product=_product(), quantity=Decimal("1"))],
                discount_type="amount",
                discount_value="500",
            )

    def test_unknown_discount_type_is_rejected(self):
        with self.assertRaises(ValidationError):
            build_sale(
                [LineInput(product=_product(), quantity=Decimal("1"))],
                discount_type="bogus",
                discount_value="5",
            )

    def test_zero_price_line_warns(self):
        totals = build_sale([LineInput(product=_product("0.00"), quantity=Decimal("1"))])

        self.assertEqual(totals.total, Decimal("0.00"))
        self.assertEqual(len(totals.warnings), 1)

    def test_empty_sale_is_rejected(self):
        with self.assertRaises(ValidationError):
            build_sale([])

    def test_line_totals_add_up_to_header(self):
        totals = build_sale(
            [
                LineInput(product=_product("0.07", "21.00", name), quantity=Decimal("1"))
                for name in ("A", "B", "C")
            ]
        )

        self.assertEqual(
            sum((line.line_total for line in totals.lines), Decimal("0.00")),
            totals.subtotal_net + totals.total_iva,
        )
        self.assertEqual(totals.total_iva, Decimal("0.03"))
        self.assertEqual(totals.iva_breakdown[0].iva_amount, Decimal("0.03"))
        self.assertEqual(totals.total, Decimal("0.24"))
        self._assert_identity(totals)

    # =====================================================
    # REJECTED INPUT
    # =====================================================

    def test_negative_unit_price_is_rejected(self):
        with self.assertRaises(ValidationError):
            build_line(
                LineInput(product=_product(), quantity=Decimal("1"), unit_price=Decimal("-5"))
            )

    def test_negative_line_discount_is_rejected(self):
        with self.assertRaises(ValidationError):
            build_line(
                LineInput(
                    product=_product(),
                    quantity=Decimal("1"),
                    discount_type="amount",
                    discount_value=Decimal("-10"),
                )
            )

    def test_negative_manual_taxes_are_rejected(self):
        for taxes in ({"iibb": "-1.00"}, {"internal_tax": "-0.50"}):
            with self.subTest(**taxes), self.assertRaises(ValidationError):
                build_sale([LineInput(product=_product(), quantity=Decimal("1"))], **taxes)


class LineResolutionTests(TestCase):
    """
    resolve_lines() looks products up in the catalog:
    - unknown product -> NotFoundError
    - inactive product -> ValidationError
    """

    def setUp(self):
        self.product = make_product("SKU-R", sale_price="100.00")

    def test_catalog_product_is_resolved(self):
        lines = resolve_lines([line(self.product, 2)])

        self.assertEqual(lines[0].product, self.product)
        self.assertEqual(lines[0].quantity, Decimal("2"))
        self.assertIsNone(lines[0].unit_price)

    def test_unknown_product_is_not_found(self):
        with self.assertRaises(NotFoundError) as ctx:
            resolve_lines([{"product_id": str(uuid.uuid4()), "quantity": 1}])

        self.assertEqual(ctx.exception.details["line"], 1)

    def test_inactive_product_is_rejected(self):
        Product.objects.filter(pk=self.product.pk).update(is_active=False)

        with self.assertRaises(ValidationError) as ctx:
            resolve_lines([line(self.product, 1)])

        self.assertEqual(ctx.exception.details["product_id"], str(self.product.pk))
        self.assertNotIsInstance(ctx.exception, NotFoundError)
