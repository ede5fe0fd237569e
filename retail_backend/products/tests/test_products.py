# products/tests/test_products.py

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import IntegrityError
from django.test import TestCase

from products.models import Product


class ProductModelTests(TestCase):
    """
    Product model tests.

    GUARANTEES:
    - SKU uniqueness is enforced
    - Pricing and VAT rates are sane
    """

    def test_product_creation_defaults_to_general_vat_rate(self):
        product = Product.objects.create(
            name="Hammer",
            sku="HAM-1",
            sale_price=Decimal("250.00"),
        )

        self.assertEqual(product.iva_rate, Decimal("21.00"))
        self.assertEqual(product.cost_price, Decimal("0.00"))
        self.assertTrue(product.is_active)

    def test_sku_must_be_unique(self):
        Product.objects.create(name="Nails", sku="NAIL-1", sale_price=Decimal("2.00"))

        with self.assertRaises(IntegrityError):
            Product.objects.create(
                name="Nails duplicate", sku="NAIL-1", sale_price=Decimal("3.00")
            )

    def test_negative_sale_price_is_rejected_by_clean(self):
        product = Product(name="Glue", sku="GLU-1", sale_price=Decimal("-1.00"))

        with self.assertRaises(ValidationError):
            product.full_clean()

    def test_iva_rate_above_hundred_is_rejected_by_clean(self):
        product = Product(
            name="Tape", sku="TAP-1", sale_price=Decimal("1.00"), iva_rate=Decimal("150")
        )

        with self.assertRaises(ValidationError):
            product.full_clean()

    def test_product_string_representation(self):
        product = Product.objects.create(
            name="Screwdriver", sku="SCR-1", sale_price=Decimal("500.00")
        )

        self.assertIn("Screwdriver", str(product))
        self.assertIn("SCR-1", str(product))

