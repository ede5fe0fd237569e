# sales/tests/test_authorization.py

import datetime

from django.test import TestCase, override_settings

from core.exceptions import ConversionPreconditionError, ExternalAuthorizationError
from core.testing import (
    line,
    make_branch,
    make_payment_methods,
    make_product,
    make_receipt_types,
    make_user,
    open_cash_register,
    pay,
    stock_up,
)
from sales.models import Sale
from sales.services.annulment_service import annul_sale
from sales.services.authorization import (
    AuthorizationResult,
    InvoiceAuthorizer,
    OfflineAuthorizer,
    authorize_sale,
)
from sales.services.sale_service import create_sale


class FixedAuthorizer(InvoiceAuthorizer):
    def authorize(self, sale):
        return AuthorizationResult(code="74123456789012", expires_at=datetime.date(2030, 1, 10))


class RejectingAuthorizer(InvoiceAuthorizer):
    def authorize(self, sale):
        raise RuntimeError("tax authority unavailable")


class AuthorizeSaleTests(TestCase):
    """
    GUARANTEES:
    - authorization happens after the sale is committed
    - failures are recorded on the sale and never revert it
    """

    def setUp(self):
        self.user = make_user()
        self.branch = make_branch()
        self.methods = make_payment_methods()
        self.types = make_receipt_types()
        self.product = make_product("SKU-A", sale_price="100.00", iva_rate="21.00")
        stock_up(self.product, self.branch, 10)
        open_cash_register(self.branch, self.user)

    def _sale(self, receipt_type="invoice_auth"):
        return create_sale(
            branch=self.branch,
            receipt_type=self.types[receipt_type],
            lines=[line(self.product, 2)],
            payments=[pay(self.methods["cash"], "242.00")],
            user=self.user,
        )

    def test_new_sale_awaits_authorization(self):
        sale = self._sale()

        self.assertEqual(sale.authorization_status, Sale.AUTH_PENDING)

    def test_receipt_type_without_authorization(self):
        sale = self._sale(receipt_type="invoice")

        result = authorize_sale(sale=sale, authorizer=RejectingAuthorizer())

        self.assertEqual(result.authorization_status, Sale.AUTH_NOT_REQUIRED)

    def test_successful_authorization_stores_code(self):
        sale = self._sale()

        authorize_sale(sale=sale, authorizer=FixedAuthorizer())

        sale.refresh_from_db()
        self.assertEqual(sale.authorization_status, Sale.AUTH_AUTHORIZED)
        self.assertEqual(sale.authorization_code, "74123456789012")
        self.assertEqual(sale.authorization_expires_at, datetime.date(2030, 1, 10))

    def test_already_authorized_sale_is_left_alone(self):
        sale = self._sale()
        authorize_sale(sale=sale, authorizer=FixedAuthorizer())

        authorize_sale(sale=sale, authorizer=RejectingAuthorizer())

        sale.refresh_from_db()
        self.assertEqual(sale.authorization_status, Sale.AUTH_AUTHORIZED)

    def test_offline_authorizer_issues_a_code(self):
        sale = self._sale()

        authorize_sale(sale=sale, authorizer=OfflineAuthorizer())

        sale.refresh_from_db()
        self.assertEqual(len(sale.authorization_code), 14)
        self.assertIsNotNone(sale.authorization_expires_at)

    def test_failure_is_recorded_and_sale_survives(self):
        sale = self._sale()

        with self.assertRaises(ExternalAuthorizationError):
            authorize_sale(sale=sale, authorizer=RejectingAuthorizer())

        sale.refresh_from_db()
        self.assertEqual(sale.status, Sale.STATUS_ACTIVE)
        self.assertEqual(sale.authorization_status, Sale.AUTH_FAILED)
        self.assertIn("tax authority unavailable", sale.authorization_error)

    @override_settings(INVOICE_AUTHORIZER="")
    def test_missing_authorizer_fails(self):
        sale = self._sale()

        with self.assertRaises(ExternalAuthorizationError):
            authorize_sale(sale=sale)

        sale.refresh_from_db()
        self.assertEqual(sale.authorization_status, Sale.AUTH_FAILED)

    @override_settings(INVOICE_AUTHORIZER="sales.tests.test_authorization.FixedAuthorizer")
    def test_authorizer_from_settings(self):
        sale = self._sale()

        authorize_sale(sale=sale)

        self.assertEqual(sale.authorization_code, "74123456789012")

    def test_annulled_sale_cannot_be_authorized(self):
        sale = annul_sale(sale=self._sale())

        with self.assertRaises(ConversionPreconditionError):
            authorize_sale(sale=sale, authorizer=FixedAuthorizer())
