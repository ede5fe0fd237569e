# core/tests/test_api.py

from decimal import Decimal

from django.test import SimpleTestCase, TestCase
from rest_framework.test import APIClient

from core.api import http_status_for, ledger_error_response
from core.exceptions import (
    AlreadyAnnulledError,
    ConversionPreconditionError,
    CreditLimitExceededError,
    ExternalAuthorizationError,
    InsufficientStockError,
    NotFoundError,
    PaymentMismatchError,
    RegisterClosedError,
    ValidationError,
)
from core.references import (
    ACCOUNT_PAYMENT,
    CASH_REGISTER,
    MANUAL,
    REFERENCE_KIND_CHOICES,
    SALE,
    SALE_ANNULMENT,
    Reference,
    reference_of,
)
from core.testing import make_branch, open_cash_register


class ErrorMappingTests(SimpleTestCase):
    def test_status_per_error_kind(self):
        cases = [
            (ValidationError("bad"), 400),
            (CreditLimitExceededError("limit"), 400),
            (NotFoundError("missing"), 404),
            (PaymentMismatchError("mismatch"), 422),
            (InsufficientStockError("short"), 409),
            (RegisterClosedError("closed"), 409),
            (AlreadyAnnulledError("again"), 409),
            (ConversionPreconditionError("nope"), 409),
            (ExternalAuthorizationError("down"), 502),
        ]
        for exc, expected in cases:
            with self.subTest(kind=exc.kind):
                self.assertEqual(http_status_for(exc), expected)

    def test_error_body_carries_offending_values(self):
        exc = PaymentMismatchError(
            "Payments do not match",
            expected=Decimal("242.00"),
            received=Decimal("240.00"),
            payment=2,
        )

        response = ledger_error_response(exc)

        self.assertEqual(
            response.data,
            {
                "kind": "payment_mismatch",
                "message": "Payments do not match",
                "expected": "242.00",
                "received": "240.00",
                "payment": 2,
            },
        )
        self.assertEqual(exc.details["expected"], Decimal("242.00"))


class ReferenceTests(SimpleTestCase):
    def test_unknown_kind_is_rejected(self):
        with self.assertRaises(ValidationError):
            Reference(kind="invoice_of_doom", id="1")

    def test_as_fields(self):
        self.assertEqual(
            Reference(kind=SALE, id="abc").as_fields(),
            {"reference_kind": "sale", "reference_id": "abc"},
        )

    def test_only_posted_document_kinds_are_declared(self):
        self.assertEqual(
            {kind for kind, _label in REFERENCE_KIND_CHOICES},
            {SALE, SALE_ANNULMENT, ACCOUNT_PAYMENT, CASH_REGISTER, MANUAL},
        )
        # a converted budget is traced through the new sale's own "sale" rows
        with self.assertRaises(ValidationError):
            Reference(kind="budget_conversion", id="1")


class HealthCheckTests(TestCase):
    def test_health_is_public(self):
        response = APIClient().get("/api/health/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["db"], "ok")
        self.assertEqual(response.data["pending_authorizations"], 0)


class ReferenceResolutionTests(TestCase):
    def setUp(self):
        self.register = open_cash_register(make_branch())

    def test_resolves_to_the_referenced_row(self):
        reference = Reference.to(CASH_REGISTER, self.register)

        self.assertEqual(reference.resolve(), self.register)

    def test_missing_row_is_not_found(self):
        reference = Reference(kind=CASH_REGISTER, id="00000000-0000-0000-0000-000000000000")

        with self.assertRaises(NotFoundError):
            reference.resolve()

    def test_manual_reference_resolves_to_nothing(self):
        self.assertIsNone(Reference(kind=MANUAL, id="count-7").resolve())

    def test_reference_of_row_without_kind(self):
        row = type("Row", (), {"reference_kind": "", "reference_id": ""})()

        self.assertIsNone(reference_of(row))
