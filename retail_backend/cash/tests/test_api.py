# cash/tests/test_api.py

from decimal import Decimal

from django.test import TestCase
from rest_framework.test import APIClient

from cash.models import CashRegister
from core.testing import make_branch, make_user, open_cash_register


class CashRegisterApiTests(TestCase):
    def setUp(self):
        self.user = make_user()
        self.branch = make_branch()
        self.client = APIClient()
        self.client.force_authenticate(user=self.user)

    # =====================================================
    # OPEN / CURRENT / CLOSE
    # =====================================================

    def test_open_register(self):
        response = self.client.post(
            "/api/cash/registers/open/",
            {"branch_id": str(self.branch.pk), "initial_amount": "150.00"},
            format="json",
        )

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["status"], CashRegister.STATUS_OPEN)
        self.assertEqual(Decimal(response.data["expected_cash_balance"]), Decimal("150.00"))

    def test_current_register_not_found_when_closed(self):
        response = self.client.get(f"/api/cash/registers/current/?branch={self.branch.pk}")

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data["kind"], "register_closed")

    def test_close_register_twice_is_conflict(self):
        register = open_cash_register(self.branch, self.user)
        url = f"/api/cash/registers/{register.pk}/close/"

        first = self.client.post(url, {"final_amount": "0.00"}, format="json")
        second = self.client.post(url, {"final_amount": "0.00"}, format="json")

        self.assertEqual(first.status_code, 200)
        self.assertEqual(second.status_code, 409)
        self.assertEqual(second.data["kind"], "register_closed")

    # =====================================================
    # MOVEMENTS
    # =====================================================

    def test_post_manual_deposit(self):
        register = open_cash_register(self.branch, self.user)

        response = self.client.post(
            f"/api/cash/registers/{register.pk}/movements/",
            {"movement_type": "deposit", "amount": "25.00"},
            format="json",
        )

        self.assertEqual(response.status_code, 201)
        self.assertEqual(Decimal(response.data["signed_amount"]), Decimal("25.00"))

        listing = self.client.get(f"/api/cash/registers/{register.pk}/movements/")
        self.assertEqual(len(listing.data), 1)

    def test_anonymous_access_is_denied(self):
        response = APIClient().get("/api/cash/registers/")

        self.assertEqual(response.status_code, 401)
