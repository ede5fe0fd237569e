# core/testing.py

"""
Shared fixtures for the ledger test suites.

Small factory helpers only; each TestCase builds what it needs in setUp.
"""

from __future__ import annotations

from decimal import Decimal

from django.contrib.auth import get_user_model

from branches.models import Branch
from cash.models import PaymentMethod
from cash.services.registers import open_register
from current_accounts.models import Customer
from products.models import Product
from products.services import stock_ledger
from sales.models import ReceiptType

User = get_user_model()


def make_user(username: str = "cashier"):
    return User.objects.create_user(username=username, password="pass")


def make_branch(name: str = "Main", code: str | None = None) -> Branch:
    return Branch.objects.create(name=name, code=code)


def make_product(sku: str = "SKU-1", *, sale_price="100.00", iva_rate="21.00", **extra) -> Product:
    return Product.objects.create(
        sku=sku,
        name=extra.pop("name", f"Product {sku}"),
        sale_price=Decimal(sale_price),
        iva_rate=Decimal(iva_rate),
        **extra,
    )


def stock_up(product, branch, quantity) -> None:
    stock_ledger.increase(product=product, branch=branch, quantity=quantity)


def make_payment_methods() -> dict[str, PaymentMethod]:
    """cash, card, current_account, store_credit keyed by code."""
    return {
        "cash": PaymentMethod.objects.create(
            name="Cash", code="cash", affects_cash=True, is_cash=True
        ),
        "card": PaymentMethod.objects.create(
            name="Card", code="card", affects_cash=True
        ),
        "current_account": PaymentMethod.objects.create(
            name="Current account",
            code="current_account",
            affects_cash=False,
            is_current_account=True,
        ),
        "store_credit": PaymentMethod.objects.create(
            name="Store credit",
            code="store_credit",
            affects_cash=False,
            is_store_credit=True,
        ),
    }


def make_receipt_types() -> dict[str, ReceiptType]:
    """invoice (no authorization), invoice_auth, budget."""
    return {
        "invoice": ReceiptType.objects.create(name="Invoice X", code="017"),
        "invoice_auth": ReceiptType.objects.create(
            name="Invoice B", code="006", requires_authorization=True
        ),
        "budget": ReceiptType.objects.create(name="Budget", code="016", is_budget=True),
    }


def make_customer(name: str = "Jane Buyer") -> Customer:
    return Customer.objects.create(name=name)


def open_cash_register(branch, user=None, initial_amount="0.00"):
    return open_register(branch=branch, user=user, initial_amount=initial_amount)


def line(product, quantity, **extra) -> dict:
    return {"product_id": str(product.pk), "quantity": quantity, **extra}


def pay(method, amount) -> dict:
    return {"payment_method_id": str(method.pk), "amount": amount}
