# cash/management/commands/seed_ledger_defaults.py

from django.core.management.base import BaseCommand
from django.db import transaction

from cash.models import MovementType, PaymentMethod
from sales.models import ReceiptType

# code, name, flags
PAYMENT_METHODS = [
    ("cash", "Cash", {"affects_cash": True, "is_cash": True}),
    ("card", "Card", {"affects_cash": True}),
    ("transfer", "Bank transfer", {"affects_cash": True}),
    ("current_account", "Current account", {"affects_cash": False, "is_current_account": True}),
    ("store_credit", "Store credit", {"affects_cash": False, "is_store_credit": True}),
]

# code, name, is_budget, requires_authorization
RECEIPT_TYPES = [
    ("001", "Invoice A", False, True),
    ("006", "Invoice B", False, True),
    ("011", "Invoice C", False, True),
    ("017", "Invoice X", False, False),
    ("016", "Budget", True, False),
]


class Command(BaseCommand):
    help = "Seed default payment methods, system movement types and receipt types"

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write("Seeding ledger defaults...")

        # ------------------------------------------------------------
        # PAYMENT METHODS
        # ------------------------------------------------------------
        for code, name, flags in PAYMENT_METHODS:
            _, created = PaymentMethod.objects.get_or_create(
                code=code,
                defaults={"name": name, **flags},
            )
            if created:
                self.stdout.write(f"Created payment method {code}")

        # ------------------------------------------------------------
        # SYSTEM MOVEMENT TYPES
        # ------------------------------------------------------------
        for code in MovementType.SYSTEM_TYPES:
            MovementType.system(code)

        # ------------------------------------------------------------
        # RECEIPT TYPES
        # ------------------------------------------------------------
        for code, name, is_budget, requires_authorization in RECEIPT_TYPES:
            _, created = ReceiptType.objects.get_or_create(
                code=code,
                defaults={
                    "name": name,
                    "is_budget": is_budget,
                    "requires_authorization": requires_authorization,
                },
            )
            if created:
                self.stdout.write(f"Created receipt type {code}")

        self.stdout.write(self.style.SUCCESS("Ledger defaults seeded"))
