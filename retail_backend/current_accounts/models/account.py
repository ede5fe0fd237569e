# current_accounts/models/account.py

"""
CURRENT ACCOUNT

Running credit ledger for exactly one customer OR one supplier.

- balance = sum(movements.amount); positive means the subject owes the business
- a negative customer balance is store credit ("saldo a favor")
- credit_limit NULL means unlimited
"""

import uuid
from decimal import Decimal

from django.db import models
from django.db.models import Q, Sum
from django.utils import timezone

from .party import Customer, Supplier


class CurrentAccount(models.Model):
    STATUS_ACTIVE = "active"
    STATUS_SUSPENDED = "suspended"
    STATUS_CLOSED = "closed"

    STATUS_CHOICES = [
        (STATUS_ACTIVE, "Active"),
        (STATUS_SUSPENDED, "Suspended"),
        (STATUS_CLOSED, "Closed"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    customer = models.OneToOneField(
        Customer,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="current_account",
    )
    supplier = models.OneToOneField(
        Supplier,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="current_account",
    )

    credit_limit = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Maximum positive balance allowed. Empty = unlimited.",
    )

    status = models.CharField(
        max_length=10, choices=STATUS_CHOICES, default=STATUS_ACTIVE
    )

    opened_at = models.DateTimeField(default=timezone.now)
    notes = models.TextField(blank=True, default="")

    class Meta:
        ordering = ["-opened_at"]
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(customer__isnull=False, supplier__isnull=True)
                    | Q(customer__isnull=True, supplier__isnull=False)
                ),
                name="current_account_single_subject",
            ),
        ]

    @property
    def subject(self):
        return self.customer or self.supplier

    @property
    def is_active(self) -> bool:
        return self.status == self.STATUS_ACTIVE

    def compute_balance(self) -> Decimal:
        total = self.movements.aggregate(total=Sum("amount")).get("total")
        return total if total is not None else Decimal("0.00")

    def __str__(self):
        return f"Current account of {self.subject}"
