# cash/models/cash_register.py

"""
CASH REGISTER (DRAWER SESSION)

One open register per branch at a time (partial unique constraint).

CACHED FIELDS:
- expected_cash_balance, payment_method_totals and cash_difference are a
  pure function of the register's movements (cash.services.aggregates).
- Only cash.services writes them; never edit them by hand.
"""

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone

from branches.models import Branch


class CashRegister(models.Model):
    STATUS_OPEN = "open"
    STATUS_CLOSED = "closed"

    STATUS_CHOICES = [
        (STATUS_OPEN, "Open"),
        (STATUS_CLOSED, "Closed"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    branch = models.ForeignKey(
        Branch, on_delete=models.PROTECT, related_name="cash_registers"
    )
    operator = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="cash_registers",
    )

    status = models.CharField(
        max_length=10, choices=STATUS_CHOICES, default=STATUS_OPEN
    )

    opened_at = models.DateTimeField(default=timezone.now)
    closed_at = models.DateTimeField(null=True, blank=True)

    initial_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    final_amount = models.DecimalField(
        max_digits=12, decimal_places=2, null=True, blank=True
    )

    expected_cash_balance = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="initial_amount + signed physical-cash movements (cached).",
    )
    payment_method_totals = models.JSONField(
        default=dict,
        blank=True,
        help_text="Signed movement totals keyed by payment method name (cached).",
    )
    cash_difference = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="final_amount - expected_cash_balance, set on close.",
    )

    opening_notes = models.TextField(blank=True, default="")
    closing_notes = models.TextField(blank=True, default="")

    class Meta:
        ordering = ["-opened_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["branch"],
                condition=Q(status="open"),
                name="uniq_open_register_per_branch",
            ),
        ]
        indexes = [
            models.Index(fields=["branch", "status"], name="cashreg_branch_status_idx"),
        ]

    @property
    def is_open(self) -> bool:
        return self.status == self.STATUS_OPEN

    def __str__(self):
        return f"Register {self.branch} | {self.status} | {self.opened_at:%Y-%m-%d %H:%M}"
