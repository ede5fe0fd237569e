# current_accounts/models/movement.py

"""
CURRENT ACCOUNT MOVEMENT

GUARANTEES:
- Append-only (no updates, no deletes)
- amount is signed: + increases what the subject owes, - reduces it
- balance_after snapshots the running balance right after this row
- compensations carry metadata["original_movement_id"]
"""

import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from core.references import REFERENCE_KIND_CHOICES

from .account import CurrentAccount


class CurrentAccountMovement(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    current_account = models.ForeignKey(
        CurrentAccount, on_delete=models.PROTECT, related_name="movements"
    )
    movement_type = models.ForeignKey(
        "cash.MovementType",
        on_delete=models.PROTECT,
        related_name="current_account_movements",
    )
    payment_method = models.ForeignKey(
        "cash.PaymentMethod",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="current_account_movements",
    )

    amount = models.DecimalField(max_digits=12, decimal_places=2)
    balance_after = models.DecimalField(max_digits=12, decimal_places=2)

    description = models.CharField(max_length=255, blank=True, default="")
    # Human readable document number (e.g. receipt number)
    reference = models.CharField(max_length=64, blank=True, default="")

    reference_kind = models.CharField(
        max_length=32, choices=REFERENCE_KIND_CHOICES, blank=True, default=""
    )
    reference_id = models.CharField(max_length=64, blank=True, default="")

    metadata = models.JSONField(default=dict, blank=True)

    performed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="current_account_movements",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["current_account", "created_at"], name="camv_account_idx"),
            models.Index(fields=["reference_kind", "reference_id"], name="camv_reference_idx"),
        ]

    def clean(self):
        if self.amount is None or self.amount == 0:
            raise ValidationError("amount cannot be zero")

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("CurrentAccountMovement records are immutable")

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError(
            "CurrentAccountMovement records are immutable and cannot be deleted"
        )

    def __str__(self):
        return f"{self.current_account} | {self.amount:+}"
