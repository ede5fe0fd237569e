# cash/models/cash_movement.py

"""
CASH MOVEMENT (DRAWER LEDGER ROW)

GUARANTEES:
- Append-only (no updates, no deletes)
- amount is the unsigned magnitude (> 0)
- direction comes from movement_type.operation_type
- corrections are new compensating rows, never edits
"""

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from core.references import REFERENCE_KIND_CHOICES

from .cash_register import CashRegister
from .movement_type import MovementType
from .payment_method import PaymentMethod


class CashMovement(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    cash_register = models.ForeignKey(
        CashRegister, on_delete=models.PROTECT, related_name="movements"
    )
    movement_type = models.ForeignKey(
        MovementType, on_delete=models.PROTECT, related_name="cash_movements"
    )
    payment_method = models.ForeignKey(
        PaymentMethod,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="cash_movements",
    )

    amount = models.DecimalField(max_digits=12, decimal_places=2)
    description = models.CharField(max_length=255, blank=True, default="")

    reference_kind = models.CharField(
        max_length=32, choices=REFERENCE_KIND_CHOICES, blank=True, default=""
    )
    reference_id = models.CharField(max_length=64, blank=True, default="")

    affects_balance = models.BooleanField(default=True)
    metadata = models.JSONField(default=dict, blank=True)

    operator = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="cash_movements",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["cash_register", "created_at"], name="cashmv_register_idx"),
            models.Index(fields=["reference_kind", "reference_id"], name="cashmv_reference_idx"),
        ]

    def clean(self):
        if self.amount is None or self.amount <= Decimal("0.00"):
            raise ValidationError("amount must be greater than zero")

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("CashMovement records are immutable")

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError(
            "CashMovement records are immutable and cannot be deleted"
        )

    @property
    def signed_amount(self) -> Decimal:
        return self.amount * self.movement_type.sign

    def __str__(self):
        return f"{self.movement_type.name} | {self.signed_amount}"
