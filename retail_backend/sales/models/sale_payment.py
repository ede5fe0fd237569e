# sales/models/sale_payment.py

"""
SALE PAYMENT (ALLOCATION LEG)

One row per payment method used on a sale, including the virtual
store-credit method. Amounts are final after reconciliation.
"""

import uuid

from django.core.exceptions import ValidationError
from django.db import models

from .sale import Sale


class SalePayment(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    sale = models.ForeignKey(Sale, on_delete=models.CASCADE, related_name="payments")
    payment_method = models.ForeignKey(
        "cash.PaymentMethod", on_delete=models.PROTECT, related_name="sale_payments"
    )
    amount = models.DecimalField(max_digits=12, decimal_places=2)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["sale", "created_at"], name="salepay_sale_idx"),
        ]

    def clean(self):
        if self.amount is None or self.amount <= 0:
            raise ValidationError("amount must be greater than zero")

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("SalePayment records are immutable")
        self.full_clean()
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("SalePayment records are immutable and cannot be deleted")

    def __str__(self):
        return f"{self.payment_method} | {self.amount}"
