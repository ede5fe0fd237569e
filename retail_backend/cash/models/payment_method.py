# cash/models/payment_method.py

import uuid

from django.core.exceptions import ValidationError
from django.db import models


class PaymentMethod(models.Model):
    """
    How a customer settles (part of) a sale.

    FLAGS:
    - affects_cash: posts a CashMovement to the open register and counts as settled
    - is_cash: physical cash; only these count into expected_cash_balance
    - is_current_account: deferred debt on the customer's current account
    - is_store_credit: virtual method consuming the customer's favour balance
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=100)
    code = models.SlugField(max_length=50, unique=True)

    affects_cash = models.BooleanField(default=True)
    is_cash = models.BooleanField(default=False)
    is_current_account = models.BooleanField(default=False)
    is_store_credit = models.BooleanField(default=False)

    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["name"]

    def clean(self):
        virtual = self.is_current_account or self.is_store_credit
        if virtual and self.affects_cash:
            raise ValidationError(
                "Current account / store credit methods cannot affect cash."
            )
        if self.is_current_account and self.is_store_credit:
            raise ValidationError(
                "A method cannot be both current account and store credit."
            )

    @property
    def is_settlement(self) -> bool:
        """Counts toward a sale's paid_amount."""
        return (self.affects_cash and not self.is_current_account) or self.is_store_credit

    def __str__(self):
        return self.name
