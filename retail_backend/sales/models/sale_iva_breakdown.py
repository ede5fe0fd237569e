# sales/models/sale_iva_breakdown.py

import uuid

from django.core.exceptions import ValidationError
from django.db import models

from .sale import Sale


class SaleIvaBreakdown(models.Model):
    """
    One row per VAT rate present on the sale.
    sum(base_amount) == Sale.subtotal_net and sum(iva_amount) == Sale.total_iva.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    sale = models.ForeignKey(Sale, on_delete=models.CASCADE, related_name="iva_breakdown")
    iva_rate = models.DecimalField(max_digits=5, decimal_places=2)
    base_amount = models.DecimalField(max_digits=12, decimal_places=2)
    iva_amount = models.DecimalField(max_digits=12, decimal_places=2)

    class Meta:
        ordering = ["iva_rate"]
        constraints = [
            models.UniqueConstraint(
                fields=["sale", "iva_rate"],
                name="uniq_iva_rate_per_sale",
            ),
        ]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("SaleIvaBreakdown records are immutable")
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.iva_rate}% | {self.base_amount} | {self.iva_amount}"
