# products/models/stock_movement.py

"""
CANONICAL INVENTORY LEDGER

Immutable inventory ledger entry.

GUARANTEES:
- Append-only (no updates, no deletes)
- quantity is the signed delta applied to Stock.current_stock
- balance_after is the stock level right after this movement
- Sale-linked movements must reference the sale
"""

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from branches.models import Branch
from core.references import REFERENCE_KIND_CHOICES

from .product import Product


class StockMovement(models.Model):
    class MovementType(models.TextChoices):
        INITIAL = "INITIAL", "Initial Stock"
        PURCHASE = "PURCHASE", "Purchase"
        SALE = "SALE", "Sale"
        SALE_ANNULMENT = "SALE_ANNULMENT", "Sale Annulment"
        ADJUSTMENT = "ADJUSTMENT", "Manual Adjustment"
        TRANSFER_IN = "TRANSFER_IN", "Transfer In"
        TRANSFER_OUT = "TRANSFER_OUT", "Transfer Out"

    # None = either direction
    DIRECTION = {
        MovementType.INITIAL: 1,
        MovementType.PURCHASE: 1,
        MovementType.SALE_ANNULMENT: 1,
        MovementType.TRANSFER_IN: 1,
        MovementType.SALE: -1,
        MovementType.TRANSFER_OUT: -1,
        MovementType.ADJUSTMENT: None,
    }

    SALE_LINKED = {MovementType.SALE, MovementType.SALE_ANNULMENT}

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    product = models.ForeignKey(
        Product, on_delete=models.PROTECT, related_name="stock_movements"
    )
    branch = models.ForeignKey(
        Branch, on_delete=models.PROTECT, related_name="stock_movements"
    )

    movement_type = models.CharField(max_length=20, choices=MovementType.choices)

    quantity = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        help_text="Signed quantity delta (+in / -out).",
    )
    balance_after = models.DecimalField(max_digits=12, decimal_places=3)

    cost_price_snapshot = models.DecimalField(
        max_digits=12, decimal_places=2, null=True, blank=True
    )
    sale_price_snapshot = models.DecimalField(
        max_digits=12, decimal_places=2, null=True, blank=True
    )

    reference_kind = models.CharField(
        max_length=32, choices=REFERENCE_KIND_CHOICES, blank=True, default=""
    )
    reference_id = models.CharField(max_length=64, blank=True, default="")

    notes = models.TextField(blank=True, default="")

    performed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="stock_movements",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["product", "branch", "created_at"], name="stockmv_prod_branch_idx"),
            models.Index(fields=["reference_kind", "reference_id"], name="stockmv_reference_idx"),
            models.Index(fields=["movement_type"], name="stockmv_type_idx"),
        ]

    def clean(self):
        if self.quantity is None or self.quantity == 0:
            raise ValidationError("quantity cannot be zero")

        direction = self.DIRECTION.get(self.movement_type)
        if direction is not None and (self.quantity > 0) != (direction > 0):
            raise ValidationError(
                f"{self.movement_type} requires a {'positive' if direction > 0 else 'negative'} quantity"
            )

        if self.movement_type in self.SALE_LINKED and not self.reference_id:
            raise ValidationError("SALE / SALE_ANNULMENT must reference a sale")

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("StockMovement records are immutable")

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError(
            "StockMovement records are immutable and cannot be deleted"
        )

    @property
    def total_cost(self) -> Decimal:
        unit_cost = (
            self.cost_price_snapshot
            if self.cost_price_snapshot is not None
            else Decimal("0.00")
        )
        return unit_cost * abs(self.quantity or Decimal("0"))

    def __str__(self):
        product_name = getattr(self.product, "name", "Product")
        return f"{product_name} | {self.movement_type} | {self.quantity}"
