# products/models/product.py

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models


class Product(models.Model):
    """
    Represents a sellable product.

    STOCK MODEL (IMPORTANT):
    - Product itself does NOT store stock
    - Stock lives in Stock, one row per (product, branch)
    - sale_price is the current catalog price; sale lines snapshot it
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    sku = models.CharField(max_length=128, unique=True, db_index=True)
    name = models.CharField(max_length=255, db_index=True)

    # Current/default selling price (VAT excluded)
    sale_price = models.DecimalField(max_digits=12, decimal_places=2)

    cost_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
    )

    iva_rate = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal("21.00"),
        help_text="VAT rate as a percent (e.g. 21.00, 10.50, 0.00).",
    )

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def clean(self):
        if self.sale_price is not None and self.sale_price < 0:
            raise ValidationError({"sale_price": "sale_price cannot be negative."})
        if self.iva_rate is not None and not (0 <= self.iva_rate <= 100):
            raise ValidationError({"iva_rate": "iva_rate must be between 0 and 100."})

    def __str__(self):
        return f"{self.name} ({self.sku})"
