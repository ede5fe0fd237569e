# products/models/stock.py

"""
STOCK LEVEL (PER PRODUCT, PER BRANCH)

current_stock is service-managed only: every change goes through
products.services.stock_ledger, which writes the matching StockMovement.
"""

import uuid
from decimal import Decimal

from django.db import models

from branches.models import Branch

from .product import Product


class Stock(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    product = models.ForeignKey(
        Product, on_delete=models.CASCADE, related_name="stock_levels"
    )
    branch = models.ForeignKey(
        Branch, on_delete=models.CASCADE, related_name="stock_levels"
    )

    current_stock = models.DecimalField(
        max_digits=12, decimal_places=3, default=Decimal("0.000")
    )
    min_stock = models.DecimalField(
        max_digits=12, decimal_places=3, null=True, blank=True
    )
    max_stock = models.DecimalField(
        max_digits=12, decimal_places=3, null=True, blank=True
    )

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["product__name"]
        constraints = [
            models.UniqueConstraint(
                fields=["product", "branch"],
                name="uniq_stock_product_branch",
            ),
        ]

    @property
    def is_below_minimum(self) -> bool:
        return self.min_stock is not None and self.current_stock < self.min_stock

    def __str__(self):
        return f"{self.product} @ {self.branch} = {self.current_stock}"
