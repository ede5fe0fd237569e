"""
======================================================
PATH: products/migrations/0001_initial.py
======================================================
MIGRATION: CREATE Product, Stock, StockMovement
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion

from core.references import REFERENCE_KIND_CHOICES


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("branches", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Product",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        primary_key=True,
                        default=uuid.uuid4,
                        editable=False,
                        serialize=False,
                    ),
                ),
                ("sku", models.CharField(max_length=128, unique=True, db_index=True)),
                ("name", models.CharField(max_length=255, db_index=True)),
                ("sale_price", models.DecimalField(max_digits=12, decimal_places=2)),
                (
                    "cost_price",
                    models.DecimalField(
                        max_digits=12, decimal_places=2, default=Decimal("0.00")
                    ),
                ),
                (
                    "iva_rate",
                    models.DecimalField(
                        max_digits=5,
                        decimal_places=2,
                        default=Decimal("21.00"),
                        help_text="VAT rate as a percent (e.g. 21.00, 10.50, 0.00).",
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Stock",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        primary_key=True,
                        default=uuid.uuid4,
                        editable=False,
                        serialize=False,
                    ),
                ),
                (
                    "current_stock",
                    models.DecimalField(
                        max_digits=12, decimal_places=3, default=Decimal("0.000")
                    ),
                ),
                (
                    "min_stock",
                    models.DecimalField(
                        max_digits=12, decimal_places=3, null=True, blank=True
                    ),
                ),
                (
                    "max_stock",
                    models.DecimalField(
                        max_digits=12, decimal_places=3, null=True, blank=True
                    ),
                ),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "branch",
                    models.ForeignKey(
                        to="branches.branch",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="stock_levels",
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        to="products.product",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="stock_levels",
                    ),
                ),
            ],
            options={
                "ordering": ["product__name"],
            },
        ),
        migrations.AddConstraint(
            model_name="stock",
            constraint=models.UniqueConstraint(
                fields=("product", "branch"),
                name="uniq_stock_product_branch",
            ),
        ),
        migrations.CreateModel(
            name="StockMovement",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        primary_key=True,
                        default=uuid.uuid4,
                        editable=False,
                        serialize=False,
                    ),
                ),
                (
                    "movement_type",
                    models.CharField(
                        max_length=20,
                        choices=[
                            ("INITIAL", "Initial Stock"),
                            ("PURCHASE", "Purchase"),
                            ("SALE", "Sale"),
                            ("SALE_ANNULMENT", "Sale Annulment"),
                            ("ADJUSTMENT", "Manual Adjustment"),
                            ("TRANSFER_IN", "Transfer In"),
                            ("TRANSFER_OUT", "Transfer Out"),
                        ],
                    ),
                ),
                (
                    "quantity",
                    models.DecimalField(
                        max_digits=12,
                        decimal_places=3,
                        help_text="Signed quantity delta (+in / -out).",
                    ),
                ),
                ("balance_after", models.DecimalField(max_digits=12, decimal_places=3)),
                (
                    "cost_price_snapshot",
                    models.DecimalField(
                        max_digits=12, decimal_places=2, null=True, blank=True
                    ),
                ),
                (
                    "sale_price_snapshot",
                    models.DecimalField(
                        max_digits=12, decimal_places=2, null=True, blank=True
                    ),
                ),
                (
                    "reference_kind",
                    models.CharField(
                        max_length=32,
                        choices=REFERENCE_KIND_CHOICES,
                        blank=True,
                        default="",
                    ),
                ),
                ("reference_id", models.CharField(max_length=64, blank=True, default="")),
                ("notes", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "branch",
                    models.ForeignKey(
                        to="branches.branch",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="stock_movements",
                    ),
                ),
                (
                    "performed_by",
                    models.ForeignKey(
                        to=settings.AUTH_USER_MODEL,
                        null=True,
                        blank=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="stock_movements",
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        to="products.product",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="stock_movements",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at"],
            },
        ),
        migrations.AddIndex(
            model_name="stockmovement",
            index=models.Index(
                fields=["product", "branch", "created_at"], name="stockmv_prod_branch_idx"
            ),
        ),
        migrations.AddIndex(
            model_name="stockmovement",
            index=models.Index(
                fields=["reference_kind", "reference_id"], name="stockmv_reference_idx"
            ),
        ),
        migrations.AddIndex(
            model_name="stockmovement",
            index=models.Index(fields=["movement_type"], name="stockmv_type_idx"),
        ),
    ]
