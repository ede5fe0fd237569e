"""
======================================================
PATH: sales/migrations/0001_initial.py
======================================================
MIGRATION: CREATE ReceiptType, Sale, SaleItem, SaleIvaBreakdown, SalePayment
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


def _uuid_pk():
    return (
        "id",
        models.UUIDField(
            primary_key=True,
            default=uuid.uuid4,
            editable=False,
            serialize=False,
        ),
    )


def _money(**kwargs):
    return models.DecimalField(max_digits=12, decimal_places=2, **kwargs)


DISCOUNT_TYPE_CHOICES = [
    ("percent", "Percent"),
    ("amount", "Fixed amount"),
]


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("branches", "0001_initial"),
        ("products", "0001_initial"),
        ("cash", "0001_initial"),
        ("current_accounts", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="ReceiptType",
            fields=[
                _uuid_pk(),
                ("name", models.CharField(max_length=100)),
                ("code", models.CharField(max_length=10, unique=True)),
                ("is_budget", models.BooleanField(default=False)),
                ("requires_authorization", models.BooleanField(default=False)),
                ("is_active", models.BooleanField(default=True)),
            ],
            options={"ordering": ["code"]},
        ),
        migrations.CreateModel(
            name="Sale",
            fields=[
                _uuid_pk(),
                (
                    "receipt_number",
                    models.CharField(
                        max_length=8,
                        help_text="Zero-padded sequential number within the numbering scope.",
                    ),
                ),
                (
                    "numbering_scope",
                    models.CharField(
                        max_length=20,
                        default="sale",
                        help_text='"sale" for every non-budget type, "budget:<code>" for budgets.',
                    ),
                ),
                ("sale_date", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "status",
                    models.CharField(
                        max_length=16,
                        choices=[
                            ("draft", "Draft"),
                            ("active", "Active"),
                            ("annulled", "Annulled"),
                            ("cancelled", "Cancelled"),
                        ],
                        default="active",
                    ),
                ),
                ("subtotal_gross", _money(default=Decimal("0.00"))),
                ("items_discount", _money(default=Decimal("0.00"))),
                ("subtotal_net", _money(default=Decimal("0.00"))),
                ("total_iva", _money(default=Decimal("0.00"))),
                (
                    "discount_type",
                    models.CharField(
                        max_length=10,
                        choices=DISCOUNT_TYPE_CHOICES,
                        blank=True,
                        default="",
                    ),
                ),
                ("discount_value", _money(default=Decimal("0.00"))),
                (
                    "discount",
                    _money(
                        default=Decimal("0.00"),
                        help_text="Header discount amount applied to subtotal_net + total_iva.",
                    ),
                ),
                ("iibb", _money(default=Decimal("0.00"))),
                ("internal_tax", _money(default=Decimal("0.00"))),
                ("total", _money(default=Decimal("0.00"))),
                ("store_credit_applied", _money(default=Decimal("0.00"))),
                ("paid_amount", _money(default=Decimal("0.00"))),
                (
                    "payment_status",
                    models.CharField(
                        max_length=10,
                        choices=[
                            ("pending", "Pending"),
                            ("partial", "Partial"),
                            ("paid", "Paid"),
                        ],
                        default="pending",
                    ),
                ),
                (
                    "authorization_status",
                    models.CharField(
                        max_length=16,
                        choices=[
                            ("not_required", "Not required"),
                            ("pending", "Pending"),
                            ("authorized", "Authorized"),
                            ("failed", "Failed"),
                        ],
                        default="not_required",
                    ),
                ),
                ("authorization_code", models.CharField(max_length=64, blank=True, default="")),
                ("authorization_expires_at", models.DateField(null=True, blank=True)),
                ("authorization_error", models.TextField(blank=True, default="")),
                ("converted_at", models.DateTimeField(null=True, blank=True)),
                ("annulled_at", models.DateTimeField(null=True, blank=True)),
                ("annulment_reason", models.TextField(blank=True, default="")),
                ("notes", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "receipt_type",
                    models.ForeignKey(
                        to="sales.receipttype",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="sales",
                    ),
                ),
                (
                    "branch",
                    models.ForeignKey(
                        to="branches.branch",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="sales",
                    ),
                ),
                (
                    "customer",
                    models.ForeignKey(
                        to="current_accounts.customer",
                        null=True,
                        blank=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="sales",
                    ),
                ),
                (
                    "operator",
                    models.ForeignKey(
                        to=settings.AUTH_USER_MODEL,
                        null=True,
                        blank=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="sales",
                        help_text="Cashier / staff who processed the sale",
                    ),
                ),
                (
                    "cash_register",
                    models.ForeignKey(
                        to="cash.cashregister",
                        null=True,
                        blank=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="sales",
                    ),
                ),
                (
                    "converted_from_budget",
                    models.OneToOneField(
                        to="sales.sale",
                        null=True,
                        blank=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="converted_sale",
                    ),
                ),
                (
                    "converted_to_sale",
                    models.OneToOneField(
                        to="sales.sale",
                        null=True,
                        blank=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="source_budget",
                    ),
                ),
                (
                    "annulled_by",
                    models.ForeignKey(
                        to=settings.AUTH_USER_MODEL,
                        null=True,
                        blank=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="annulled_sales",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("branch", "numbering_scope", "receipt_number"),
                        name="uniq_receipt_number_per_scope",
                    ),
                ],
                "indexes": [
                    models.Index(fields=["created_at"], name="sale_created_idx"),
                    models.Index(fields=["status"], name="sale_status_idx"),
                    models.Index(fields=["branch", "sale_date"], name="sale_branch_date_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="SaleItem",
            fields=[
                _uuid_pk(),
                ("quantity", models.DecimalField(max_digits=12, decimal_places=3)),
                ("unit_price", _money()),
                (
                    "discount_type",
                    models.CharField(
                        max_length=10,
                        choices=DISCOUNT_TYPE_CHOICES,
                        blank=True,
                        default="",
                    ),
                ),
                ("discount_value", _money(default=Decimal("0.00"))),
                ("discount_amount", _money(default=Decimal("0.00"))),
                ("iva_rate", models.DecimalField(max_digits=5, decimal_places=2)),
                ("net_amount", _money()),
                ("iva_amount", _money()),
                ("line_total", _money()),
                (
                    "created_at",
                    models.DateTimeField(default=django.utils.timezone.now, db_index=True),
                ),
                (
                    "sale",
                    models.ForeignKey(
                        to="sales.sale",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="items",
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        to="products.product",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="sale_items",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at", "id"],
                "indexes": [
                    models.Index(fields=["sale", "created_at"], name="saleitem_sale_idx"),
                    models.Index(fields=["product", "created_at"], name="saleitem_product_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="SaleIvaBreakdown",
            fields=[
                _uuid_pk(),
                ("iva_rate", models.DecimalField(max_digits=5, decimal_places=2)),
                ("base_amount", _money()),
                ("iva_amount", _money()),
                (
                    "sale",
                    models.ForeignKey(
                        to="sales.sale",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="iva_breakdown",
                    ),
                ),
            ],
            options={
                "ordering": ["iva_rate"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("sale", "iva_rate"),
                        name="uniq_iva_rate_per_sale",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="SalePayment",
            fields=[
                _uuid_pk(),
                ("amount", _money()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "sale",
                    models.ForeignKey(
                        to="sales.sale",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="payments",
                    ),
                ),
                (
                    "payment_method",
                    models.ForeignKey(
                        to="cash.paymentmethod",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="sale_payments",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at", "id"],
                "indexes": [
                    models.Index(fields=["sale", "created_at"], name="salepay_sale_idx"),
                ],
            },
        ),
    ]
