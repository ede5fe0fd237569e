"""
======================================================
PATH: cash/migrations/0001_initial.py
======================================================
MIGRATION: CREATE PaymentMethod, MovementType, CashRegister, CashMovement
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone

from core.references import REFERENCE_KIND_CHOICES


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("branches", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="PaymentMethod",
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
                ("name", models.CharField(max_length=100)),
                ("code", models.SlugField(max_length=50, unique=True)),
                ("affects_cash", models.BooleanField(default=True)),
                ("is_cash", models.BooleanField(default=False)),
                ("is_current_account", models.BooleanField(default=False)),
                ("is_store_credit", models.BooleanField(default=False)),
                ("is_active", models.BooleanField(default=True)),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="MovementType",
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
                ("name", models.CharField(max_length=100)),
                ("code", models.SlugField(max_length=50, unique=True)),
                (
                    "operation_type",
                    models.CharField(
                        max_length=10,
                        choices=[("entrada", "Inflow"), ("salida", "Outflow")],
                    ),
                ),
                ("is_cash_movement", models.BooleanField(default=True)),
                ("is_current_account_movement", models.BooleanField(default=False)),
                ("is_system", models.BooleanField(default=False)),
                ("is_active", models.BooleanField(default=True)),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="CashRegister",
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
                    "status",
                    models.CharField(
                        max_length=10,
                        choices=[("open", "Open"), ("closed", "Closed")],
                        default="open",
                    ),
                ),
                ("opened_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("closed_at", models.DateTimeField(null=True, blank=True)),
                (
                    "initial_amount",
                    models.DecimalField(
                        max_digits=12, decimal_places=2, default=Decimal("0.00")
                    ),
                ),
                (
                    "final_amount",
                    models.DecimalField(
                        max_digits=12, decimal_places=2, null=True, blank=True
                    ),
                ),
                (
                    "expected_cash_balance",
                    models.DecimalField(
                        max_digits=12,
                        decimal_places=2,
                        default=Decimal("0.00"),
                        help_text="initial_amount + signed physical-cash movements (cached).",
                    ),
                ),
                (
                    "payment_method_totals",
                    models.JSONField(
                        default=dict,
                        blank=True,
                        help_text="Signed movement totals keyed by payment method name (cached).",
                    ),
                ),
                (
                    "cash_difference",
                    models.DecimalField(
                        max_digits=12,
                        decimal_places=2,
                        null=True,
                        blank=True,
                        help_text="final_amount - expected_cash_balance, set on close.",
                    ),
                ),
                ("opening_notes", models.TextField(blank=True, default="")),
                ("closing_notes", models.TextField(blank=True, default="")),
                (
                    "branch",
                    models.ForeignKey(
                        to="branches.branch",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="cash_registers",
                    ),
                ),
                (
                    "operator",
                    models.ForeignKey(
                        to=settings.AUTH_USER_MODEL,
                        null=True,
                        blank=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="cash_registers",
                    ),
                ),
            ],
            options={
                "ordering": ["-opened_at"],
            },
        ),
        migrations.AddConstraint(
            model_name="cashregister",
            constraint=models.UniqueConstraint(
                fields=("branch",),
                condition=models.Q(("status", "open")),
                name="uniq_open_register_per_branch",
            ),
        ),
        migrations.AddIndex(
            model_name="cashregister",
            index=models.Index(fields=["branch", "status"], name="cashreg_branch_status_idx"),
        ),
        migrations.CreateModel(
            name="CashMovement",
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
                ("amount", models.DecimalField(max_digits=12, decimal_places=2)),
                ("description", models.CharField(max_length=255, blank=True, default="")),
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
                ("affects_balance", models.BooleanField(default=True)),
                ("metadata", models.JSONField(default=dict, blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "cash_register",
                    models.ForeignKey(
                        to="cash.cashregister",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="movements",
                    ),
                ),
                (
                    "movement_type",
                    models.ForeignKey(
                        to="cash.movementtype",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="cash_movements",
                    ),
                ),
                (
                    "operator",
                    models.ForeignKey(
                        to=settings.AUTH_USER_MODEL,
                        null=True,
                        blank=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="cash_movements",
                    ),
                ),
                (
                    "payment_method",
                    models.ForeignKey(
                        to="cash.paymentmethod",
                        null=True,
                        blank=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="cash_movements",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at", "id"],
            },
        ),
        migrations.AddIndex(
            model_name="cashmovement",
            index=models.Index(fields=["cash_register", "created_at"], name="cashmv_register_idx"),
        ),
        migrations.AddIndex(
            model_name="cashmovement",
            index=models.Index(fields=["reference_kind", "reference_id"], name="cashmv_reference_idx"),
        ),
    ]
