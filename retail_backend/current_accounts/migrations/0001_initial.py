"""
======================================================
PATH: current_accounts/migrations/0001_initial.py
======================================================
MIGRATION: CREATE Customer, Supplier, CurrentAccount, CurrentAccountMovement
"""

from __future__ import annotations

import uuid

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone

from core.references import REFERENCE_KIND_CHOICES


def _party_fields():
    return [
        (
            "id",
            models.UUIDField(
                primary_key=True,
                default=uuid.uuid4,
                editable=False,
                serialize=False,
            ),
        ),
        ("name", models.CharField(max_length=255)),
        ("tax_id", models.CharField(max_length=32, blank=True, default="")),
        ("email", models.EmailField(max_length=254, blank=True, default="")),
        ("phone", models.CharField(max_length=50, blank=True, default="")),
        ("is_active", models.BooleanField(default=True)),
        ("created_at", models.DateTimeField(auto_now_add=True)),
    ]


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("cash", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Customer",
            fields=_party_fields(),
            options={
                "ordering": ["name"],
                "abstract": False,
            },
        ),
        migrations.CreateModel(
            name="Supplier",
            fields=_party_fields(),
            options={
                "ordering": ["name"],
                "abstract": False,
            },
        ),
        migrations.CreateModel(
            name="CurrentAccount",
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
                    "credit_limit",
                    models.DecimalField(
                        max_digits=12,
                        decimal_places=2,
                        null=True,
                        blank=True,
                        help_text="Maximum positive balance allowed. Empty = unlimited.",
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        max_length=10,
                        choices=[
                            ("active", "Active"),
                            ("suspended", "Suspended"),
                            ("closed", "Closed"),
                        ],
                        default="active",
                    ),
                ),
                ("opened_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("notes", models.TextField(blank=True, default="")),
                (
                    "customer",
                    models.OneToOneField(
                        to="current_accounts.customer",
                        null=True,
                        blank=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="current_account",
                    ),
                ),
                (
                    "supplier",
                    models.OneToOneField(
                        to="current_accounts.supplier",
                        null=True,
                        blank=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="current_account",
                    ),
                ),
            ],
            options={
                "ordering": ["-opened_at"],
            },
        ),
        migrations.AddConstraint(
            model_name="currentaccount",
            constraint=models.CheckConstraint(
                condition=models.Q(
                    models.Q(("customer__isnull", False), ("supplier__isnull", True)),
                    models.Q(("customer__isnull", True), ("supplier__isnull", False)),
                    _connector="OR",
                ),
                name="current_account_single_subject",
            ),
        ),
        migrations.CreateModel(
            name="CurrentAccountMovement",
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
                ("balance_after", models.DecimalField(max_digits=12, decimal_places=2)),
                ("description", models.CharField(max_length=255, blank=True, default="")),
                ("reference", models.CharField(max_length=64, blank=True, default="")),
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
                ("metadata", models.JSONField(default=dict, blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "current_account",
                    models.ForeignKey(
                        to="current_accounts.currentaccount",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="movements",
                    ),
                ),
                (
                    "movement_type",
                    models.ForeignKey(
                        to="cash.movementtype",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="current_account_movements",
                    ),
                ),
                (
                    "payment_method",
                    models.ForeignKey(
                        to="cash.paymentmethod",
                        null=True,
                        blank=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="current_account_movements",
                    ),
                ),
                (
                    "performed_by",
                    models.ForeignKey(
                        to=settings.AUTH_USER_MODEL,
                        null=True,
                        blank=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="current_account_movements",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at", "id"],
            },
        ),
        migrations.AddIndex(
            model_name="currentaccountmovement",
            index=models.Index(fields=["current_account", "created_at"], name="camv_account_idx"),
        ),
        migrations.AddIndex(
            model_name="currentaccountmovement",
            index=models.Index(fields=["reference_kind", "reference_id"], name="camv_reference_idx"),
        ),
    ]
