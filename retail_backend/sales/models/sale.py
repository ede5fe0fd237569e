# sales/models/sale.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone

from branches.models import Branch

from .receipt_type import ReceiptType

User = settings.AUTH_USER_MODEL


class Sale(models.Model):
    """
    A sale or a budget (quote) document.

    GUARANTEES:
    - Financial fields are frozen once the document leaves draft
    - total = subtotal_net + total_iva - discount + iibb + internal_tax,
      computed once by the sale builder
    - Never hard-deleted: annulment/cancellation are status transitions

    BUDGETS:
    - stay in draft with zero stock/cash/current-account side effects
    - conversion creates a new active sale and links both documents
    """

    STATUS_DRAFT = "draft"
    STATUS_ACTIVE = "active"
    STATUS_ANNULLED = "annulled"
    STATUS_CANCELLED = "cancelled"

    STATUS_CHOICES = [
        (STATUS_DRAFT, "Draft"),
        (STATUS_ACTIVE, "Active"),
        (STATUS_ANNULLED, "Annulled"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    PAYMENT_PENDING = "pending"
    PAYMENT_PARTIAL = "partial"
    PAYMENT_PAID = "paid"

    PAYMENT_STATUS_CHOICES = [
        (PAYMENT_PENDING, "Pending"),
        (PAYMENT_PARTIAL, "Partial"),
        (PAYMENT_PAID, "Paid"),
    ]

    DISCOUNT_PERCENT = "percent"
    DISCOUNT_AMOUNT = "amount"

    DISCOUNT_TYPE_CHOICES = [
        (DISCOUNT_PERCENT, "Percent"),
        (DISCOUNT_AMOUNT, "Fixed amount"),
    ]

    AUTH_NOT_REQUIRED = "not_required"
    AUTH_PENDING = "pending"
    AUTH_AUTHORIZED = "authorized"
    AUTH_FAILED = "failed"

    AUTH_STATUS_CHOICES = [
        (AUTH_NOT_REQUIRED, "Not required"),
        (AUTH_PENDING, "Pending"),
        (AUTH_AUTHORIZED, "Authorized"),
        (AUTH_FAILED, "Failed"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    receipt_number = models.CharField(
        max_length=8,
        help_text="Zero-padded sequential number within the numbering scope.",
    )
    numbering_scope = models.CharField(
        max_length=20,
        default="sale",
        help_text='"sale" for every non-budget type, "budget:<code>" for budgets.',
    )

    receipt_type = models.ForeignKey(
        ReceiptType, on_delete=models.PROTECT, related_name="sales"
    )
    branch = models.ForeignKey(Branch, on_delete=models.PROTECT, related_name="sales")
    customer = models.ForeignKey(
        "current_accounts.Customer",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="sales",
    )
    operator = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="sales",
        help_text="Cashier / staff who processed the sale",
    )

    sale_date = models.DateTimeField(default=timezone.now)

    status = models.CharField(
        max_length=16, choices=STATUS_CHOICES, default=STATUS_ACTIVE
    )

    subtotal_gross = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    items_discount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    subtotal_net = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    total_iva = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )

    discount_type = models.CharField(
        max_length=10, choices=DISCOUNT_TYPE_CHOICES, blank=True, default=""
    )
    discount_value = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    discount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Header discount amount applied to subtotal_net + total_iva.",
    )

    iibb = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    internal_tax = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )

    total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    store_credit_applied = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    paid_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    payment_status = models.CharField(
        max_length=10, choices=PAYMENT_STATUS_CHOICES, default=PAYMENT_PENDING
    )

    cash_register = models.ForeignKey(
        "cash.CashRegister",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="sales",
    )

    authorization_status = models.CharField(
        max_length=16, choices=AUTH_STATUS_CHOICES, default=AUTH_NOT_REQUIRED
    )
    authorization_code = models.CharField(max_length=64, blank=True, default="")
    authorization_expires_at = models.DateField(null=True, blank=True)
    authorization_error = models.TextField(blank=True, default="")

    converted_from_budget = models.OneToOneField(
        "self",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="converted_sale",
    )
    converted_to_sale = models.OneToOneField(
        "self",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="source_budget",
    )
    converted_at = models.DateTimeField(null=True, blank=True)

    annulled_at = models.DateTimeField(null=True, blank=True)
    annulled_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="annulled_sales",
    )
    annulment_reason = models.TextField(blank=True, default="")

    notes = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["branch", "numbering_scope", "receipt_number"],
                name="uniq_receipt_number_per_scope",
            ),
        ]
        indexes = [
            models.Index(fields=["created_at"], name="sale_created_idx"),
            models.Index(fields=["status"], name="sale_status_idx"),
            models.Index(fields=["branch", "sale_date"], name="sale_branch_date_idx"),
        ]

    _IMMUTABLE_FIELDS_AFTER_POST = (
        "receipt_number",
        "numbering_scope",
        "receipt_type_id",
        "branch_id",
        "customer_id",
        "sale_date",
        "subtotal_gross",
        "items_discount",
        "subtotal_net",
        "total_iva",
        "discount_type",
        "discount_value",
        "discount",
        "iibb",
        "internal_tax",
        "total",
        "store_credit_applied",
        "cash_register_id",
        "converted_from_budget_id",
    )

    TERMINAL_STATUSES = (STATUS_ANNULLED, STATUS_CANCELLED)

    @property
    def is_budget(self) -> bool:
        return bool(self.receipt_type_id) and self.receipt_type.is_budget

    def _validate_immutable(self, previous: "Sale"):
        if previous.status in self.TERMINAL_STATUSES and self.status != previous.status:
            raise ValueError(
                f"Sale is {previous.status}. "
                f"Status change {previous.status} -> {self.status} is not allowed."
            )

        if previous.status == self.STATUS_DRAFT:
            return

        for field in self._IMMUTABLE_FIELDS_AFTER_POST:
            if getattr(self, field) != getattr(previous, field):
                raise ValueError(
                    f"Sale is immutable once {previous.status}. "
                    f"Field '{field}' cannot be changed."
                )

    def save(self, *args, **kwargs):
        if self.pk and not self._state.adding:
            previous = Sale.objects.filter(pk=self.pk).first()
            if previous is not None:
                self._validate_immutable(previous)

        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError("Sales are never deleted; annul or cancel them instead.")

    def __str__(self):
        code = getattr(self.receipt_type, "code", "")
        return f"{code} {self.receipt_number} | {self.total}"
