# cash/models/movement_type.py

import uuid

from django.db import models


class MovementType(models.Model):
    """
    Classifies a cash / current-account movement and fixes its direction.

    System types (sale, sale annulment, account payment, ...) are resolved
    by code through MovementType.system(code).
    """

    ENTRADA = "entrada"
    SALIDA = "salida"

    OPERATION_CHOICES = [
        (ENTRADA, "Inflow"),
        (SALIDA, "Outflow"),
    ]

    SALE = "sale"
    SALE_ANNULMENT = "sale_annulment"
    ACCOUNT_PAYMENT = "account_payment"
    ACCOUNT_CHARGE = "account_charge"
    ACCOUNT_ANNULMENT = "account_annulment"
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    EXPENSE = "expense"

    # code -> defaults used when the row does not exist yet
    SYSTEM_TYPES = {
        SALE: {
            "name": "Sale",
            "operation_type": ENTRADA,
            "is_cash_movement": True,
            "is_current_account_movement": True,
        },
        SALE_ANNULMENT: {
            "name": "Sale annulment",
            "operation_type": SALIDA,
            "is_cash_movement": True,
            "is_current_account_movement": True,
        },
        ACCOUNT_PAYMENT: {
            "name": "Current account payment",
            "operation_type": ENTRADA,
            "is_cash_movement": True,
            "is_current_account_movement": True,
        },
        ACCOUNT_CHARGE: {
            "name": "Current account charge",
            "operation_type": ENTRADA,
            "is_cash_movement": False,
            "is_current_account_movement": True,
        },
        ACCOUNT_ANNULMENT: {
            "name": "Current account annulment",
            "operation_type": SALIDA,
            "is_cash_movement": False,
            "is_current_account_movement": True,
        },
        DEPOSIT: {
            "name": "Cash deposit",
            "operation_type": ENTRADA,
            "is_cash_movement": True,
            "is_current_account_movement": False,
        },
        WITHDRAWAL: {
            "name": "Cash withdrawal",
            "operation_type": SALIDA,
            "is_cash_movement": True,
            "is_current_account_movement": False,
        },
        EXPENSE: {
            "name": "Expense",
            "operation_type": SALIDA,
            "is_cash_movement": True,
            "is_current_account_movement": False,
        },
    }

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=100)
    code = models.SlugField(max_length=50, unique=True)

    operation_type = models.CharField(max_length=10, choices=OPERATION_CHOICES)

    is_cash_movement = models.BooleanField(default=True)
    is_current_account_movement = models.BooleanField(default=False)
    is_system = models.BooleanField(default=False)

    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["name"]

    @classmethod
    def system(cls, code: str) -> "MovementType":
        defaults = dict(cls.SYSTEM_TYPES[code])
        defaults["is_system"] = True
        obj, _ = cls.objects.get_or_create(code=code, defaults=defaults)
        return obj

    @property
    def sign(self) -> int:
        return 1 if self.operation_type == self.ENTRADA else -1

    def __str__(self):
        return f"{self.name} ({self.operation_type})"
