# core/references.py

"""
LEDGER REFERENCES (TAGGED UNION)

Ledger rows (stock, cash, current account) point back at the document that
caused them through a `{kind, id}` pair instead of a free-form polymorphic
string.

Known kinds map to concrete models and can be resolved; unknown kinds are
rejected when building a Reference.
"""

from __future__ import annotations

from dataclasses import dataclass

from django.apps import apps

from core.exceptions import NotFoundError, ValidationError

SALE = "sale"
SALE_ANNULMENT = "sale_annulment"
ACCOUNT_PAYMENT = "account_payment"
CASH_REGISTER = "cash_register"
MANUAL = "manual"

# kind -> "app_label.ModelName" (None = not resolvable to a row)
REFERENCE_MODELS = {
    SALE: "sales.Sale",
    SALE_ANNULMENT: "sales.Sale",
    ACCOUNT_PAYMENT: "current_accounts.CurrentAccountMovement",
    CASH_REGISTER: "cash.CashRegister",
    MANUAL: None,
}

REFERENCE_KIND_CHOICES = [(k, k.replace("_", " ").title()) for k in REFERENCE_MODELS]


@dataclass(frozen=True)
class Reference:
    kind: str
    id: str | None = None

    def __post_init__(self):
        if self.kind not in REFERENCE_MODELS:
            raise ValidationError(
                f"Unknown reference kind '{self.kind}'",
                reference_kind=self.kind,
            )

    @classmethod
    def to(cls, kind: str, obj) -> "Reference":
        return cls(kind=kind, id=str(obj.pk))

    @property
    def model(self):
        label = REFERENCE_MODELS[self.kind]
        return apps.get_model(label) if label else None

    def resolve(self):
        model = self.model
        if model is None or not self.id:
            return None
        try:
            return model.objects.get(pk=self.id)
        except model.DoesNotExist as exc:
            raise NotFoundError(
                f"{self.kind} {self.id} not found",
                reference_kind=self.kind,
                reference_id=self.id,
            ) from exc

    def as_fields(self) -> dict:
        return {"reference_kind": self.kind, "reference_id": self.id or ""}


def reference_of(row) -> Reference | None:
    kind = getattr(row, "reference_kind", "") or ""
    if not kind:
        return None
    return Reference(kind=kind, id=getattr(row, "reference_id", "") or None)
