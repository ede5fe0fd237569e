# sales/models/receipt_type.py

import uuid

from django.db import models


class ReceiptType(models.Model):
    """
    Kind of commercial document (invoice A/B/C, ticket, budget, ...).

    - is_budget: quote / draft document with no ledger side effects
    - requires_authorization: must be authorized by the e-invoicing
      collaborator after the sale commits
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=100)
    code = models.CharField(max_length=10, unique=True)

    is_budget = models.BooleanField(default=False)
    requires_authorization = models.BooleanField(default=False)

    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["code"]

    def __str__(self):
        return f"{self.code} - {self.name}"
