# current_accounts/models/party.py

import uuid

from django.db import models


class _Party(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=255)
    tax_id = models.CharField(max_length=32, blank=True, default="")
    email = models.EmailField(blank=True, default="")
    phone = models.CharField(max_length=50, blank=True, default="")

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        abstract = True
        ordering = ["name"]

    def __str__(self):
        return self.name


class Customer(_Party):
    class Meta(_Party.Meta):
        pass


class Supplier(_Party):
    class Meta(_Party.Meta):
        pass
