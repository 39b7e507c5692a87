# tenants/models/document_sequence.py

"""
Per-tenant document counters (sale numbers, return numbers).

The counter row is locked with select_for_update() while it is
incremented, so two concurrent writers never receive the same value.
"""

import uuid

from django.db import models

from .tenant import Tenant


class DocumentSequence(models.Model):
    class Kind(models.TextChoices):
        SALE = "SALE", "Sale"
        RETURN = "RETURN", "Sale Return"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    tenant = models.ForeignKey(
        Tenant,
        on_delete=models.CASCADE,
        related_name="document_sequences",
    )

    kind = models.CharField(max_length=16, choices=Kind.choices)

    last_value = models.PositiveBigIntegerField(default=0)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["tenant", "kind"],
                name="uniq_document_sequence_per_tenant_kind",
            ),
        ]

    def __str__(self):
        return f"{self.tenant_id} | {self.kind} | {self.last_value}"
