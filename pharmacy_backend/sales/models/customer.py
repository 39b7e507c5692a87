# sales/models/customer.py

import uuid

from django.db import models

from tenants.models import Tenant


class Customer(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    tenant = models.ForeignKey(
        Tenant, on_delete=models.CASCADE, related_name="customers"
    )

    name = models.CharField(max_length=255)
    phone = models.CharField(max_length=50, blank=True)
    email = models.EmailField(blank=True)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["tenant", "phone"], name="customer_tenant_phone_idx"),
        ]

    def __str__(self):
        return self.name
