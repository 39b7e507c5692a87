# products/migrations/0001_initial.py

import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("tenants", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Product",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("sku", models.CharField(db_index=True, max_length=128)),
                ("name", models.CharField(db_index=True, max_length=255)),
                ("barcode", models.CharField(blank=True, db_index=True, max_length=128)),
                ("unit_cost", models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ("selling_price", models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                (
                    "tax_classification",
                    models.CharField(
                        choices=[
                            ("STANDARD", "Standard rate"),
                            ("REDUCED", "Reduced rate"),
                            ("ZERO", "Zero rated"),
                            ("EXEMPT", "Exempt"),
                        ],
                        default="STANDARD",
                        max_length=16,
                    ),
                ),
                (
                    "tax_rate",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        help_text="Optional override percent for STANDARD/REDUCED products.",
                        max_digits=5,
                        null=True,
                    ),
                ),
                ("requires_prescription", models.BooleanField(default=False)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "tenant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="products",
                        to="tenants.tenant",
                    ),
                ),
            ],
            options={
                "ordering": ["name"],
                "indexes": [
                    models.Index(fields=["tenant", "name"], name="product_tenant_name_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("tenant", "sku"), name="uniq_product_sku_per_tenant"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Inventory",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("batch_number", models.CharField(blank=True, default="", max_length=128)),
                ("expiry_date", models.DateField(blank=True, null=True)),
                ("quantity", models.IntegerField(default=0)),
                ("unit_cost", models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ("selling_price", models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ("location", models.CharField(blank=True, max_length=128)),
                ("last_restocked", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "branch",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="inventory_lots",
                        to="tenants.branch",
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="inventory_lots",
                        to="products.product",
                    ),
                ),
            ],
            options={
                "verbose_name_plural": "Inventory",
                "ordering": ["created_at"],
                "indexes": [
                    models.Index(fields=["product", "branch"], name="inv_product_branch_idx"),
                    models.Index(fields=["product", "branch", "batch_number"], name="inv_product_branch_batch_idx"),
                    models.Index(fields=["expiry_date"], name="inv_expiry_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("quantity__gte", 0)),
                        name="inventory_quantity_non_negative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="InventoryAuditLog",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "transaction_type",
                    models.CharField(
                        choices=[
                            ("PURCHASE", "Purchase"),
                            ("SALE", "Sale"),
                            ("ADJUSTMENT", "Adjustment"),
                            ("TRANSFER_IN", "Transfer In"),
                            ("TRANSFER_OUT", "Transfer Out"),
                            ("RETURN", "Return"),
                            ("EXPIRY_WRITE_OFF", "Expiry Write-off"),
                            ("DAMAGE_WRITE_OFF", "Damage Write-off"),
                            ("INITIAL_STOCK", "Initial Stock"),
                        ],
                        max_length=32,
                    ),
                ),
                ("quantity_changed", models.IntegerField()),
                ("quantity_before", models.IntegerField()),
                ("quantity_after", models.IntegerField()),
                ("unit_cost", models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ("selling_price", models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ("total_value", models.DecimalField(blank=True, decimal_places=2, max_digits=14, null=True)),
                ("batch_number", models.CharField(blank=True, default="", max_length=128)),
                ("expiry_date", models.DateField(blank=True, null=True)),
                ("source_reference", models.CharField(db_index=True, max_length=64)),
                (
                    "source_type",
                    models.CharField(
                        choices=[
                            ("SALE", "Sale"),
                            ("PURCHASE_ORDER", "Purchase Order"),
                            ("GOODS_RECEIVED_NOTE", "Goods Received Note"),
                            ("INVENTORY_ADJUSTMENT", "Inventory Adjustment"),
                            ("INVENTORY_TRANSFER", "Inventory Transfer"),
                            ("RETURN", "Sale Return"),
                            ("SALE_EDIT", "Sale Edit"),
                            ("EXPIRY_WRITE_OFF", "Expiry Write-off"),
                            ("DAMAGE_WRITE_OFF", "Damage Write-off"),
                            ("INITIAL_STOCK", "Initial Stock"),
                            ("SYSTEM_ADJUSTMENT", "System Adjustment"),
                        ],
                        max_length=32,
                    ),
                ),
                ("source_id", models.UUIDField(blank=True, null=True)),
                ("performed_at", models.DateTimeField(auto_now_add=True)),
                ("notes", models.TextField(blank=True)),
                (
                    "branch",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="inventory_audit_logs",
                        to="tenants.branch",
                    ),
                ),
                (
                    "inventory",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="audit_logs",
                        to="products.inventory",
                    ),
                ),
                (
                    "performed_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="inventory_audit_logs",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="inventory_audit_logs",
                        to="products.product",
                    ),
                ),
                (
                    "tenant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="inventory_audit_logs",
                        to="tenants.tenant",
                    ),
                ),
            ],
            options={
                "ordering": ["performed_at"],
                "indexes": [
                    models.Index(fields=["tenant", "source_reference", "source_type"], name="invaudit_tenant_source_idx"),
                    models.Index(fields=["product", "performed_at"], name="invaudit_product_time_idx"),
                    models.Index(fields=["branch", "performed_at"], name="invaudit_branch_time_idx"),
                    models.Index(fields=["transaction_type"], name="invaudit_txn_type_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("transaction_type", "SALE")),
                        fields=("tenant", "source_reference", "source_type", "inventory"),
                        name="uniq_sale_deduction_per_source_and_lot",
                    ),
                ],
            },
        ),
    ]
