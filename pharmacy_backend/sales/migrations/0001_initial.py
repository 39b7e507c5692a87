# sales/migrations/0001_initial.py

import uuid
from decimal import Decimal

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


MONEY = dict(decimal_places=2, max_digits=12)


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("products", "0001_initial"),
        ("tenants", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Customer",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                ("phone", models.CharField(blank=True, max_length=50)),
                ("email", models.EmailField(blank=True, max_length=254)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "tenant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="customers",
                        to="tenants.tenant",
                    ),
                ),
            ],
            options={
                "ordering": ["name"],
                "indexes": [
                    models.Index(fields=["tenant", "phone"], name="customer_tenant_phone_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Sale",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "sale_number",
                    models.CharField(help_text="System-generated, tenant-unique (SAL00000001)", max_length=32),
                ),
                ("customer_name", models.CharField(blank=True, max_length=255)),
                ("customer_phone", models.CharField(blank=True, max_length=50)),
                ("subtotal", models.DecimalField(default=Decimal("0.00"), **MONEY)),
                ("tax_amount", models.DecimalField(default=Decimal("0.00"), **MONEY)),
                ("discount_amount", models.DecimalField(default=Decimal("0.00"), **MONEY)),
                ("total_amount", models.DecimalField(default=Decimal("0.00"), **MONEY)),
                ("declared_discount_amount", models.DecimalField(default=Decimal("0.00"), **MONEY)),
                ("effective_tax_rate", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=6)),
                (
                    "pricing_mode",
                    models.CharField(
                        default="EXCLUSIVE",
                        help_text="Tenant VAT pricing mode at the time of sale.",
                        max_length=16,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("PENDING", "Pending"),
                            ("COMPLETED", "Completed"),
                            ("SUSPENDED", "Suspended"),
                            ("CANCELLED", "Cancelled"),
                            ("REFUNDED", "Refunded"),
                        ],
                        default="COMPLETED",
                        max_length=16,
                    ),
                ),
                (
                    "return_status",
                    models.CharField(
                        choices=[
                            ("NONE", "No returns"),
                            ("PARTIAL", "Partially returned"),
                            ("FULL", "Fully returned"),
                        ],
                        default="NONE",
                        max_length=16,
                    ),
                ),
                ("is_credit_sale", models.BooleanField(default=False)),
                ("notes", models.TextField(blank=True)),
                ("sale_date", models.DateTimeField(default=django.utils.timezone.now)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "branch",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="sales",
                        to="tenants.branch",
                    ),
                ),
                (
                    "cashier",
                    models.ForeignKey(
                        help_text="Cashier / staff who processed the sale",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="sales",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "customer",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="sales",
                        to="sales.customer",
                    ),
                ),
                (
                    "tenant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="sales",
                        to="tenants.tenant",
                    ),
                ),
            ],
            options={
                "ordering": ["-sale_date", "-created_at"],
                "indexes": [
                    models.Index(fields=["tenant", "sale_date"], name="sale_tenant_date_idx"),
                    models.Index(fields=["tenant", "status"], name="sale_tenant_status_idx"),
                    models.Index(fields=["cashier", "sale_date"], name="sale_cashier_date_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("tenant", "sale_number"), name="uniq_sale_number_per_tenant"),
                ],
            },
        ),
        migrations.CreateModel(
            name="SaleLineItem",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("quantity", models.PositiveIntegerField()),
                ("unit_price", models.DecimalField(**MONEY)),
                ("discount_percentage", models.DecimalField(blank=True, decimal_places=2, max_digits=5, null=True)),
                ("discount_amount", models.DecimalField(default=Decimal("0.00"), **MONEY)),
                ("net_amount", models.DecimalField(default=Decimal("0.00"), **MONEY)),
                ("tax_percentage", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=5)),
                ("tax_amount", models.DecimalField(default=Decimal("0.00"), **MONEY)),
                ("line_total", models.DecimalField(default=Decimal("0.00"), **MONEY)),
                ("returned_quantity", models.PositiveIntegerField(default=0)),
                ("batch_number", models.CharField(blank=True, default="", max_length=128)),
                ("expiry_date", models.DateField(blank=True, null=True)),
                ("prescription_reference", models.CharField(blank=True, max_length=128)),
                ("notes", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "inventory",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="sale_line_items",
                        to="products.inventory",
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="sale_line_items",
                        to="products.product",
                    ),
                ),
                (
                    "sale",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="line_items",
                        to="sales.sale",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at"],
                "indexes": [
                    models.Index(fields=["sale"], name="saleline_sale_idx"),
                    models.Index(fields=["product"], name="saleline_product_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("returned_quantity__lte", models.F("quantity"))),
                        name="sale_line_returned_lte_quantity",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("line_total__gte", 0)),
                        name="sale_line_total_non_negative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="SalePayment",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "payment_method",
                    models.CharField(
                        choices=[
                            ("CASH", "Cash"),
                            ("TILL", "Till"),
                            ("FAMILY_BANK", "Family Bank"),
                            ("WATU_SIMU", "Watu Simu"),
                            ("MOGO", "Mogo"),
                            ("ONFON_N1", "Onfon N1"),
                            ("ONFON_N2", "Onfon N2"),
                            ("ONFON_GLEX", "Onfon Glex"),
                            ("CREDIT", "Credit"),
                        ],
                        max_length=32,
                    ),
                ),
                ("amount", models.DecimalField(default=Decimal("0.00"), **MONEY)),
                ("reference_number", models.CharField(blank=True, default="", max_length=128)),
                ("notes", models.CharField(blank=True, default="", max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "sale",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="payments",
                        to="sales.sale",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at"],
                "indexes": [
                    models.Index(fields=["sale"], name="salepay_sale_idx"),
                    models.Index(fields=["payment_method"], name="salepay_method_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="SaleReturn",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("return_number", models.CharField(max_length=32)),
                ("return_reason", models.TextField()),
                ("total_refund_amount", models.DecimalField(default=Decimal("0.00"), **MONEY)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("PENDING", "Pending"),
                            ("APPROVED", "Approved"),
                            ("PROCESSED", "Processed"),
                            ("REJECTED", "Rejected"),
                        ],
                        default="PROCESSED",
                        max_length=16,
                    ),
                ),
                ("notes", models.TextField(blank=True)),
                ("return_date", models.DateTimeField(default=django.utils.timezone.now)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "original_sale",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="returns",
                        to="sales.sale",
                    ),
                ),
                (
                    "processed_by",
                    models.ForeignKey(
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="processed_returns",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "tenant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="sale_returns",
                        to="tenants.tenant",
                    ),
                ),
            ],
            options={
                "ordering": ["-return_date"],
                "indexes": [
                    models.Index(fields=["tenant", "return_date"], name="salereturn_tenant_date_idx"),
                    models.Index(fields=["original_sale"], name="salereturn_sale_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("tenant", "return_number"), name="uniq_return_number_per_tenant"),
                ],
            },
        ),
        migrations.CreateModel(
            name="SaleReturnLineItem",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("quantity_returned", models.PositiveIntegerField()),
                ("unit_price", models.DecimalField(**MONEY)),
                ("refund_amount", models.DecimalField(**MONEY)),
                ("restore_to_inventory", models.BooleanField(default=True)),
                ("notes", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "original_sale_line_item",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="return_lines",
                        to="sales.salelineitem",
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="return_lines",
                        to="products.product",
                    ),
                ),
                (
                    "sale_return",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="line_items",
                        to="sales.salereturn",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at"],
                "indexes": [
                    models.Index(fields=["original_sale_line_item"], name="returnline_sale_line_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="SaleEditRequest",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "request_type",
                    models.CharField(
                        choices=[("PRICE_CHANGE", "Price change"), ("LINE_DELETE", "Line delete")],
                        max_length=16,
                    ),
                ),
                ("new_unit_price", models.DecimalField(blank=True, null=True, **MONEY)),
                ("original_unit_price", models.DecimalField(blank=True, null=True, **MONEY)),
                ("reason", models.TextField()),
                (
                    "status",
                    models.CharField(
                        choices=[("PENDING", "Pending"), ("APPROVED", "Approved"), ("REJECTED", "Rejected")],
                        default="PENDING",
                        max_length=16,
                    ),
                ),
                ("approved_at", models.DateTimeField(blank=True, null=True)),
                ("rejection_reason", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "approved_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="decided_sale_edit_requests",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "requested_by",
                    models.ForeignKey(
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="sale_edit_requests",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "sale",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="edit_requests",
                        to="sales.sale",
                    ),
                ),
                (
                    "sale_line_item",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="edit_requests",
                        to="sales.salelineitem",
                    ),
                ),
                (
                    "tenant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="sale_edit_requests",
                        to="tenants.tenant",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["tenant", "status"], name="editreq_tenant_status_idx"),
                    models.Index(fields=["sale"], name="editreq_sale_idx"),
                ],
            },
        ),
    ]
