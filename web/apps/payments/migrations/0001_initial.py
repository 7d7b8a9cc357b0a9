import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("orders", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="PaymentMethodModel",
            fields=[
                ("instance_id", models.CharField(max_length=128, primary_key=True, serialize=False)),
                ("method_id", models.CharField(db_index=True, max_length=64)),
                ("enabled", models.BooleanField(default=True)),
                ("settings", models.JSONField(blank=True, default=dict)),
            ],
            options={
                "db_table": "payment_methods",
            },
        ),
        migrations.CreateModel(
            name="PaymentTransactionModel",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("payment_method", models.CharField(max_length=64)),
                ("instance_id", models.CharField(blank=True, default="", max_length=128)),
                ("remote_id", models.CharField(max_length=64)),
                ("currency", models.CharField(blank=True, default="", max_length=3)),
                ("amount_cents", models.PositiveBigIntegerField(default=0)),
                ("remote_status", models.CharField(blank=True, default="", max_length=32)),
                (
                    "status",
                    models.CharField(
                        choices=[("SUCCESS", "Success"), ("PENDING", "Pending"), ("FAILURE", "Failure")],
                        default="PENDING",
                        max_length=16,
                    ),
                ),
                ("message", models.CharField(blank=True, default="", max_length=255)),
                ("payload", models.JSONField(blank=True, default=dict)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("changed_at", models.DateTimeField(auto_now=True)),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="payment_transactions",
                        to="orders.ordermodel",
                    ),
                ),
            ],
            options={
                "db_table": "payment_transactions",
                "ordering": ["id"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("payment_method", "order", "remote_id"),
                        name="uniq_tx_method_order_remote",
                    )
                ],
            },
        ),
    ]
