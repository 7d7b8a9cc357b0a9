from django.db import models


class PaymentMethodModel(models.Model):
    """A configured payment method instance, e.g. ``ogone|default``."""

    instance_id = models.CharField(max_length=128, primary_key=True)
    method_id = models.CharField(max_length=64, db_index=True)
    enabled = models.BooleanField(default=True)
    settings = models.JSONField(default=dict, blank=True)

    class Meta:
        db_table = "payment_methods"

    def __str__(self):
        return self.instance_id


class PaymentTransactionModel(models.Model):
    class Status(models.TextChoices):
        SUCCESS = "SUCCESS"
        PENDING = "PENDING"
        FAILURE = "FAILURE"

    # Gateway name the transaction was collected through
    payment_method = models.CharField(max_length=64)
    order = models.ForeignKey(
        "orders.OrderModel",
        on_delete=models.PROTECT,
        related_name="payment_transactions",
    )
    instance_id = models.CharField(max_length=128, blank=True, default="")
    remote_id = models.CharField(max_length=64)
    currency = models.CharField(max_length=3, blank=True, default="")
    amount_cents = models.PositiveBigIntegerField(default=0)
    remote_status = models.CharField(max_length=32, blank=True, default="")
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.PENDING)
    message = models.CharField(max_length=255, blank=True, default="")
    payload = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    changed_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "payment_transactions"
        ordering = ["id"]
        constraints = [
            models.UniqueConstraint(
                fields=["payment_method", "order", "remote_id"],
                name="uniq_tx_method_order_remote",
            ),
        ]

    def __str__(self):
        return f"{self.payment_method}:{self.remote_id} (order {self.order_id})"
