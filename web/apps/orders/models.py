from django.db import models


class OrderModel(models.Model):
    # Local mirror of the commerce core's orders; ids are the core's own
    id = models.PositiveBigIntegerField(primary_key=True)

    # Shared by the sibling orders of one checkout (one order per vendor)
    group_id = models.CharField(max_length=64, db_index=True)
    vendor = models.CharField(max_length=128, blank=True, default="")
    total_cents = models.PositiveBigIntegerField(default=0)
    currency = models.CharField(max_length=3, default="EUR")
    # Instance id of the selected payment method, e.g. "ogone|default"
    payment_method = models.CharField(max_length=128, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "orders"
        ordering = ["id"]

    def __str__(self):
        return f"order {self.id} (group {self.group_id})"
