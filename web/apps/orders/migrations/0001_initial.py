from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="OrderModel",
            fields=[
                ("id", models.PositiveBigIntegerField(primary_key=True, serialize=False)),
                ("group_id", models.CharField(db_index=True, max_length=64)),
                ("vendor", models.CharField(blank=True, default="", max_length=128)),
                ("total_cents", models.PositiveBigIntegerField(default=0)),
                ("currency", models.CharField(default="EUR", max_length=3)),
                ("payment_method", models.CharField(blank=True, default="", max_length=128)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "db_table": "orders",
                "ordering": ["id"],
            },
        ),
    ]
