import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="PaymentRecord",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("signature", models.CharField(max_length=128, unique=True)),
                ("sender", models.CharField(max_length=64)),
                ("receiver", models.CharField(max_length=64)),
                ("amount_lamports", models.BigIntegerField()),
                ("amount_sol", models.DecimalField(decimal_places=9, max_digits=20)),
                ("timestamp", models.DateTimeField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="VanityOrder",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("signature", models.CharField(max_length=128, unique=True)),
                (
                    "payment",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="order",
                        to="vanitygate.paymentrecord",
                    ),
                ),
                ("payer", models.CharField(db_index=True, max_length=64)),
                ("amount_sol", models.DecimalField(decimal_places=9, max_digits=20)),
                ("is_paid", models.BooleanField(default=False)),
                ("is_used", models.BooleanField(default=False)),
                ("is_generated", models.BooleanField(default=False)),
                ("requested_word", models.CharField(blank=True, default="", max_length=32)),
                ("used_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["created_at"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("is_used", False), ("is_paid", True), _connector="OR"),
                        name="vanity_order_used_implies_paid",
                    ),
                ],
            },
        ),
    ]
