import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("tabs", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Payment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("method", models.CharField(choices=[("CASH", "Cash"), ("CREDIT_CARD", "Credit card"), ("DEBIT_CARD", "Debit card"), ("PIX", "PIX")], max_length=20)),
                ("amount_p", models.PositiveIntegerField()),
                ("paid_amount_p", models.PositiveIntegerField()),
                ("change_amount_p", models.PositiveIntegerField(default=0)),
                ("service_charge_p", models.PositiveIntegerField(default=0)),
                ("currency", models.CharField(default="gbp", max_length=3)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("tab", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="payments", to="tabs.tab")),
            ],
        ),
    ]
