import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("tables", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="MenuItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100)),
                ("category", models.CharField(choices=[("APPETIZER", "Appetizer"), ("MAIN_COURSE", "Main course"), ("SIDE_DISH", "Side dish"), ("DESSERT", "Dessert"), ("BEVERAGE", "Beverage"), ("ALCOHOLIC_BEVERAGE", "Alcoholic beverage")], default="MAIN_COURSE", max_length=20)),
                ("unit_price_p", models.PositiveIntegerField()),
                ("available", models.BooleanField(default=True)),
            ],
        ),
        migrations.CreateModel(
            name="Tab",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("tab_type", models.CharField(choices=[("TABLE", "Table"), ("COUNTER", "Counter")], default="TABLE", max_length=10)),
                ("status", models.CharField(choices=[("OPEN", "Open"), ("CLOSED", "Closed"), ("CANCELLED", "Cancelled")], default="OPEN", max_length=10)),
                ("total_p", models.PositiveIntegerField(default=0)),
                ("service_charge_included", models.BooleanField(default=False)),
                ("service_charge_paid_separately", models.BooleanField(default=False)),
                ("service_charge_p", models.PositiveIntegerField(default=0)),
                ("final_total_p", models.PositiveIntegerField(blank=True, null=True)),
                ("payment_method", models.CharField(blank=True, choices=[("CASH", "Cash"), ("CREDIT_CARD", "Credit card"), ("DEBIT_CARD", "Debit card"), ("PIX", "PIX")], max_length=20, null=True)),
                ("paid_amount_p", models.PositiveIntegerField(blank=True, null=True)),
                ("change_amount_p", models.PositiveIntegerField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("customer_seated_at", models.DateTimeField(blank=True, null=True)),
                ("bill_requested_at", models.DateTimeField(blank=True, null=True)),
                ("paid_at", models.DateTimeField(blank=True, null=True)),
                ("closed_at", models.DateTimeField(blank=True, null=True)),
                ("table", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="tabs", to="tables.table")),
            ],
        ),
        migrations.CreateModel(
            name="Party",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("tab", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name="party", to="tabs.tab")),
            ],
        ),
        migrations.CreateModel(
            name="Order",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("quantity", models.PositiveIntegerField()),
                ("unit_price_p", models.PositiveIntegerField()),
                ("line_total_p", models.PositiveIntegerField()),
                ("status", models.CharField(choices=[("PENDING", "Pending"), ("PREPARING", "Preparing"), ("READY", "Ready"), ("DELIVERED", "Delivered")], default="PENDING", max_length=10)),
                ("notes", models.TextField(blank=True, default="")),
                ("service_charge_included", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("sent_to_kitchen_at", models.DateTimeField(blank=True, null=True)),
                ("started_preparing_at", models.DateTimeField(blank=True, null=True)),
                ("ready_at", models.DateTimeField(blank=True, null=True)),
                ("delivered_at", models.DateTimeField(blank=True, null=True)),
                ("menu_item", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="orders", to="tabs.menuitem")),
                ("tab", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="orders", to="tabs.tab")),
            ],
            options={
                "ordering": ["created_at", "id"],
            },
        ),
    ]
