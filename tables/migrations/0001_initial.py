import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Waiter",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100)),
                ("active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
        ),
        migrations.CreateModel(
            name="Table",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("number", models.PositiveIntegerField(unique=True)),
                ("capacity", models.PositiveIntegerField(default=4)),
                ("location", models.CharField(blank=True, default="", max_length=100)),
                ("status", models.CharField(choices=[("AVAILABLE", "Available"), ("OCCUPIED", "Occupied"), ("RESERVED", "Reserved"), ("PAID_PENDING_RELEASE", "Paid, pending release")], default="AVAILABLE", max_length=25)),
                ("occupied_at", models.DateTimeField(blank=True, null=True)),
                ("all_tabs_paid_at", models.DateTimeField(blank=True, null=True)),
                ("released_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("waiter", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="tables", to="tables.waiter")),
            ],
            options={
                "ordering": ["number"],
            },
        ),
    ]
