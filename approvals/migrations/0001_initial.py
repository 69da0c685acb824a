import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("tabs", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="CancellationRequest",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("category", models.CharField(choices=[("CUSTOMER_LEFT", "Customer left"), ("OPENED_BY_MISTAKE", "Opened by mistake"), ("DUPLICATE_TAB", "Duplicate tab"), ("CUSTOMER_COMPLAINT", "Customer complaint"), ("OTHER", "Other")], default="OTHER", max_length=20)),
                ("reason", models.TextField(blank=True, default="")),
                ("status", models.CharField(choices=[("PENDING", "Pending"), ("APPROVED", "Approved"), ("REJECTED", "Rejected")], default="PENDING", max_length=10)),
                ("resolved_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("approved_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="resolved_cancellation_requests", to=settings.AUTH_USER_MODEL)),
                ("requested_by", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="cancellation_requests", to=settings.AUTH_USER_MODEL)),
                ("tab", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="cancellation_requests", to="tabs.tab")),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "constraints": [
                    models.UniqueConstraint(condition=models.Q(("status", "PENDING")), fields=("tab",), name="one_pending_cancellation_per_tab"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ReturnRequest",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("category", models.CharField(choices=[("QUALITY", "Quality"), ("WRONG_ITEM", "Wrong item"), ("SERVICE", "Service"), ("OTHER", "Other")], max_length=20)),
                ("subcategory", models.CharField(max_length=30)),
                ("description", models.TextField(blank=True, default="")),
                ("source_type", models.CharField(blank=True, choices=[("TAB", "Tab"), ("TABLE", "Table")], max_length=10, null=True)),
                ("source_id", models.CharField(blank=True, max_length=50, null=True)),
                ("image_url", models.CharField(blank=True, default="", max_length=500)),
                ("status", models.CharField(choices=[("PENDING", "Pending"), ("APPROVED", "Approved"), ("REJECTED", "Rejected")], default="PENDING", max_length=10)),
                ("resolved_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("created_by", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="return_requests", to=settings.AUTH_USER_MODEL)),
                ("order", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="return_requests", to="tabs.order")),
                ("resolved_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="resolved_return_requests", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at", "-id"],
            },
        ),
    ]
