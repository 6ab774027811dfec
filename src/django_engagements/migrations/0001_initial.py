# Generated manually for standalone django-engagements package

import uuid

import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


STATUS_CHOICES = [
    ("awaiting_confirmation", "Awaiting confirmation"),
    ("requested", "Requested"),
    ("confirmed", "Confirmed"),
    ("ready_for_pickup", "Ready for pickup"),
    ("out_for_delivery", "Out for delivery"),
    ("in_progress", "In progress"),
    ("completed", "Completed"),
    ("cancelled", "Cancelled"),
    ("expired", "Expired"),
    ("no_show", "No show"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Engagement",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, primary_key=True, serialize=False
                    ),
                ),
                (
                    "kind",
                    models.CharField(
                        choices=[("order", "Order"), ("booking", "Booking")],
                        max_length=20,
                    ),
                ),
                (
                    "resource_id",
                    models.CharField(help_text="Listed product or service", max_length=64),
                ),
                ("buyer_id", models.CharField(max_length=64)),
                ("seller_id", models.CharField(max_length=64)),
                (
                    "scope_id",
                    models.CharField(
                        help_text="Locality shared by buyer and seller at creation time",
                        max_length=64,
                    ),
                ),
                ("total_price", models.DecimalField(decimal_places=2, max_digits=12)),
                ("currency", models.CharField(max_length=3)),
                ("status", models.CharField(choices=STATUS_CHOICES, max_length=32)),
                ("notes", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("confirmed_at", models.DateTimeField(blank=True, null=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                ("cancellation_reason", models.TextField(blank=True, default="")),
                ("start_time", models.DateTimeField(blank=True, null=True)),
                ("end_time", models.DateTimeField(blank=True, null=True)),
                ("duration_minutes", models.PositiveIntegerField(blank=True, null=True)),
                ("location", models.CharField(blank=True, default="", max_length=255)),
                ("quantity", models.PositiveIntegerField(blank=True, null=True)),
                (
                    "delivery_method",
                    models.CharField(
                        blank=True,
                        choices=[("pickup", "Pickup"), ("delivery", "Delivery")],
                        default="",
                        max_length=20,
                    ),
                ),
                ("pickup_location", models.CharField(blank=True, default="", max_length=255)),
                ("delivery_address", models.CharField(blank=True, default="", max_length=255)),
                ("scheduled_for", models.DateTimeField(blank=True, null=True)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["kind", "status", "created_at"], name="eng_kind_status_created_idx"
                    ),
                    models.Index(fields=["resource_id", "start_time"], name="eng_resource_start_idx"),
                    models.Index(fields=["buyer_id"], name="eng_buyer_idx"),
                    models.Index(fields=["seller_id"], name="eng_seller_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("buyer_id", models.F("seller_id")), _negated=True),
                        name="engagements_no_self_dealing",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(("kind", "booking"), _negated=True),
                            ("start_time__lt", models.F("end_time")),
                            _connector="OR",
                        ),
                        name="engagements_booking_interval_ordered",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(("kind", "order"), _negated=True),
                            ("quantity__gte", 1),
                            _connector="OR",
                        ),
                        name="engagements_order_quantity_positive",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="EngagementStatusChange",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                (
                    "from_status",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Empty for the entry recording creation",
                        max_length=32,
                    ),
                ),
                ("status", models.CharField(choices=STATUS_CHOICES, max_length=32)),
                (
                    "actor",
                    models.CharField(
                        help_text="Party id of the requester, or SYSTEM for the lifecycle sweep",
                        max_length=64,
                    ),
                ),
                ("reason", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "engagement",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="history",
                        to="django_engagements.engagement",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at", "id"],
                "indexes": [
                    models.Index(
                        fields=["engagement", "created_at"], name="eng_history_created_idx"
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="ResourceSchedule",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                ("resource_id", models.CharField(max_length=64, unique=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
        ),
    ]
