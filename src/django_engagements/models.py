"""Models for django-engagements.

Provides:
- Engagement: An Order or a Booking, discriminated by `kind`
- EngagementStatusChange: Append-only history of status changes
- ResourceSchedule: Lock row serializing booking creation per resource
"""

import uuid

from django.db import models
from django.db.models import F, Q
from django.utils import timezone

from .exceptions import HistoryImmutableError
from .money import Money


class EngagementKind(models.TextChoices):
    ORDER = "order", "Order"
    BOOKING = "booking", "Booking"


class EngagementStatus(models.TextChoices):
    # Order initial state
    AWAITING_CONFIRMATION = "awaiting_confirmation", "Awaiting confirmation"
    # Booking initial state
    REQUESTED = "requested", "Requested"
    CONFIRMED = "confirmed", "Confirmed"
    READY_FOR_PICKUP = "ready_for_pickup", "Ready for pickup"
    OUT_FOR_DELIVERY = "out_for_delivery", "Out for delivery"
    IN_PROGRESS = "in_progress", "In progress"
    COMPLETED = "completed", "Completed"
    CANCELLED = "cancelled", "Cancelled"
    EXPIRED = "expired", "Expired"
    NO_SHOW = "no_show", "No show"


class DeliveryMethod(models.TextChoices):
    PICKUP = "pickup", "Pickup"
    DELIVERY = "delivery", "Delivery"


class Engagement(models.Model):
    """
    A commercial interaction between a buyer and a seller.

    Orders buy a quantity of a product; bookings reserve a service for a
    time interval. Both share identity, parties, price and lifecycle; the
    kind-specific fields are blank for the other kind.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    kind = models.CharField(max_length=20, choices=EngagementKind.choices)

    # External references (opaque ids owned by collaborators)
    resource_id = models.CharField(max_length=64, help_text="Listed product or service")
    buyer_id = models.CharField(max_length=64)
    seller_id = models.CharField(max_length=64)
    scope_id = models.CharField(
        max_length=64,
        help_text="Locality shared by buyer and seller at creation time"
    )

    # Price is fixed at creation and never recalculated
    total_price = models.DecimalField(max_digits=12, decimal_places=2)
    currency = models.CharField(max_length=3)

    status = models.CharField(max_length=32, choices=EngagementStatus.choices)
    notes = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)
    confirmed_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancellation_reason = models.TextField(blank=True, default="")

    # Booking
    start_time = models.DateTimeField(null=True, blank=True)
    end_time = models.DateTimeField(null=True, blank=True)
    duration_minutes = models.PositiveIntegerField(null=True, blank=True)
    location = models.CharField(max_length=255, blank=True, default="")

    # Order
    quantity = models.PositiveIntegerField(null=True, blank=True)
    delivery_method = models.CharField(
        max_length=20,
        choices=DeliveryMethod.choices,
        blank=True,
        default="",
    )
    pickup_location = models.CharField(max_length=255, blank=True, default="")
    delivery_address = models.CharField(max_length=255, blank=True, default="")
    scheduled_for = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=~Q(buyer_id=F("seller_id")),
                name="engagements_no_self_dealing",
            ),
            models.CheckConstraint(
                condition=~Q(kind="booking") | Q(start_time__lt=F("end_time")),
                name="engagements_booking_interval_ordered",
            ),
            models.CheckConstraint(
                condition=~Q(kind="order") | Q(quantity__gte=1),
                name="engagements_order_quantity_positive",
            ),
        ]
        indexes = [
            models.Index(fields=["kind", "status", "created_at"], name="eng_kind_status_created_idx"),
            models.Index(fields=["resource_id", "start_time"], name="eng_resource_start_idx"),
            models.Index(fields=["buyer_id"], name="eng_buyer_idx"),
            models.Index(fields=["seller_id"], name="eng_seller_idx"),
        ]

    def __str__(self):
        return f"{self.get_kind_display()} {self.pk} ({self.status})"

    @property
    def is_order(self) -> bool:
        return self.kind == EngagementKind.ORDER

    @property
    def is_booking(self) -> bool:
        return self.kind == EngagementKind.BOOKING

    @property
    def is_terminal(self) -> bool:
        from .transitions import get_machine

        return get_machine(self.kind).is_terminal(self.status)

    @property
    def money(self) -> Money:
        return Money(self.total_price, self.currency)

    def role_of(self, party_id) -> str | None:
        """Return 'buyer', 'seller', 'system' or None for a requester id."""
        from .transitions import Role, SYSTEM_ACTOR

        party_id = str(party_id)
        if party_id == SYSTEM_ACTOR:
            return Role.SYSTEM
        if party_id == self.seller_id:
            return Role.SELLER
        if party_id == self.buyer_id:
            return Role.BUYER
        return None

    def counterparty_of(self, party_id) -> str | None:
        party_id = str(party_id)
        if party_id == self.buyer_id:
            return self.seller_id
        if party_id == self.seller_id:
            return self.buyer_id
        return None


class EngagementStatusChange(models.Model):
    """
    One completed status change of an engagement.

    Rows are append-only: created once per transition (including the
    initial status at creation) and never updated or deleted.
    """

    engagement = models.ForeignKey(
        Engagement,
        on_delete=models.PROTECT,
        related_name="history",
    )
    from_status = models.CharField(
        max_length=32,
        blank=True,
        default="",
        help_text="Empty for the entry recording creation"
    )
    status = models.CharField(max_length=32, choices=EngagementStatus.choices)
    actor = models.CharField(
        max_length=64,
        help_text="Party id of the requester, or SYSTEM for the lifecycle sweep"
    )
    reason = models.TextField(blank=True, default="")
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["engagement", "created_at"], name="eng_history_created_idx"),
        ]

    def __str__(self):
        return f"{self.engagement_id}: {self.from_status or '-'} -> {self.status} by {self.actor}"

    def save(self, *args, **kwargs):
        if self.pk is not None and not self._state.adding:
            raise HistoryImmutableError(self.pk)
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise HistoryImmutableError(self.pk)


class ResourceSchedule(models.Model):
    """
    Per-resource lock row for booking creation.

    Booking creation locks this row with SELECT ... FOR UPDATE before the
    overlap check, so concurrent requests for one resource run the
    check-then-insert sequence one at a time, across processes.
    """

    resource_id = models.CharField(max_length=64, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"Schedule for {self.resource_id}"
