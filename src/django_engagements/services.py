"""Service functions for engagement management.

Provides:
- create_order / create_booking: Open a new engagement for a buyer
- update_status: The single path for every status change (clients and sweep)
- confirm, cancel, complete, start_service, mark_*: Fixed-target wrappers
- get_available_slots: Booked intervals of a service on a given day

All writes are atomic. Notifications and chat threads are dispatched after
the write commits and never affect its outcome.
"""

import logging
from datetime import date, datetime, time, timedelta

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from . import conf
from .conflicts import has_conflict, lock_resource_schedule, overlapping_bookings
from .exceptions import (
    DurationMismatch,
    EngagementNotFound,
    EngagementValidationError,
    InvalidTimeRange,
    MissingDeliveryDetails,
    NotAParty,
    ResourceNotFound,
    ResourceUnavailable,
    SchedulingConflict,
    ScopeMismatch,
    SelfDealingError,
    UnverifiedParty,
)
from .models import (
    DeliveryMethod,
    Engagement,
    EngagementKind,
    EngagementStatus,
    EngagementStatusChange,
)
from .notifications import dispatch_transition_effects, notify_created
from .pricing import booking_total, order_total
from .providers import Resource, ResourceKind
from .transitions import TIMESTAMP_FIELDS, get_machine, validate_transition
from .value_objects import BookedSlot, BookingRequest, OrderRequest

logger = logging.getLogger(__name__)


# =============================================================================
# Creation helpers
# =============================================================================


def _load_resource(resource_id: str, expected_kind: str) -> Resource:
    resource = conf.get_resource_provider().get_resource(resource_id)
    if resource is None:
        raise ResourceNotFound(resource_id)

    if resource.kind != expected_kind:
        if expected_kind == ResourceKind.PRODUCT:
            raise ResourceUnavailable("Orders are only for products. Use bookings for services.")
        raise ResourceUnavailable("Bookings are only for services. Use orders for products.")

    if resource.status != conf.get_setting("ACTIVE_RESOURCE_STATUS"):
        raise ResourceUnavailable(f"'{resource.title or resource.id}' is not currently available")

    return resource


def _resolve_shared_scope(buyer_id: str, seller_id: str, noun: str) -> str:
    """Return the first of the buyer's scopes that the seller also belongs to."""
    directory = conf.get_party_directory()

    buyer_scopes = directory.get_party_scopes(buyer_id)
    if not buyer_scopes:
        raise UnverifiedParty("Buyer must be a verified member of a scope")

    seller_scopes = directory.get_party_scopes(seller_id) or []
    for scope_id in buyer_scopes:
        if scope_id in seller_scopes:
            return str(scope_id)

    raise ScopeMismatch(f"{noun} are only allowed between members of the same scope")


def _record_change(engagement: Engagement, from_status: str, actor: str,
                   reason: str | None, at: datetime) -> EngagementStatusChange:
    return EngagementStatusChange.objects.create(
        engagement=engagement,
        from_status=from_status,
        status=engagement.status,
        actor=actor,
        reason=reason or "",
        created_at=at,
    )


# =============================================================================
# Orders
# =============================================================================


def _validate_delivery(request: OrderRequest) -> None:
    if request.delivery_method not in DeliveryMethod.values:
        raise EngagementValidationError(
            f"Delivery method must be one of: {', '.join(DeliveryMethod.values)}"
        )
    if request.delivery_method == DeliveryMethod.PICKUP and not request.pickup_location:
        raise MissingDeliveryDetails("Pickup location is required for pickup orders")
    if request.delivery_method == DeliveryMethod.DELIVERY and not request.delivery_address:
        raise MissingDeliveryDetails("Delivery address is required for delivery orders")


def create_order(buyer_id, request: OrderRequest) -> Engagement:
    """
    Place an order for a product.

    Steps:
    1. Resource exists, is a product and is active
    2. Buyer has a verified scope membership
    3. Buyer and seller share a scope
    4. Buyer is not the seller
    5. Delivery method has its required field
    6. Price computed once; order saved as awaiting_confirmation with
       one history entry by the buyer

    Raises:
        ResourceNotFound, ResourceUnavailable, UnverifiedParty, ScopeMismatch,
        SelfDealingError, MissingDeliveryDetails, EngagementValidationError
    """
    buyer_id = str(buyer_id)
    resource = _load_resource(request.resource_id, ResourceKind.PRODUCT)
    scope_id = _resolve_shared_scope(buyer_id, resource.seller_id, "Orders")

    if buyer_id == resource.seller_id:
        raise SelfDealingError("You cannot order your own listing")

    _validate_delivery(request)
    total = order_total(resource.unit_price, resource.currency, request.quantity)

    order = _create_order_atomic(buyer_id, resource, scope_id, request, total)
    logger.info(f"Order {order.pk} placed by {buyer_id} for resource {resource.id}")

    transaction.on_commit(lambda: notify_created(order, resource.title))
    return order


@transaction.atomic
def _create_order_atomic(buyer_id, resource, scope_id, request, total) -> Engagement:
    now = conf.now()
    order = Engagement.objects.create(
        kind=EngagementKind.ORDER,
        resource_id=resource.id,
        buyer_id=buyer_id,
        seller_id=resource.seller_id,
        scope_id=scope_id,
        total_price=total.amount,
        currency=total.currency,
        status=get_machine(EngagementKind.ORDER).initial,
        created_at=now,
        quantity=request.quantity,
        delivery_method=request.delivery_method,
        pickup_location=request.pickup_location or "",
        delivery_address=request.delivery_address or "",
        scheduled_for=request.scheduled_for,
        notes=request.notes or "",
    )
    _record_change(order, "", buyer_id, None, now)
    return order


# =============================================================================
# Bookings
# =============================================================================


def _validate_interval(request: BookingRequest, now: datetime) -> None:
    start, end = request.start, request.end

    if timezone.is_naive(start) or timezone.is_naive(end):
        raise InvalidTimeRange("Start and end times must include a timezone")

    if end <= start:
        raise InvalidTimeRange("End time must be after start time")

    if start <= now:
        raise InvalidTimeRange("Start time must be in the future")

    duration = request.duration_minutes
    if isinstance(duration, bool) or not isinstance(duration, int) or duration < 1:
        raise EngagementValidationError("Duration must be a positive whole number of minutes")

    actual_minutes = (end - start).total_seconds() / 60
    tolerance = conf.get_setting("DURATION_TOLERANCE_MINUTES")
    if abs(actual_minutes - duration) > tolerance:
        raise DurationMismatch(duration, actual_minutes)


def create_booking(buyer_id, request: BookingRequest) -> Engagement:
    """
    Request a booking of a service for [start, end).

    Same party checks as create_order, then:
    5. start < end, start strictly in the future, duration within tolerance
    6. No slot-holding booking of the resource overlaps the interval
    7. Price computed once; booking saved as requested

    Steps 6 and 7 run in one transaction holding the resource's schedule
    lock, so two overlapping requests cannot both succeed.

    Raises:
        ResourceNotFound, ResourceUnavailable, UnverifiedParty, ScopeMismatch,
        SelfDealingError, InvalidTimeRange, DurationMismatch, SchedulingConflict
    """
    buyer_id = str(buyer_id)
    resource = _load_resource(request.resource_id, ResourceKind.SERVICE)
    scope_id = _resolve_shared_scope(buyer_id, resource.seller_id, "Bookings")

    if buyer_id == resource.seller_id:
        raise SelfDealingError("You cannot book your own service")

    _validate_interval(request, conf.now())
    total = booking_total(resource.unit_price, resource.currency, request.duration_minutes)

    booking = _create_booking_atomic(buyer_id, resource, scope_id, request, total)
    logger.info(
        f"Booking {booking.pk} requested by {buyer_id} for resource {resource.id} "
        f"({booking.start_time.isoformat()} - {booking.end_time.isoformat()})"
    )

    transaction.on_commit(lambda: notify_created(booking, resource.title))
    return booking


@transaction.atomic
def _create_booking_atomic(buyer_id, resource, scope_id, request, total) -> Engagement:
    # Lock the resource schedule to close the check-then-insert race
    lock_resource_schedule(resource.id)

    if has_conflict(resource.id, request.start, request.end):
        raise SchedulingConflict(resource.id, request.start, request.end)

    now = conf.now()
    booking = Engagement.objects.create(
        kind=EngagementKind.BOOKING,
        resource_id=resource.id,
        buyer_id=buyer_id,
        seller_id=resource.seller_id,
        scope_id=scope_id,
        total_price=total.amount,
        currency=total.currency,
        status=get_machine(EngagementKind.BOOKING).initial,
        created_at=now,
        start_time=request.start,
        end_time=request.end,
        duration_minutes=request.duration_minutes,
        location=request.location or "",
        notes=request.notes or "",
    )
    _record_change(booking, "", buyer_id, None, now)
    return booking


# =============================================================================
# Status changes
# =============================================================================


def update_status(engagement_id, requester_id, requested_status: str,
                  reason: str | None = None, at: datetime | None = None) -> Engagement:
    """
    Move an engagement to a new status.

    The engagement row is locked for the read-validate-write sequence, so
    two concurrent requests cannot both apply to the same current status.
    `at` stamps the change and its history entry; defaults to the configured
    clock. Notifications are sent once the surrounding transaction commits.

    Raises:
        EngagementNotFound: engagement does not exist
        NotAParty: requester is neither buyer, seller nor the system actor
        InvalidTransition: no such edge from the current status
        RoleNotPermitted: requester's role may not enter the target status
    """
    engagement, change = _apply_transition(
        engagement_id, str(requester_id), requested_status, reason, at or conf.now()
    )
    logger.info(
        f"{engagement.get_kind_display()} {engagement.pk}: "
        f"{change.from_status} -> {change.status} by {change.actor}"
    )

    transaction.on_commit(lambda: dispatch_transition_effects(engagement, change))
    return engagement


@transaction.atomic
def _apply_transition(engagement_id, requester_id: str, requested_status: str,
                      reason: str | None, now: datetime) -> tuple[Engagement, EngagementStatusChange]:
    try:
        engagement = Engagement.objects.select_for_update().get(pk=engagement_id)
    except (Engagement.DoesNotExist, ValidationError):
        raise EngagementNotFound(engagement_id)

    role = engagement.role_of(requester_id)
    if role is None:
        raise NotAParty(requester_id, engagement.pk)

    validate_transition(engagement.kind, engagement.status, requested_status, role)

    from_status = engagement.status
    engagement.status = requested_status
    update_fields = ["status", "updated_at"]

    timestamp_field = TIMESTAMP_FIELDS.get(requested_status)
    if timestamp_field:
        setattr(engagement, timestamp_field, now)
        update_fields.append(timestamp_field)

    if requested_status == EngagementStatus.CANCELLED:
        engagement.cancellation_reason = reason or ""
        update_fields.append("cancellation_reason")

    engagement.save(update_fields=update_fields)
    change = _record_change(engagement, from_status, requester_id, reason, now)
    return engagement, change


def confirm(engagement_id, seller_id) -> Engagement:
    return update_status(engagement_id, seller_id, EngagementStatus.CONFIRMED)


def cancel(engagement_id, requester_id, reason: str | None = None) -> Engagement:
    return update_status(engagement_id, requester_id, EngagementStatus.CANCELLED, reason)


def complete(engagement_id, requester_id) -> Engagement:
    return update_status(engagement_id, requester_id, EngagementStatus.COMPLETED)


def start_service(engagement_id, seller_id) -> Engagement:
    return update_status(engagement_id, seller_id, EngagementStatus.IN_PROGRESS)


def mark_no_show(engagement_id, seller_id, reason: str | None = None) -> Engagement:
    return update_status(
        engagement_id,
        seller_id,
        EngagementStatus.NO_SHOW,
        reason or "Buyer did not show up for the scheduled service",
    )


def mark_ready_for_pickup(engagement_id, seller_id) -> Engagement:
    return update_status(engagement_id, seller_id, EngagementStatus.READY_FOR_PICKUP)


def mark_out_for_delivery(engagement_id, seller_id) -> Engagement:
    return update_status(engagement_id, seller_id, EngagementStatus.OUT_FOR_DELIVERY)


# =============================================================================
# Availability
# =============================================================================


def get_available_slots(resource_id: str, day: date) -> list[BookedSlot]:
    """
    Booked intervals of a service that overlap `day` (current timezone).

    Returns the taken slots, ordered by start; callers derive free windows.
    """
    resource = conf.get_resource_provider().get_resource(resource_id)
    if resource is None:
        raise ResourceNotFound(resource_id)
    if resource.kind != ResourceKind.SERVICE:
        raise ResourceUnavailable("Availability is only defined for services")

    tz = timezone.get_current_timezone()
    day_start = timezone.make_aware(datetime.combine(day, time.min), tz)
    day_end = timezone.make_aware(datetime.combine(day + timedelta(days=1), time.min), tz)

    bookings = overlapping_bookings(resource.id, day_start, day_end).order_by("start_time")
    return [BookedSlot(start=b.start_time, end=b.end_time) for b in bookings]
