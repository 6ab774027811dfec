"""Booking conflict detection.

Intervals are half-open: [s1, e1) and [s2, e2) overlap iff s1 < e2 and s2 < e1,
so a booking ending at 16:00 and one starting at 16:00 do not conflict.

Callers creating a booking must hold the resource's schedule lock
(lock_resource_schedule) inside the same transaction as the insert.

SQLite has no row locks. Hosts on SQLite must configure

    DATABASES["default"]["OPTIONS"] = {"transaction_mode": "IMMEDIATE"}

so that competing writers wait for each other instead of failing with
"database is locked".
"""

from django.db.models import QuerySet

from .models import Engagement, EngagementKind, ResourceSchedule
from .transitions import SLOT_RELEASING_STATUSES


def blocking_bookings(resource_id: str, exclude_engagement_id=None) -> QuerySet:
    """Bookings for the resource that still hold their time slot."""
    qs = Engagement.objects.filter(
        kind=EngagementKind.BOOKING,
        resource_id=resource_id,
    ).exclude(status__in=SLOT_RELEASING_STATUSES)
    if exclude_engagement_id is not None:
        qs = qs.exclude(pk=exclude_engagement_id)
    return qs


def overlapping_bookings(resource_id: str, start, end, exclude_engagement_id=None) -> QuerySet:
    return blocking_bookings(resource_id, exclude_engagement_id).filter(
        start_time__lt=end,
        end_time__gt=start,
    )


def has_conflict(resource_id: str, start, end, exclude_engagement_id=None) -> bool:
    """
    Check whether [start, end) overlaps a slot-holding booking of the resource.

    Always reads the database; never consult a cache for this check.
    """
    return overlapping_bookings(resource_id, start, end, exclude_engagement_id).exists()


def lock_resource_schedule(resource_id: str) -> ResourceSchedule:
    """
    Lock the resource's schedule row for the rest of the current transaction.

    Must be called inside transaction.atomic(). Concurrent callers for the
    same resource block here until the holder commits or rolls back.
    """
    ResourceSchedule.objects.get_or_create(resource_id=resource_id)
    return ResourceSchedule.objects.select_for_update().get(resource_id=resource_id)
