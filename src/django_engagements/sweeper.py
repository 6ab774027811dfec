"""Lifecycle sweep for engagements that were never confirmed.

Two independent sweeps, each a list of ordinary status changes by the
system actor:

- orders awaiting confirmation past the order window -> expired
- bookings still requested past the booking window -> cancelled

Each engagement is its own transaction, stamped with the sweep instant.
A rejection (the engagement moved on since it was selected) is skipped;
a system error or unexpected failure is logged and counted, and the sweep
continues. Re-running only touches engagements still in the matching
status.
"""

import logging
from datetime import timedelta

from django.db.models import QuerySet

from . import conf
from .exceptions import EngagementError, EngagementSystemError
from .models import Engagement, EngagementKind, EngagementStatus
from .services import update_status
from .transitions import SYSTEM_ACTOR
from .value_objects import SweepResult

logger = logging.getLogger(__name__)


def _window(setting_name: str) -> int:
    return int(conf.get_setting(setting_name))


def stale_orders(now=None) -> QuerySet:
    now = now or conf.now()
    cutoff = now - timedelta(hours=_window("ORDER_CONFIRMATION_WINDOW_HOURS"))
    return Engagement.objects.filter(
        kind=EngagementKind.ORDER,
        status=EngagementStatus.AWAITING_CONFIRMATION,
        created_at__lt=cutoff,
    ).order_by("created_at")


def stale_bookings(now=None) -> QuerySet:
    now = now or conf.now()
    cutoff = now - timedelta(hours=_window("BOOKING_CONFIRMATION_WINDOW_HOURS"))
    return Engagement.objects.filter(
        kind=EngagementKind.BOOKING,
        status=EngagementStatus.REQUESTED,
        created_at__lt=cutoff,
    ).order_by("created_at")


def stale_candidates(now=None) -> dict[str, QuerySet]:
    """Querysets the next sweep would act on, keyed by kind."""
    now = now or conf.now()
    return {
        EngagementKind.ORDER: stale_orders(now),
        EngagementKind.BOOKING: stale_bookings(now),
    }


def _record_failure(engagement_id, target: str, failures: list) -> None:
    logger.exception(f"Sweep failed to move engagement {engagement_id} to {target}")
    failures.append(str(engagement_id))


def _sweep(candidates: QuerySet, target: str, reason: str, now, failures: list) -> int:
    processed = 0
    # Materialize ids first; each transition commits on its own
    for engagement_id in list(candidates.values_list("pk", flat=True)):
        try:
            update_status(engagement_id, SYSTEM_ACTOR, target, reason, at=now)
        except EngagementSystemError:
            _record_failure(engagement_id, target, failures)
        except EngagementError as e:
            logger.warning(f"Sweep skipped engagement {engagement_id}: {e}")
        except Exception:
            _record_failure(engagement_id, target, failures)
        else:
            processed += 1
    return processed


def expire_unconfirmed_orders(now=None, failures: list | None = None) -> int:
    """Expire orders not confirmed within the order window. Returns the count."""
    now = now or conf.now()
    hours = _window("ORDER_CONFIRMATION_WINDOW_HOURS")
    failures = failures if failures is not None else []
    count = _sweep(
        stale_orders(now),
        EngagementStatus.EXPIRED,
        f"Order not confirmed within {hours} hours",
        now,
        failures,
    )
    logger.info(f"Expired {count} pending orders")
    return count


def cancel_unconfirmed_bookings(now=None, failures: list | None = None) -> int:
    """Cancel bookings not confirmed within the booking window. Returns the count."""
    now = now or conf.now()
    hours = _window("BOOKING_CONFIRMATION_WINDOW_HOURS")
    failures = failures if failures is not None else []
    count = _sweep(
        stale_bookings(now),
        EngagementStatus.CANCELLED,
        f"Booking not confirmed within {hours} hours",
        now,
        failures,
    )
    logger.info(f"Cancelled {count} unconfirmed bookings")
    return count


def run_lifecycle_sweep(now=None) -> SweepResult:
    """Run both sweeps against the same instant."""
    now = now or conf.now()
    result = SweepResult()
    result.expired_orders = expire_unconfirmed_orders(now, result.failures)
    result.cancelled_bookings = cancel_unconfirmed_bookings(now, result.failures)

    if result.failures:
        logger.warning(f"Lifecycle sweep finished with {len(result.failures)} failures")
    return result
