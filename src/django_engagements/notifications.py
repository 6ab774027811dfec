"""Fire-and-forget side effects of engagement changes.

Runs only after the change is committed. Failures here are logged and
never propagate: the engagement change has already succeeded.
"""

import logging

from .conf import get_chat_provider, get_notifier
from .models import EngagementStatus
from .transitions import SYSTEM_ACTOR

logger = logging.getLogger(__name__)


SUMMARIES = {
    "order": {
        EngagementStatus.CONFIRMED: "Your order has been confirmed by the seller",
        EngagementStatus.READY_FOR_PICKUP: "Your order is ready for pickup",
        EngagementStatus.OUT_FOR_DELIVERY: "Your order is out for delivery",
        EngagementStatus.COMPLETED: "The order has been marked as completed",
        EngagementStatus.CANCELLED: "The order has been cancelled",
        EngagementStatus.EXPIRED: "The order expired before the seller confirmed it",
    },
    "booking": {
        EngagementStatus.CONFIRMED: "Your booking has been confirmed by the seller",
        EngagementStatus.IN_PROGRESS: "Your booked service has started",
        EngagementStatus.COMPLETED: "The booking has been marked as completed",
        EngagementStatus.CANCELLED: "The booking has been cancelled",
        EngagementStatus.NO_SHOW: "The booking was marked as a no-show",
    },
}


def _notify(recipient_id: str, event_type: str, summary: str, data: dict) -> None:
    try:
        get_notifier().notify(recipient_id, event_type, summary, data)
    except Exception:
        logger.exception(f"Failed to send {event_type} notification to {recipient_id}")


def _event_data(engagement) -> dict:
    return {
        "engagement_id": str(engagement.pk),
        "kind": engagement.kind,
        "resource_id": engagement.resource_id,
        "status": engagement.status,
    }


def notify_created(engagement, resource_title: str = "") -> None:
    """Tell the seller a new order or booking request arrived."""
    if engagement.is_order:
        event_type = "order_placed"
        summary = f"New order received for {resource_title or 'your listing'}"
    else:
        event_type = "booking_requested"
        summary = f"New booking request for {resource_title or 'your service'}"
    _notify(engagement.seller_id, event_type, summary, _event_data(engagement))


def transition_recipients(engagement, actor: str) -> list[str]:
    """The other party of a status change; both parties for system changes."""
    if actor == SYSTEM_ACTOR:
        return [engagement.buyer_id, engagement.seller_id]
    counterparty = engagement.counterparty_of(actor)
    return [counterparty] if counterparty else []


def notify_transition(engagement, change) -> None:
    """Tell the affected parties about a committed status change."""
    summary = SUMMARIES.get(engagement.kind, {}).get(change.status)
    if summary is None:
        return
    if change.reason:
        summary = f"{summary}: {change.reason}"

    event_type = f"{engagement.kind}_{change.status}"
    data = _event_data(engagement)
    for recipient_id in transition_recipients(engagement, change.actor):
        _notify(recipient_id, event_type, summary, data)


def open_chat_thread(engagement) -> None:
    """Open the buyer/seller conversation once an engagement is confirmed."""
    try:
        get_chat_provider().open_thread(
            engagement, [engagement.buyer_id, engagement.seller_id]
        )
    except Exception:
        logger.exception(f"Failed to create chat thread for {engagement.kind} {engagement.pk}")
    else:
        logger.info(f"Chat thread created for {engagement.kind} {engagement.pk}")


def dispatch_transition_effects(engagement, change) -> None:
    if change.status == EngagementStatus.CONFIRMED:
        open_chat_thread(engagement)
    notify_transition(engagement, change)
