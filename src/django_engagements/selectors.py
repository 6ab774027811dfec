"""Read-side queries for engagements."""

from django.core.exceptions import ValidationError
from django.db.models import Q, QuerySet

from .exceptions import EngagementNotFound, NotAParty
from .models import Engagement, EngagementKind
from .transitions import Role


def list_engagements(party_id, kind: str | None = None, role: str | None = None) -> QuerySet:
    """
    Engagements where party_id is the buyer or seller.

    Args:
        party_id: the requesting party
        kind: restrict to orders or bookings
        role: "buyer" or "seller" to restrict to one side, None for both

    Orders come newest first; bookings are ordered by start time.
    """
    party_id = str(party_id)

    if role == Role.BUYER:
        qs = Engagement.objects.filter(buyer_id=party_id)
    elif role == Role.SELLER:
        qs = Engagement.objects.filter(seller_id=party_id)
    elif role is None:
        qs = Engagement.objects.filter(Q(buyer_id=party_id) | Q(seller_id=party_id))
    else:
        raise ValueError(f"Unknown role filter '{role}'")

    if kind is not None:
        qs = qs.filter(kind=kind)
    if kind == EngagementKind.BOOKING:
        return qs.order_by("start_time", "created_at")
    return qs.order_by("-created_at")


def get_engagement_for_party(engagement_id, party_id) -> Engagement:
    """Fetch an engagement visible to its buyer or seller only."""
    try:
        engagement = Engagement.objects.get(pk=engagement_id)
    except (Engagement.DoesNotExist, ValidationError):
        raise EngagementNotFound(engagement_id)

    party_id = str(party_id)
    if party_id not in (engagement.buyer_id, engagement.seller_id):
        raise NotAParty(party_id, engagement.pk)
    return engagement


def get_history(engagement: Engagement) -> QuerySet:
    return engagement.history.order_by("created_at", "id")
