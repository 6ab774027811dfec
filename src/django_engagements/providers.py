"""Collaborator interfaces for django-engagements.

The engine does not own listings, memberships, chat or notification delivery.
Host projects plug concrete implementations in through settings:

    ENGAGEMENTS_RESOURCE_PROVIDER = "marketplace.engagement_providers.ListingProvider"
    ENGAGEMENTS_PARTY_DIRECTORY = "marketplace.engagement_providers.ResidentDirectory"
    ENGAGEMENTS_NOTIFIER = "marketplace.engagement_providers.PushNotifier"
    ENGAGEMENTS_CHAT_PROVIDER = "marketplace.engagement_providers.ChatThreads"

Example resource provider:

    class ListingProvider(BaseResourceProvider):
        def get_resource(self, resource_id):
            listing = Listing.objects.filter(pk=resource_id).first()
            if listing is None:
                return None
            return Resource(
                id=str(listing.pk),
                kind=listing.type,
                status=listing.status,
                unit_price=listing.price,
                currency=listing.currency,
                seller_id=str(listing.seller_id),
                title=listing.title,
            )
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import Engagement

logger = logging.getLogger(__name__)


class ResourceKind:
    PRODUCT = "product"
    SERVICE = "service"


@dataclass(frozen=True)
class Resource:
    """Snapshot of a listed resource as seen by the engine."""

    id: str
    kind: str
    status: str
    unit_price: Decimal
    currency: str
    seller_id: str
    title: str = ""


class BaseResourceProvider:
    """Looks up listed resources by id."""

    def get_resource(self, resource_id: str) -> Resource | None:
        """
        Return the resource, or None when it does not exist.

        Must never be served from a cache that can be stale for status or price.
        """
        raise NotImplementedError


class BasePartyDirectory:
    """Looks up verified scope memberships of a user."""

    def get_party_scopes(self, user_id: str) -> list[str] | None:
        """
        Return the scope ids the user is a verified member of.

        Returns None when the user is unknown, [] when known but unverified.
        """
        raise NotImplementedError


class BaseNotifier:
    """Delivers a human-readable event to one recipient."""

    def notify(self, recipient_id: str, event_type: str, summary: str, data: dict) -> None:
        raise NotImplementedError


class BaseChatProvider:
    """Opens a conversation between the parties of an engagement."""

    def open_thread(self, engagement: "Engagement", participant_ids: list[str]) -> None:
        raise NotImplementedError


class LoggingNotifier(BaseNotifier):
    """Notifier that only logs (for development)."""

    def notify(self, recipient_id, event_type, summary, data):
        logger.info(f"Notification to {recipient_id} [{event_type}]: {summary}")


class LoggingChatProvider(BaseChatProvider):
    """Chat provider that only logs (for development)."""

    def open_thread(self, engagement, participant_ids):
        logger.info(
            f"Chat thread for {engagement.kind} {engagement.pk} "
            f"with participants {', '.join(participant_ids)}"
        )
