"""
django-engagements: Order and booking lifecycle engine.

Provides:
- Engagement: Order or Booking between a buyer and a seller in a shared scope
- EngagementStatusChange: Append-only history of status changes
- Conflict-free booking creation for time-bound services
- Role-gated state machines per engagement kind
- Lifecycle sweep that expires engagements left unconfirmed
"""

__version__ = "0.1.0"

default_app_config = "django_engagements.apps.DjangoEngagementsConfig"
