"""Shared fixtures for django-engagements tests."""

from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from django_engagements.conf import clear_provider_cache
from django_engagements.value_objects import BookingRequest, OrderRequest


@pytest.fixture(autouse=True)
def reset_collaborators():
    """Fresh provider cache and empty outboxes for every test."""
    from tests.testapp.providers import RecordingChatProvider, RecordingNotifier

    clear_provider_cache()
    RecordingNotifier.reset()
    RecordingChatProvider.reset()
    yield
    clear_provider_cache()


@pytest.fixture
def on_commit(django_capture_on_commit_callbacks):
    """Run callbacks registered inside the block as if the test transaction committed."""
    return lambda: django_capture_on_commit_callbacks(execute=True)


@pytest.fixture
def notifications():
    from tests.testapp.providers import RecordingNotifier

    return RecordingNotifier.sent


@pytest.fixture
def chat_threads():
    from tests.testapp.providers import RecordingChatProvider

    return RecordingChatProvider.threads


def _member(django_user_model, username, *scopes):
    from tests.testapp.models import Membership

    user = django_user_model.objects.create_user(username=username, password="testpass123")
    for scope_id in scopes:
        Membership.objects.create(user_id=str(user.pk), scope_id=scope_id)
    return user


@pytest.fixture
def seller(db, django_user_model):
    return _member(django_user_model, "seller", "riverside")


@pytest.fixture
def buyer(db, django_user_model):
    return _member(django_user_model, "buyer", "riverside")


@pytest.fixture
def neighbor(db, django_user_model):
    """Same scope as buyer and seller, but party to nothing by default."""
    return _member(django_user_model, "neighbor", "riverside")


@pytest.fixture
def far_user(db, django_user_model):
    return _member(django_user_model, "far_user", "hilltop")


@pytest.fixture
def newcomer(db, django_user_model):
    """Registered, but without any verified membership."""
    return _member(django_user_model, "newcomer")


@pytest.fixture
def product(seller):
    from tests.testapp.models import Listing

    return Listing.objects.create(
        title="Sourdough loaf",
        kind="product",
        price=Decimal("12.50"),
        seller_id=str(seller.pk),
    )


@pytest.fixture
def service(seller):
    from tests.testapp.models import Listing

    return Listing.objects.create(
        title="Dog walking",
        kind="service",
        price=Decimal("10.00"),
        seller_id=str(seller.pk),
    )


@pytest.fixture
def slot():
    """Build a (start, end) interval `days` from now at `hour`:00 UTC."""

    def make(hour=14, minutes=60, days=1):
        start = (timezone.now() + timedelta(days=days)).replace(
            hour=hour, minute=0, second=0, microsecond=0
        )
        return start, start + timedelta(minutes=minutes)

    return make


@pytest.fixture
def place_order(buyer, product):
    """Create an order for the product; keyword arguments override the request."""

    def make(buyer_id=None, **overrides):
        from django_engagements import services

        fields = {
            "resource_id": str(product.pk),
            "quantity": 2,
            "delivery_method": "pickup",
            "pickup_location": "Front porch",
        }
        fields.update(overrides)
        return services.create_order(buyer_id or buyer.pk, OrderRequest(**fields))

    return make


@pytest.fixture
def book(buyer, service, slot):
    """Create a booking of the service for `minutes` starting at `hour`:00 tomorrow."""

    def make(hour=14, minutes=60, days=1, buyer_id=None, **overrides):
        from django_engagements import services

        start, end = slot(hour, minutes, days)
        fields = {
            "resource_id": str(service.pk),
            "start": start,
            "end": end,
            "duration_minutes": minutes,
        }
        fields.update(overrides)
        return services.create_booking(buyer_id or buyer.pk, BookingRequest(**fields))

    return make
