"""Tests for order creation."""

from decimal import Decimal

import pytest

from django_engagements.exceptions import (
    EngagementValidationError,
    MissingDeliveryDetails,
    ResourceNotFound,
    ResourceUnavailable,
    ScopeMismatch,
    SelfDealingError,
    UnverifiedParty,
)
from django_engagements.models import Engagement, EngagementStatus


@pytest.mark.django_db
class TestCreateOrder:
    """Tests for services.create_order."""

    def test_creates_order_awaiting_confirmation(self, place_order, buyer, seller, product):
        order = place_order()

        assert order.kind == "order"
        assert order.status == EngagementStatus.AWAITING_CONFIRMATION
        assert order.buyer_id == str(buyer.pk)
        assert order.seller_id == str(seller.pk)
        assert order.resource_id == str(product.pk)
        assert order.scope_id == "riverside"
        assert order.quantity == 2

    def test_total_is_unit_price_times_quantity(self, place_order):
        order = place_order(quantity=3)

        assert order.total_price == Decimal("37.50")
        assert order.currency == "USD"

    def test_total_not_recomputed_when_price_changes(self, place_order, product):
        order = place_order()
        product.price = Decimal("99.00")
        product.save()

        order.refresh_from_db()
        assert order.total_price == Decimal("25.00")

    def test_records_creation_in_history(self, place_order, buyer):
        order = place_order()

        history = list(order.history.all())
        assert len(history) == 1
        assert history[0].from_status == ""
        assert history[0].status == EngagementStatus.AWAITING_CONFIRMATION
        assert history[0].actor == str(buyer.pk)

    def test_delivery_order_keeps_address(self, place_order):
        order = place_order(
            delivery_method="delivery",
            pickup_location="",
            delivery_address="12 Elm Street",
        )

        assert order.delivery_method == "delivery"
        assert order.delivery_address == "12 Elm Street"

    def test_notifies_seller(self, place_order, seller, notifications, on_commit):
        with on_commit():
            order = place_order()

        assert len(notifications) == 1
        assert notifications[0]["recipient_id"] == str(seller.pk)
        assert notifications[0]["event_type"] == "order_placed"
        assert notifications[0]["data"]["engagement_id"] == str(order.pk)


@pytest.mark.django_db
class TestCreateOrderRejections:
    """Each rejection leaves no engagement behind."""

    def test_unknown_resource(self, place_order):
        with pytest.raises(ResourceNotFound):
            place_order(resource_id="999999")

        assert Engagement.objects.count() == 0

    def test_service_cannot_be_ordered(self, place_order, service):
        with pytest.raises(ResourceUnavailable) as exc_info:
            place_order(resource_id=str(service.pk))

        assert "bookings" in str(exc_info.value)

    def test_inactive_product(self, place_order, product):
        product.status = "sold"
        product.save()

        with pytest.raises(ResourceUnavailable):
            place_order()

    def test_buyer_without_membership(self, place_order, newcomer):
        with pytest.raises(UnverifiedParty):
            place_order(buyer_id=newcomer.pk)

    def test_unknown_buyer(self, place_order):
        with pytest.raises(UnverifiedParty):
            place_order(buyer_id="424242")

    def test_buyer_in_other_scope(self, place_order, far_user):
        with pytest.raises(ScopeMismatch):
            place_order(buyer_id=far_user.pk)

        assert Engagement.objects.count() == 0

    def test_seller_cannot_order_own_listing(self, place_order, seller):
        with pytest.raises(SelfDealingError):
            place_order(buyer_id=seller.pk)

    def test_pickup_requires_location(self, place_order):
        with pytest.raises(MissingDeliveryDetails):
            place_order(pickup_location="")

    def test_delivery_requires_address(self, place_order):
        with pytest.raises(MissingDeliveryDetails):
            place_order(delivery_method="delivery", delivery_address="")

    def test_unknown_delivery_method(self, place_order):
        with pytest.raises(EngagementValidationError):
            place_order(delivery_method="drone")

    def test_zero_quantity(self, place_order):
        with pytest.raises(EngagementValidationError):
            place_order(quantity=0)

        assert Engagement.objects.count() == 0

    def test_rejection_sends_no_notification(self, place_order, far_user, notifications, on_commit):
        with on_commit(), pytest.raises(ScopeMismatch):
            place_order(buyer_id=far_user.pk)

        assert notifications == []
