"""Tests for notification and chat dispatch after status changes."""

import logging

import pytest
from django.db import transaction

from django_engagements import services


@pytest.mark.django_db
class TestTransitionNotifications:
    """The counterparty hears about each committed change."""

    def test_confirmation_notifies_buyer(self, place_order, buyer, seller, notifications, on_commit):
        order = place_order()

        with on_commit():
            services.confirm(order.pk, seller.pk)

        assert len(notifications) == 1
        assert notifications[0]["recipient_id"] == str(buyer.pk)
        assert notifications[0]["event_type"] == "order_confirmed"
        assert "confirmed" in notifications[0]["summary"]

    def test_buyer_cancellation_notifies_seller_with_reason(
        self, book, seller, buyer, notifications, on_commit
    ):
        booking = book()

        with on_commit():
            services.cancel(booking.pk, buyer.pk, "Feeling unwell")

        assert notifications[0]["recipient_id"] == str(seller.pk)
        assert notifications[0]["event_type"] == "booking_cancelled"
        assert notifications[0]["summary"].endswith("Feeling unwell")

    def test_event_data_identifies_engagement(self, place_order, seller, notifications, on_commit):
        order = place_order()

        with on_commit():
            services.confirm(order.pk, seller.pk)

        assert notifications[0]["data"] == {
            "engagement_id": str(order.pk),
            "kind": "order",
            "resource_id": order.resource_id,
            "status": "confirmed",
        }


@pytest.mark.django_db
class TestDispatchWaitsForCommit:
    """Nothing is sent for a change the caller's transaction may still undo."""

    def test_sent_only_when_callbacks_run(
        self, place_order, seller, notifications, django_capture_on_commit_callbacks
    ):
        order = place_order()

        with django_capture_on_commit_callbacks() as callbacks:
            services.confirm(order.pk, seller.pk)
            assert notifications == []

        assert len(callbacks) == 1
        callbacks[0]()
        assert notifications[0]["event_type"] == "order_confirmed"

    def test_nothing_sent_when_outer_transaction_rolls_back(
        self, place_order, seller, notifications, chat_threads, on_commit
    ):
        order = place_order()

        with on_commit():
            with pytest.raises(RuntimeError):
                with transaction.atomic():
                    services.confirm(order.pk, seller.pk)
                    raise RuntimeError("caller aborted")

        order.refresh_from_db()
        assert order.status == "awaiting_confirmation"
        assert notifications == []
        assert chat_threads == []

    def test_creation_notice_dropped_on_rollback(self, place_order, notifications, on_commit):
        with on_commit():
            with pytest.raises(RuntimeError):
                with transaction.atomic():
                    place_order()
                    raise RuntimeError("caller aborted")

        assert notifications == []


@pytest.mark.django_db
class TestChatThreads:
    """A chat thread opens once an engagement is confirmed."""

    def test_thread_opened_on_confirmation(self, book, buyer, seller, chat_threads, on_commit):
        booking = book()

        with on_commit():
            services.confirm(booking.pk, seller.pk)

        assert chat_threads == [(str(booking.pk), [str(buyer.pk), str(seller.pk)])]

    def test_no_thread_for_other_changes(self, place_order, buyer, chat_threads, on_commit):
        order = place_order()

        with on_commit():
            services.cancel(order.pk, buyer.pk)

        assert chat_threads == []


@pytest.mark.django_db
class TestDispatchFailures:
    """Collaborator failures never undo a committed change."""

    def test_failing_notifier_does_not_fail_confirmation(
        self, place_order, seller, settings, caplog, on_commit
    ):
        order = place_order()
        settings.ENGAGEMENTS_NOTIFIER = "tests.testapp.providers.FailingNotifier"

        with caplog.at_level(logging.ERROR, logger="django_engagements.notifications"):
            with on_commit():
                order = services.confirm(order.pk, seller.pk)

        order.refresh_from_db()
        assert order.status == "confirmed"
        assert "Failed to send order_confirmed notification" in caplog.text

    def test_failing_notifier_does_not_fail_creation(self, place_order, settings, on_commit):
        settings.ENGAGEMENTS_NOTIFIER = "tests.testapp.providers.FailingNotifier"

        with on_commit():
            order = place_order()

        assert order.status == "awaiting_confirmation"

    def test_failing_chat_does_not_fail_confirmation(self, book, seller, settings, caplog, on_commit):
        booking = book()
        settings.ENGAGEMENTS_CHAT_PROVIDER = "tests.testapp.providers.FailingChatProvider"

        with caplog.at_level(logging.ERROR, logger="django_engagements.notifications"):
            with on_commit():
                booking = services.confirm(booking.pk, seller.pk)

        assert booking.status == "confirmed"
        assert "Failed to create chat thread" in caplog.text

    def test_misconfigured_notifier_is_logged(self, place_order, settings, caplog, on_commit):
        settings.ENGAGEMENTS_NOTIFIER = "tests.testapp.providers.NotAProvider"

        with caplog.at_level(logging.ERROR, logger="django_engagements.notifications"):
            with on_commit():
                order = place_order()

        assert order.pk is not None
        assert "order_placed" in caplog.text


@pytest.mark.django_db
def test_logging_providers_are_defaults(place_order, seller, settings, caplog, on_commit):
    """Without configured collaborators, dispatch only logs."""
    del settings.ENGAGEMENTS_NOTIFIER
    del settings.ENGAGEMENTS_CHAT_PROVIDER
    order = place_order()

    with caplog.at_level(logging.INFO, logger="django_engagements.providers"):
        with on_commit():
            services.confirm(order.pk, seller.pk)

    assert "Chat thread for order" in caplog.text
    assert "[order_confirmed]" in caplog.text
