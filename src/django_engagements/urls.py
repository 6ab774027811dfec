"""URL configuration for django-engagements."""

from django.urls import path

from . import views
from .models import EngagementKind

app_name = "django_engagements"

ORDER = {"kind": EngagementKind.ORDER}
BOOKING = {"kind": EngagementKind.BOOKING}

urlpatterns = [
    # Orders
    path("orders/", views.engagement_collection, ORDER, name="order_list"),
    path("orders/<uuid:engagement_id>/", views.engagement_detail, ORDER, name="order_detail"),
    path("orders/<uuid:engagement_id>/status/", views.engagement_status, ORDER, name="order_status"),
    path("orders/<uuid:engagement_id>/<slug:action>/", views.engagement_action, ORDER, name="order_action"),

    # Bookings
    path("bookings/", views.engagement_collection, BOOKING, name="booking_list"),
    path("bookings/slots/", views.booking_slots, name="booking_slots"),
    path("bookings/<uuid:engagement_id>/", views.engagement_detail, BOOKING, name="booking_detail"),
    path("bookings/<uuid:engagement_id>/status/", views.engagement_status, BOOKING, name="booking_status"),
    path("bookings/<uuid:engagement_id>/<slug:action>/", views.engagement_action, BOOKING, name="booking_action"),
]
