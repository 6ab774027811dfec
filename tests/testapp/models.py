"""Test models for django-engagements tests."""

from django.db import models


class Listing(models.Model):
    """A product or service offered by a seller."""

    title = models.CharField(max_length=200)
    kind = models.CharField(max_length=20, default="product")
    status = models.CharField(max_length=20, default="active")
    price = models.DecimalField(max_digits=10, decimal_places=2)
    currency = models.CharField(max_length=3, default="USD")
    seller_id = models.CharField(max_length=64)

    class Meta:
        app_label = "testapp"

    def __str__(self):
        return f"Listing: {self.title}"


class Membership(models.Model):
    """A user's membership of a neighbourhood scope."""

    user_id = models.CharField(max_length=64)
    scope_id = models.CharField(max_length=64)
    verified = models.BooleanField(default=True)

    class Meta:
        app_label = "testapp"
