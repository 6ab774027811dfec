"""Price calculator for engagements.

Totals are computed once, at creation, from the resource's unit price:

- Order:   unit_price * quantity
- Booking: unit_price * duration_minutes / 60

The exact Decimal result is quantized to the currency's smallest unit with
banker's rounding, so 45 minutes at 10.00/h is 7.50 and 50 minutes at
10.00/h is 8.33.
"""

from decimal import Decimal

from .exceptions import EngagementValidationError
from .money import Money

MINUTES_PER_HOUR = Decimal(60)


def _require_positive_int(value, label: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise EngagementValidationError(f"{label} must be a positive whole number")
    return value


def order_total(unit_price: Decimal, currency: str, quantity: int) -> Money:
    """Total charge for `quantity` units of a product."""
    _require_positive_int(quantity, "Quantity")
    return (Money(unit_price, currency) * quantity).quantized()


def booking_total(unit_price: Decimal, currency: str, duration_minutes: int) -> Money:
    """Total charge for a service booked for `duration_minutes` at an hourly rate."""
    _require_positive_int(duration_minutes, "Duration")
    # Multiply before dividing so whole-hour multiples stay exact
    per_minute_total = Money(unit_price, currency) * duration_minutes
    return Money(per_minute_total.amount / MINUTES_PER_HOUR, currency).quantized()
