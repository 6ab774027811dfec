"""Request and result value objects for the engagement services."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class OrderRequest:
    """A buyer's request to purchase a product."""

    resource_id: str
    quantity: int
    delivery_method: str
    pickup_location: str = ""
    delivery_address: str = ""
    scheduled_for: datetime | None = None
    notes: str = ""


@dataclass(frozen=True)
class BookingRequest:
    """A buyer's request to reserve a service for [start, end)."""

    resource_id: str
    start: datetime
    end: datetime
    duration_minutes: int
    location: str = ""
    notes: str = ""


@dataclass(frozen=True)
class BookedSlot:
    start: datetime
    end: datetime


@dataclass
class SweepResult:
    """Counts from one lifecycle sweep run."""

    expired_orders: int = 0
    cancelled_bookings: int = 0
    failures: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.expired_orders + self.cancelled_bookings
