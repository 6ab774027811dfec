"""State machines and role gating for engagement status changes.

The rules are data, not control flow:

- ORDER_MACHINE / BOOKING_MACHINE: adjacency map current -> allowed next
- REQUIRED_ROLE: target status -> who may request it

validate_transition() is a pure function over that data; the service layer
loads and locks the engagement, calls it, and persists the result.
"""

from dataclasses import dataclass

from .exceptions import InvalidTransition, NotAParty, RoleNotPermitted
from .models import EngagementKind, EngagementStatus as S


SYSTEM_ACTOR = "SYSTEM"


class Role:
    BUYER = "buyer"
    SELLER = "seller"
    SYSTEM = "system"
    # Either party of the engagement, or the system actor
    PARTY = "party"


@dataclass(frozen=True)
class StateMachine:
    """Transition table for one engagement kind."""

    kind: str
    initial: str
    states: tuple
    transitions: dict
    terminal: frozenset

    def allowed_from(self, status: str) -> list[str]:
        if status in self.terminal:
            return []
        return list(self.transitions.get(status, []))

    def has_edge(self, from_status: str, to_status: str) -> bool:
        return to_status in self.allowed_from(from_status)

    def is_terminal(self, status: str) -> bool:
        return status in self.terminal


ORDER_MACHINE = StateMachine(
    kind=EngagementKind.ORDER,
    initial=S.AWAITING_CONFIRMATION,
    states=(
        S.AWAITING_CONFIRMATION,
        S.CONFIRMED,
        S.READY_FOR_PICKUP,
        S.OUT_FOR_DELIVERY,
        S.COMPLETED,
        S.CANCELLED,
        S.EXPIRED,
    ),
    transitions={
        S.AWAITING_CONFIRMATION: [S.CONFIRMED, S.CANCELLED, S.EXPIRED],
        S.CONFIRMED: [S.READY_FOR_PICKUP, S.OUT_FOR_DELIVERY, S.CANCELLED],
        S.READY_FOR_PICKUP: [S.COMPLETED, S.CANCELLED],
        S.OUT_FOR_DELIVERY: [S.COMPLETED, S.CANCELLED],
    },
    terminal=frozenset({S.COMPLETED, S.CANCELLED, S.EXPIRED}),
)

BOOKING_MACHINE = StateMachine(
    kind=EngagementKind.BOOKING,
    initial=S.REQUESTED,
    states=(
        S.REQUESTED,
        S.CONFIRMED,
        S.IN_PROGRESS,
        S.COMPLETED,
        S.CANCELLED,
        S.NO_SHOW,
    ),
    transitions={
        S.REQUESTED: [S.CONFIRMED, S.CANCELLED],
        S.CONFIRMED: [S.IN_PROGRESS, S.CANCELLED, S.NO_SHOW],
        S.IN_PROGRESS: [S.COMPLETED, S.CANCELLED],
    },
    terminal=frozenset({S.COMPLETED, S.CANCELLED, S.NO_SHOW}),
)

MACHINES = {
    EngagementKind.ORDER: ORDER_MACHINE,
    EngagementKind.BOOKING: BOOKING_MACHINE,
}

REQUIRED_ROLE = {
    S.CONFIRMED: Role.SELLER,
    S.READY_FOR_PICKUP: Role.SELLER,
    S.OUT_FOR_DELIVERY: Role.SELLER,
    S.IN_PROGRESS: Role.SELLER,
    S.NO_SHOW: Role.SELLER,
    S.CANCELLED: Role.PARTY,
    S.COMPLETED: Role.PARTY,
    S.EXPIRED: Role.SYSTEM,
}

# Status -> timestamp field stamped when the status is entered
TIMESTAMP_FIELDS = {
    S.CONFIRMED: "confirmed_at",
    S.COMPLETED: "completed_at",
    S.CANCELLED: "cancelled_at",
}

# Bookings in these statuses no longer hold their time slot
SLOT_RELEASING_STATUSES = (S.CANCELLED, S.NO_SHOW)


def get_machine(kind: str) -> StateMachine:
    try:
        return MACHINES[kind]
    except KeyError:
        raise ValueError(f"Unknown engagement kind '{kind}'")


def role_permits(required_role: str, role: str | None) -> bool:
    if required_role == Role.PARTY:
        return role in (Role.BUYER, Role.SELLER, Role.SYSTEM)
    return role == required_role


def validate_transition(kind: str, current: str, target: str, role: str | None) -> None:
    """
    Check a requested status change. Returns None or raises.

    Steps, in order:
    1. requester must be a party (buyer, seller) or the system actor -> NotAParty
    2. (current -> target) must be an edge of the kind's machine -> InvalidTransition
    3. requester's role must be allowed to enter target -> RoleNotPermitted
    """
    if role is None:
        raise NotAParty(requester_id="")

    machine = get_machine(kind)
    if not machine.has_edge(current, target):
        if machine.is_terminal(current):
            raise InvalidTransition(
                current, target,
                f"Cannot transition from terminal status '{current}'"
            )
        raise InvalidTransition(current, target)

    required_role = REQUIRED_ROLE[target]
    if not role_permits(required_role, role):
        raise RoleNotPermitted(target, required_role, role)


def is_valid_walk(kind: str, statuses: list[str]) -> bool:
    """True if statuses start at the initial state and follow machine edges."""
    machine = get_machine(kind)
    if not statuses or statuses[0] != machine.initial:
        return False
    return all(
        machine.has_edge(current, following)
        for current, following in zip(statuses, statuses[1:])
    )
