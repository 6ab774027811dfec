"""Custom exceptions for django-engagements.

Every business rejection carries a stable ``code`` and a ``category``:

- not_found: referenced resource or engagement does not exist
- validation: malformed request (time range, duration, delivery, self-dealing)
- forbidden: requester lacks the relationship or role for the action
- conflict: scheduling overlap, or a status change not allowed from here

EngagementSystemError and its subclasses are not business rejections:
they signal misconfiguration or a broken invariant.
"""


class EngagementError(Exception):
    """Base exception for engagement errors."""

    code = "engagement_error"
    category = "system"


# =============================================================================
# Not found
# =============================================================================


class ResourceNotFound(EngagementError):
    """Raised when the listed resource does not exist."""

    code = "resource_not_found"
    category = "not_found"

    def __init__(self, resource_id: str):
        self.resource_id = resource_id
        super().__init__(f"Resource '{resource_id}' not found")


class EngagementNotFound(EngagementError):
    """Raised when an engagement id does not exist."""

    code = "engagement_not_found"
    category = "not_found"

    def __init__(self, engagement_id):
        self.engagement_id = engagement_id
        super().__init__(f"Engagement '{engagement_id}' not found")


# =============================================================================
# Validation
# =============================================================================


class EngagementValidationError(EngagementError):
    """Raised when a request is malformed."""

    code = "invalid_request"
    category = "validation"


class ResourceUnavailable(EngagementValidationError):
    """Resource is of the wrong kind or not open for new engagements."""

    code = "resource_unavailable"


class SelfDealingError(EngagementValidationError):
    """Buyer and seller are the same party."""

    code = "self_dealing"


class InvalidTimeRange(EngagementValidationError):
    """Booking interval is empty, reversed or not in the future."""

    code = "invalid_time_range"


class DurationMismatch(EngagementValidationError):
    """Requested duration does not match the booking interval."""

    code = "duration_mismatch"

    def __init__(self, requested_minutes: int, actual_minutes: float):
        self.requested_minutes = requested_minutes
        self.actual_minutes = actual_minutes
        super().__init__(
            f"Duration of {requested_minutes} minutes does not match the time range "
            f"provided ({actual_minutes:g} minutes)"
        )


class MissingDeliveryDetails(EngagementValidationError):
    """Delivery method requires a field that was not supplied."""

    code = "missing_delivery_details"


# =============================================================================
# Forbidden
# =============================================================================


class EngagementForbidden(EngagementError):
    """Raised when the requester may not perform the action."""

    code = "forbidden"
    category = "forbidden"


class UnverifiedParty(EngagementForbidden):
    """Buyer has no verified scope membership."""

    code = "unverified_party"


class ScopeMismatch(EngagementForbidden):
    """Buyer and seller do not share a scope."""

    code = "scope_mismatch"


class NotAParty(EngagementForbidden):
    """Requester is neither the buyer nor the seller of the engagement."""

    code = "not_a_party"

    def __init__(self, requester_id: str, engagement_id=None):
        self.requester_id = requester_id
        self.engagement_id = engagement_id
        super().__init__("You do not have access to this engagement")


class RoleNotPermitted(EngagementForbidden):
    """Requester's role on the engagement does not allow the target status."""

    code = "role_not_permitted"

    def __init__(self, to_status: str, required_role: str, role: str | None):
        self.to_status = to_status
        self.required_role = required_role
        self.role = role
        if required_role == "system":
            message = f"Only the system can move an engagement to '{to_status}'"
        else:
            message = f"Only the {required_role} can move an engagement to '{to_status}'"
        super().__init__(message)


# =============================================================================
# Conflict
# =============================================================================


class SchedulingConflict(EngagementError):
    """Requested interval overlaps an existing booking for the resource."""

    code = "scheduling_conflict"
    category = "conflict"

    def __init__(self, resource_id: str, start, end):
        self.resource_id = resource_id
        self.start = start
        self.end = end
        super().__init__(
            "This time slot is already booked or conflicts with an existing booking"
        )


class InvalidTransition(EngagementError):
    """Raised when attempting a status change with no edge in the state machine."""

    code = "invalid_transition"
    category = "conflict"

    def __init__(self, from_status: str, to_status: str, reason: str = None):
        self.from_status = from_status
        self.to_status = to_status
        self.reason = reason or f"Cannot transition from '{from_status}' to '{to_status}'"
        super().__init__(self.reason)


# =============================================================================
# System
# =============================================================================


class EngagementSystemError(EngagementError):
    """Base for failures of configuration or integrity, not of the request."""

    code = "system_error"
    category = "system"


class ProviderLoadError(EngagementSystemError):
    """Raised when a configured collaborator cannot be loaded."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot load provider '{path}': {reason}")


class HistoryImmutableError(EngagementSystemError):
    """Raised when code tries to change or remove a history entry."""

    def __init__(self, change_id):
        self.change_id = change_id
        super().__init__(f"Status change {change_id} is append-only and cannot be modified")
