"""JSON API views for orders and bookings.

The requester is always the authenticated user; authentication itself is
left to the host project.
"""

import json
from functools import wraps

from django.http import JsonResponse
from django.utils.dateparse import parse_date, parse_datetime
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from . import selectors, services
from .exceptions import EngagementError, EngagementNotFound, EngagementValidationError
from .models import Engagement, EngagementKind
from .value_objects import BookingRequest, OrderRequest

HTTP_STATUS = {
    "validation": 400,
    "forbidden": 403,
    "not_found": 404,
    "conflict": 409,
}


def error_response(exc: EngagementError) -> JsonResponse:
    return JsonResponse(
        {"error": exc.code, "detail": str(exc)},
        status=HTTP_STATUS.get(exc.category, 500),
    )


def api_view(view_func):
    """Require an authenticated user and render business errors as JSON."""

    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        if not request.user.is_authenticated:
            return JsonResponse(
                {"error": "not_authenticated", "detail": "Authentication required"},
                status=401,
            )
        try:
            return view_func(request, *args, **kwargs)
        except EngagementError as e:
            return error_response(e)

    return wrapper


# =============================================================================
# Serialization
# =============================================================================


def _iso(value):
    return value.isoformat() if value else None


def serialize_engagement(engagement: Engagement, include_history: bool = False) -> dict:
    data = {
        "id": str(engagement.pk),
        "kind": engagement.kind,
        "resource_id": engagement.resource_id,
        "buyer_id": engagement.buyer_id,
        "seller_id": engagement.seller_id,
        "scope_id": engagement.scope_id,
        "status": engagement.status,
        "total_price": str(engagement.total_price),
        "currency": engagement.currency,
        "notes": engagement.notes,
        "created_at": _iso(engagement.created_at),
        "confirmed_at": _iso(engagement.confirmed_at),
        "completed_at": _iso(engagement.completed_at),
        "cancelled_at": _iso(engagement.cancelled_at),
        "cancellation_reason": engagement.cancellation_reason,
    }
    if engagement.is_booking:
        data.update({
            "start_time": _iso(engagement.start_time),
            "end_time": _iso(engagement.end_time),
            "duration_minutes": engagement.duration_minutes,
            "location": engagement.location,
        })
    else:
        data.update({
            "quantity": engagement.quantity,
            "delivery_method": engagement.delivery_method,
            "pickup_location": engagement.pickup_location,
            "delivery_address": engagement.delivery_address,
            "scheduled_for": _iso(engagement.scheduled_for),
        })
    if include_history:
        data["history"] = [
            {
                "from_status": change.from_status or None,
                "status": change.status,
                "actor": change.actor,
                "reason": change.reason,
                "created_at": _iso(change.created_at),
            }
            for change in selectors.get_history(engagement)
        ]
    return data


# =============================================================================
# Request parsing
# =============================================================================


def _read_body(request) -> dict:
    if not request.body:
        return {}
    try:
        body = json.loads(request.body)
    except (ValueError, UnicodeDecodeError):
        raise EngagementValidationError("Request body must be valid JSON")
    if not isinstance(body, dict):
        raise EngagementValidationError("Request body must be a JSON object")
    return body


def _required(body: dict, name: str):
    value = body.get(name)
    if value in (None, ""):
        raise EngagementValidationError(f"'{name}' is required")
    return value


def _datetime(body: dict, name: str, required: bool = True):
    raw = _required(body, name) if required else body.get(name)
    if raw in (None, ""):
        return None
    try:
        value = parse_datetime(str(raw))
    except ValueError:
        value = None
    if value is None:
        raise EngagementValidationError(f"'{name}' must be an ISO 8601 datetime")
    return value


def _order_request(body: dict) -> OrderRequest:
    return OrderRequest(
        resource_id=str(_required(body, "resource_id")),
        quantity=_required(body, "quantity"),
        delivery_method=_required(body, "delivery_method"),
        pickup_location=body.get("pickup_location") or "",
        delivery_address=body.get("delivery_address") or "",
        scheduled_for=_datetime(body, "scheduled_for", required=False),
        notes=body.get("notes") or "",
    )


def _booking_request(body: dict) -> BookingRequest:
    return BookingRequest(
        resource_id=str(_required(body, "resource_id")),
        start=_datetime(body, "start_time"),
        end=_datetime(body, "end_time"),
        duration_minutes=_required(body, "duration_minutes"),
        location=body.get("location") or "",
        notes=body.get("notes") or "",
    )


def _ensure_kind(engagement_id, kind: str) -> None:
    if not Engagement.objects.filter(pk=engagement_id, kind=kind).exists():
        raise EngagementNotFound(engagement_id)


# =============================================================================
# Endpoints
# =============================================================================


@csrf_exempt
@require_http_methods(["GET", "POST"])
@api_view
def engagement_collection(request, kind: str):
    """GET: the requester's orders or bookings. POST: create one."""
    if request.method == "GET":
        role = request.GET.get("role") or None
        if role not in (None, "buyer", "seller"):
            raise EngagementValidationError("role must be 'buyer' or 'seller'")
        engagements = selectors.list_engagements(request.user.pk, kind=kind, role=role)
        key = "orders" if kind == EngagementKind.ORDER else "bookings"
        return JsonResponse({key: [serialize_engagement(e) for e in engagements]})

    body = _read_body(request)
    if kind == EngagementKind.ORDER:
        engagement = services.create_order(request.user.pk, _order_request(body))
    else:
        engagement = services.create_booking(request.user.pk, _booking_request(body))
    return JsonResponse(serialize_engagement(engagement, include_history=True), status=201)


@require_GET
@api_view
def engagement_detail(request, kind: str, engagement_id):
    """Engagement with its status history; buyer and seller only."""
    engagement = selectors.get_engagement_for_party(engagement_id, request.user.pk)
    if engagement.kind != kind:
        raise EngagementNotFound(engagement_id)
    return JsonResponse(serialize_engagement(engagement, include_history=True))


@csrf_exempt
@require_POST
@api_view
def engagement_status(request, kind: str, engagement_id):
    """Move an engagement to {"status": ..., "reason": ...}."""
    _ensure_kind(engagement_id, kind)
    body = _read_body(request)
    engagement = services.update_status(
        engagement_id,
        request.user.pk,
        _required(body, "status"),
        body.get("reason"),
    )
    return JsonResponse(serialize_engagement(engagement))


ACTIONS = {
    EngagementKind.ORDER: {
        "confirm": services.confirm,
        "cancel": services.cancel,
        "complete": services.complete,
        "ready-for-pickup": services.mark_ready_for_pickup,
        "out-for-delivery": services.mark_out_for_delivery,
    },
    EngagementKind.BOOKING: {
        "confirm": services.confirm,
        "cancel": services.cancel,
        "complete": services.complete,
        "start": services.start_service,
        "no-show": services.mark_no_show,
    },
}

# Actions that accept an optional "reason" in the body
REASON_ACTIONS = {"cancel", "no-show"}


@csrf_exempt
@require_POST
@api_view
def engagement_action(request, kind: str, engagement_id, action: str):
    handler = ACTIONS[kind].get(action)
    if handler is None:
        return JsonResponse(
            {"error": "unknown_action", "detail": f"Unknown {kind} action '{action}'"},
            status=404,
        )

    _ensure_kind(engagement_id, kind)
    if action in REASON_ACTIONS:
        reason = _read_body(request).get("reason")
        engagement = handler(engagement_id, request.user.pk, reason)
    else:
        engagement = handler(engagement_id, request.user.pk)
    return JsonResponse(serialize_engagement(engagement))


@require_GET
@api_view
def booking_slots(request):
    """Booked intervals of a service on ?date=YYYY-MM-DD."""
    resource_id = request.GET.get("resource")
    if not resource_id:
        raise EngagementValidationError("'resource' is required")

    try:
        day = parse_date(request.GET.get("date", ""))
    except ValueError:
        day = None
    if day is None:
        raise EngagementValidationError("'date' must be formatted YYYY-MM-DD")

    slots = services.get_available_slots(resource_id, day)
    return JsonResponse({
        "resource_id": resource_id,
        "date": day.isoformat(),
        "booked": [{"start": _iso(s.start), "end": _iso(s.end)} for s in slots],
    })
