"""Journey payload orchestration service."""

from __future__ import annotations

import logging
from typing import Sequence

from ...models.domain import Booking, Journey, Stop
from ...schemas.journeys import (
    JourneyPayloadRequest,
    JourneyPayloadResponse,
    JourneyPublishResponse,
    LocationModel,
    OrderedStopModel,
)
from ..dispatch.client import DispatchClient, extract_journey_id
from ..outputs.journey_formatter import envelope_to_json
from .envelope import assemble_envelope
from .errors import UnpublishedIdentifierError
from .models import JourneyPlan
from .payload import Clock, synthesize
from .sequencer import find_orphaned_dropoffs, sequence
from .stop_graph import flatten

logger = logging.getLogger(__name__)


def _selected_bookings(bookings: Sequence[Booking]) -> list[Booking]:
    return [booking for booking in bookings if booking.selected]


def _passenger_count(bookings: Sequence[Booking]) -> int:
    # Hold-on bookings add no passenger.
    return sum(1 for booking in bookings if not booking.hold_on for stop in booking.stops if stop.is_pickup)


def generate_journey_payload(journey: Journey, *, now: Clock | None = None) -> JourneyPlan:
    """Sequence every stop of ``journey`` and build its dispatch request.

    Unselected bookings are skipped. The journey is never mutated; the returned
    plan holds new structures only.

    Raises:
        NoPickupError: If the selected bookings hold no pickup stop.
    """
    bookings = _selected_bookings(journey.bookings)
    skipped = len(journey.bookings) - len(bookings)
    if skipped:
        logger.info("Skipping %d unselected booking(s)", skipped)

    stops = flatten(bookings)
    orphaned = find_orphaned_dropoffs(stops)
    ordered = sequence(stops)
    payloads = synthesize(ordered, {booking.id: booking for booking in bookings}, now=now)
    envelope = assemble_envelope(
        payloads,
        journey_server_id=journey.journey_server_id,
        enable_messaging_service=journey.enable_messaging_service,
    )

    placeholder_count = sum(1 for payload in payloads if payload.is_placeholder)
    if placeholder_count:
        logger.info("Journey payload uses %d placeholder identifier(s)", placeholder_count)

    metadata = {
        "stop_count": len(ordered),
        "booking_count": len(bookings),
        "passenger_count": _passenger_count(bookings),
        "skipped_bookings": skipped,
        "total_distance_m": round(sum(payload.distance for payload in payloads), 1),
        "placeholder_count": placeholder_count,
        "orphaned_dropoffs": [stop.id for stop in orphaned],
        "is_update": envelope.is_update,
    }
    logger.info(
        "Generated journey payload: %d stops across %d booking(s), %.1f m",
        metadata["stop_count"],
        metadata["booking_count"],
        metadata["total_distance_m"],
    )
    return JourneyPlan(
        ordered_stops=[stop.stop for stop in ordered],
        payloads=payloads,
        envelope=envelope,
        metadata=metadata,
    )


def _ordered_stop_model(stop: Stop, booking_id: str) -> OrderedStopModel:
    return OrderedStopModel(
        id=stop.id,
        booking_id=booking_id,
        stop_type=stop.stop_type.value,
        location=LocationModel(address=stop.location.address, lat=stop.location.lat, lng=stop.location.lng),
        name=stop.name,
        phone=stop.phone,
        instructions=stop.instructions,
        pickup_stop_id=stop.pickup_stop_id,
        date_time=stop.date_time,
        booking_segment_id=stop.booking_segment_id,
    )


def _ordered_stop_models(plan: JourneyPlan) -> list[OrderedStopModel]:
    return [
        _ordered_stop_model(stop, payload.booking_id)
        for stop, payload in zip(plan.ordered_stops, plan.payloads)
    ]


def build_plan(payload: JourneyPayloadRequest) -> JourneyPlan:
    return generate_journey_payload(payload.to_domain())


def preview_journey(payload: JourneyPayloadRequest) -> JourneyPayloadResponse:
    plan = build_plan(payload)
    return JourneyPayloadResponse(
        journey_payload=envelope_to_json(plan.envelope),
        ordered_stops=_ordered_stop_models(plan),
        metadata=plan.metadata,
    )


def publish_journey(payload: JourneyPayloadRequest, client: DispatchClient | None = None) -> JourneyPublishResponse:
    """Build the journey request and submit it to the dispatch API.

    Raises:
        UnpublishedIdentifierError: If any stop still carries a placeholder id.
    """
    plan = build_plan(payload)
    if plan.metadata["placeholder_count"]:
        unresolved = [item.stop_id for item in plan.payloads if item.is_placeholder]
        logger.warning("Refusing to publish journey with placeholder identifiers for stops: %s", unresolved)
        raise UnpublishedIdentifierError(unresolved)

    client = client or DispatchClient()
    journey_json = envelope_to_json(plan.envelope)
    body = client.update_journey(journey_json)
    journey_server_id = extract_journey_id(body)
    if journey_server_id is None:
        journey_server_id = payload.journey_server_id

    action = "updated" if plan.envelope.is_update else "created"
    message = f"Journey with {plan.metadata['booking_count']} booking(s) was successfully {action}."
    logger.info("%s (journey id %s)", message, journey_server_id)
    return JourneyPublishResponse(
        journey_server_id=journey_server_id,
        status="Scheduled",
        message=message,
        journey_payload=journey_json,
        ordered_stops=_ordered_stop_models(plan),
        metadata=plan.metadata,
    )
