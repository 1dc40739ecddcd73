"""Per-stop payload synthesis for the dispatch API."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Mapping, Optional, Sequence

from ...models.domain import Booking
from ..geospatial import distance_meters
from .errors import NoPickupError, UnknownBookingError
from .identifiers import resolve_request_id, resolve_segment_id
from .models import AnnotatedStop, StopPayload
from .sequencer import as_utc

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_planned_date(value: datetime) -> str:
    """Render as ISO 8601 UTC with millisecond precision, e.g. ``2024-05-01T10:00:00.000Z``."""
    return as_utc(value).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _pickup_times(bookings_by_id: Mapping[str, Booking]) -> dict[str, datetime]:
    times: dict[str, datetime] = {}
    for booking in bookings_by_id.values():
        for stop in booking.stops:
            if stop.is_pickup and stop.date_time is not None:
                times[stop.id] = stop.date_time
    return times


def _first_dated_pickup(booking: Booking) -> Optional[datetime]:
    for stop in booking.stops:
        if stop.is_pickup and stop.date_time is not None:
            return stop.date_time
    return None


def resolve_planned_date(
    stop: AnnotatedStop,
    booking: Booking,
    pickup_times: Mapping[str, datetime],
) -> Optional[datetime]:
    """Own pickup time, then referenced pickup time, then the booking's first dated pickup."""
    if stop.is_pickup and stop.date_time is not None:
        return stop.date_time
    if not stop.is_pickup and stop.pickup_stop_id is not None:
        referenced = pickup_times.get(stop.pickup_stop_id)
        if referenced is not None:
            return referenced
    return _first_dated_pickup(booking)


def synthesize(
    ordered: Sequence[AnnotatedStop],
    bookings_by_id: Mapping[str, Booking],
    *,
    now: Clock | None = None,
) -> list[StopPayload]:
    """Build the dispatch payload entry for every stop of an ordered sequence.

    Args:
        ordered: Stops in visiting order, as returned by the sequencer.
        bookings_by_id: Every booking of the journey keyed by booking id.
        now: Clock used when no pickup of a booking carries a time. It is read
            at most once per call.

    Raises:
        NoPickupError: If ``ordered`` contains no pickup.
        UnknownBookingError: If a stop's booking is missing from ``bookings_by_id``.
    """
    if not any(stop.is_pickup for stop in ordered):
        raise NoPickupError()

    clock = now or _utc_now
    fallback_time: Optional[datetime] = None
    pickup_times = _pickup_times(bookings_by_id)
    payloads: list[StopPayload] = []

    for index, stop in enumerate(ordered):
        booking = bookings_by_id.get(stop.booking_id)
        if booking is None:
            raise UnknownBookingError(stop.id, stop.booking_id)

        last_stop = booking.last_stop
        is_destination = last_stop is not None and last_stop.id == stop.id

        distance = 0.0
        if index < len(ordered) - 1:
            distance = distance_meters(stop.location, ordered[index + 1].location)

        if is_destination:
            identifier, is_placeholder = resolve_request_id(booking)
            id_field = "request_id"
        else:
            identifier, is_placeholder = resolve_segment_id(stop.stop)
            id_field = "bookingsegment_id"

        planned = resolve_planned_date(stop, booking, pickup_times)
        if planned is None:
            if fallback_time is None:
                fallback_time = clock()
            planned = fallback_time

        payloads.append(
            StopPayload(
                stop_id=stop.id,
                booking_id=booking.id,
                id_field=id_field,
                identifier=identifier,
                is_destination=is_destination,
                planned_date=format_planned_date(planned),
                distance=distance,
                is_placeholder=is_placeholder,
            )
        )

    return payloads
