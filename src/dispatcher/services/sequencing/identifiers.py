"""Request and booking-segment identifier resolution.

Stops and bookings only receive real identifiers once the dispatch API has
accepted them. Previews run before that, so missing identifiers are replaced
with deterministic placeholder strings keyed by a truncated local id.
"""

from __future__ import annotations

import logging

from ...models.domain import Booking, Identifier, Stop

logger = logging.getLogger(__name__)

PLACEHOLDER_KEY_LENGTH = 4


def placeholder_request_id(booking_id: str) -> str:
    return f"(placeholder_request_id_for_{booking_id[:PLACEHOLDER_KEY_LENGTH]})"


def placeholder_segment_id(stop_id: str) -> str:
    return f"(placeholder_bookingsegment_id_for_{stop_id[:PLACEHOLDER_KEY_LENGTH]})"


def resolve_request_id(booking: Booking) -> tuple[Identifier, bool]:
    """Return ``(identifier, is_placeholder)`` for the booking's destination stop."""
    if booking.request_id is not None:
        return booking.request_id, False
    if booking.booking_server_id is not None:
        return booking.booking_server_id, False
    logger.debug("Booking %s has no request id yet; using a placeholder", booking.id)
    return placeholder_request_id(booking.id), True


def resolve_segment_id(stop: Stop) -> tuple[Identifier, bool]:
    """Return ``(identifier, is_placeholder)`` for an intermediate stop."""
    if stop.booking_segment_id is not None:
        return stop.booking_segment_id, False
    logger.debug("Stop %s has no booking segment id yet; using a placeholder", stop.id)
    return placeholder_segment_id(stop.id), True
