"""Flatten a journey's bookings into one collection of annotated stops."""

from __future__ import annotations

from typing import Sequence

from ...models.domain import Booking
from .models import AnnotatedStop


def flatten(bookings: Sequence[Booking]) -> list[AnnotatedStop]:
    annotated: list[AnnotatedStop] = []
    for booking_index, booking in enumerate(bookings):
        for stop in booking.stops:
            annotated.append(
                AnnotatedStop(
                    stop=stop,
                    booking_id=booking.id,
                    booking_input_index=booking_index,
                    position=len(annotated),
                )
            )
    return annotated
