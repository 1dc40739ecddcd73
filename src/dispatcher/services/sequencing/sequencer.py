"""Greedy nearest-neighbour stop sequencing with pickup-before-dropoff precedence.

The journey is treated as a single-vehicle pickup-and-delivery problem. Starting
from the earliest scheduled pickup, the vehicle repeatedly moves to the closest
stop it is allowed to visit: any pickup, or a dropoff whose passenger is
currently on board. O(n^2), not optimal.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional, Sequence

from ..geospatial import distance_meters
from .errors import NoPickupError
from .models import AnnotatedStop

logger = logging.getLogger(__name__)


def as_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime; naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _start_key(stop: AnnotatedStop) -> tuple:
    # Scheduled pickups sort chronologically ahead of every ASAP pickup.
    if stop.date_time is not None:
        return (0, as_utc(stop.date_time).timestamp(), stop.booking_input_index, stop.position)
    return (1, 0.0, stop.booking_input_index, stop.position)


def select_start(stops: Sequence[AnnotatedStop]) -> AnnotatedStop:
    pickups = [stop for stop in stops if stop.is_pickup]
    if not pickups:
        raise NoPickupError()
    return min(pickups, key=_start_key)


def sequence(stops: Sequence[AnnotatedStop]) -> list[AnnotatedStop]:
    """Order every stop of a journey into one visiting sequence.

    Args:
        stops: Flattened stops of all bookings, in encounter order.

    Returns:
        A new list containing each input stop exactly once, with every dropoff
        placed after the pickup it references.

    Raises:
        NoPickupError: If ``stops`` contains no pickup.
    """
    current = select_start(stops)
    visited: list[AnnotatedStop] = [current]
    occupancy: set[str] = {current.id}
    unvisited = sorted((stop for stop in stops if stop.position != current.position), key=lambda s: s.position)

    while unvisited:
        candidates = [
            stop
            for stop in unvisited
            if stop.is_pickup or (stop.pickup_stop_id is not None and stop.pickup_stop_id in occupancy)
        ]

        if not candidates:
            origin = current
            logger.warning(
                "No reachable candidates from stop %s; appending %d orphaned dropoff(s) by distance: %s",
                origin.id,
                len(unvisited),
                ", ".join(stop.id for stop in unvisited),
            )
            remaining = sorted(unvisited, key=lambda s: distance_meters(origin.location, s.location))
            visited.extend(remaining)
            break

        # min() keeps the first candidate on ties, so encounter order wins.
        origin = current
        current = min(candidates, key=lambda s: distance_meters(origin.location, s.location))
        visited.append(current)
        unvisited = [stop for stop in unvisited if stop.position != current.position]

        if current.is_pickup:
            occupancy.add(current.id)
        elif current.pickup_stop_id is not None:
            occupancy.discard(current.pickup_stop_id)

    return visited


def find_orphaned_dropoffs(stops: Sequence[AnnotatedStop]) -> list[AnnotatedStop]:
    """Return dropoffs whose ``pickup_stop_id`` does not resolve to a pickup in ``stops``."""
    pickup_ids = {stop.id for stop in stops if stop.is_pickup}
    return [
        stop
        for stop in stops
        if not stop.is_pickup and _missing(stop.pickup_stop_id, pickup_ids)
    ]


def _missing(pickup_stop_id: Optional[str], pickup_ids: set[str]) -> bool:
    return pickup_stop_id is None or pickup_stop_id not in pickup_ids
