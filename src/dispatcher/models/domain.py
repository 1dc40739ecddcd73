"""Domain models for journeys, bookings and their stops."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple, Union

Identifier = Union[int, str]


class StopType(str, Enum):
    PICKUP = "pickup"
    DROPOFF = "dropoff"


@dataclass(frozen=True, slots=True)
class Location:
    """A geocoded address. ``(0, 0)`` means the address was never resolved."""

    address: str
    lat: float
    lng: float


@dataclass(frozen=True, slots=True)
class Stop:
    """A single pickup or dropoff belonging to exactly one booking."""

    id: str
    location: Location
    stop_type: StopType
    name: Optional[str] = None
    phone: Optional[str] = None
    instructions: Optional[str] = None
    pickup_stop_id: Optional[str] = None
    date_time: Optional[datetime] = None
    booking_segment_id: Optional[Identifier] = None

    @property
    def is_pickup(self) -> bool:
        return self.stop_type is StopType.PICKUP

    @property
    def is_dropoff(self) -> bool:
        return self.stop_type is StopType.DROPOFF


@dataclass(frozen=True, slots=True)
class Booking:
    """One passenger (or hold-on wrapper) unit of a journey."""

    id: str
    stops: Tuple[Stop, ...]
    hold_on: bool = False
    booking_server_id: Optional[Identifier] = None
    request_id: Optional[Identifier] = None
    selected: bool = True

    @property
    def last_stop(self) -> Optional[Stop]:
        return self.stops[-1] if self.stops else None


@dataclass(frozen=True, slots=True)
class Journey:
    """The unit submitted to the dispatch API."""

    bookings: Tuple[Booking, ...]
    journey_server_id: Optional[Identifier] = None
    enable_messaging_service: bool = False
