"""Sequencing domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Literal, Optional

from ...models.domain import Identifier, Location, Stop

IdentifierField = Literal["request_id", "bookingsegment_id"]


@dataclass(frozen=True, slots=True)
class AnnotatedStop:
    """A stop tagged with its owning booking and its place in the flattened input."""

    stop: Stop
    booking_id: str
    booking_input_index: int
    position: int

    @property
    def id(self) -> str:
        return self.stop.id

    @property
    def location(self) -> Location:
        return self.stop.location

    @property
    def is_pickup(self) -> bool:
        return self.stop.is_pickup

    @property
    def pickup_stop_id(self) -> Optional[str]:
        return self.stop.pickup_stop_id

    @property
    def date_time(self) -> Optional[datetime]:
        return self.stop.date_time


@dataclass(frozen=True, slots=True)
class StopPayload:
    stop_id: str
    booking_id: str
    id_field: IdentifierField
    identifier: Identifier
    is_destination: bool
    planned_date: str
    distance: float
    is_placeholder: bool = False


@dataclass(frozen=True, slots=True)
class JourneyEnvelope:
    stops: List[StopPayload]
    journey_server_id: Optional[Identifier] = None
    enable_messaging_service: bool = False
    logs: bool = False
    delete_outstanding_journeys: bool = False
    keyless_response: bool = True

    @property
    def is_update(self) -> bool:
        return self.journey_server_id is not None


@dataclass(slots=True)
class JourneyPlan:
    ordered_stops: List[Stop]
    payloads: List[StopPayload]
    envelope: JourneyEnvelope
    metadata: dict = field(default_factory=dict)
