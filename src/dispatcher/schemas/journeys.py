"""Journey request/response schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, model_validator

from ..models.domain import Booking, Journey, Location, Stop, StopType

IdentifierValue = Union[int, str]


class LocationModel(BaseModel):
    address: str = ""
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class StopModel(BaseModel):
    id: str = Field(..., min_length=1)
    location: LocationModel
    stop_type: Literal["pickup", "dropoff"]
    name: Optional[str] = None
    phone: Optional[str] = None
    instructions: Optional[str] = None
    pickup_stop_id: Optional[str] = Field(default=None, description="Pickup delivered by this dropoff.")
    date_time: Optional[datetime] = Field(default=None, description="Requested pickup time; omit for ASAP.")
    booking_segment_id: Optional[IdentifierValue] = None

    def to_domain(self) -> Stop:
        return Stop(
            id=self.id,
            location=Location(address=self.location.address, lat=self.location.lat, lng=self.location.lng),
            stop_type=StopType(self.stop_type),
            name=self.name,
            phone=self.phone,
            instructions=self.instructions,
            pickup_stop_id=self.pickup_stop_id,
            date_time=self.date_time,
            booking_segment_id=self.booking_segment_id,
        )


class BookingModel(BaseModel):
    id: str = Field(..., min_length=1)
    stops: List[StopModel] = Field(default_factory=list)
    hold_on: bool = False
    booking_server_id: Optional[IdentifierValue] = None
    request_id: Optional[IdentifierValue] = None
    selected: bool = Field(default=True, description="Unselected bookings are kept out of the journey.")

    @model_validator(mode="after")
    def _check_stop_layout(self) -> "BookingModel":
        stop_types = [stop.stop_type for stop in self.stops]
        if self.hold_on and stop_types != ["pickup", "dropoff"]:
            raise ValueError(f"Hold-on booking '{self.id}' must have exactly one pickup followed by one dropoff.")
        if not self.hold_on and len(self.stops) < 2:
            raise ValueError(f"Booking '{self.id}' needs at least two stops.")
        missing = [stop.id for stop in self.stops if stop.stop_type == "dropoff" and not stop.pickup_stop_id]
        if missing:
            raise ValueError(f"Dropoff stop(s) without a pickup_stop_id in booking '{self.id}': {', '.join(missing)}")
        return self

    def to_domain(self) -> Booking:
        return Booking(
            id=self.id,
            stops=tuple(stop.to_domain() for stop in self.stops),
            hold_on=self.hold_on,
            booking_server_id=self.booking_server_id,
            request_id=self.request_id,
            selected=self.selected,
        )


class JourneyPayloadRequest(BaseModel):
    bookings: List[BookingModel]
    journey_server_id: Optional[IdentifierValue] = Field(
        default=None,
        description="Existing journey id when updating a published journey.",
    )
    enable_messaging_service: bool = False

    @model_validator(mode="after")
    def _unique_stop_ids(self) -> "JourneyPayloadRequest":
        seen: set[str] = set()
        duplicates: set[str] = set()
        for booking in self.bookings:
            for stop in booking.stops:
                if stop.id in seen:
                    duplicates.add(stop.id)
                seen.add(stop.id)
        if duplicates:
            raise ValueError(f"Duplicate stop ids in journey: {', '.join(sorted(duplicates))}")
        return self

    def to_domain(self) -> Journey:
        return Journey(
            bookings=tuple(booking.to_domain() for booking in self.bookings),
            journey_server_id=self.journey_server_id,
            enable_messaging_service=self.enable_messaging_service,
        )


class OrderedStopModel(BaseModel):
    id: str
    booking_id: str
    stop_type: Literal["pickup", "dropoff"]
    location: LocationModel
    name: Optional[str] = None
    phone: Optional[str] = None
    instructions: Optional[str] = None
    pickup_stop_id: Optional[str] = None
    date_time: Optional[datetime] = None
    booking_segment_id: Optional[IdentifierValue] = None


class JourneyPayloadResponse(BaseModel):
    journey_payload: dict
    ordered_stops: List[OrderedStopModel]
    metadata: Dict[str, object]


class JourneyPublishResponse(BaseModel):
    journey_server_id: Optional[IdentifierValue] = None
    status: str
    message: str
    journey_payload: dict
    ordered_stops: List[OrderedStopModel]
    metadata: Dict[str, object]
