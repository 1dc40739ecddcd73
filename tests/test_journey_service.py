from datetime import datetime, timezone

import pytest

from src.dispatcher.models.domain import Booking, Journey, Location, Stop, StopType
from src.dispatcher.services.outputs.journey_formatter import envelope_to_json, ordered_stops_to_csv
from src.dispatcher.services.sequencing.envelope import assemble_envelope
from src.dispatcher.services.sequencing.errors import NoPickupError
from src.dispatcher.services.sequencing.models import StopPayload
from src.dispatcher.services.sequencing.service import generate_journey_payload


def _clock() -> datetime:
    return datetime(2030, 1, 1, tzinfo=timezone.utc)


def _booking(bid: str, lat: float, when: datetime | None = None, **kwargs) -> Booking:
    pickup = Stop(
        id=f"{bid}-p",
        location=Location(address=f"Pickup {bid}", lat=lat, lng=0.0),
        stop_type=StopType.PICKUP,
        name=f"Passenger {bid}",
        date_time=when,
    )
    dropoff = Stop(
        id=f"{bid}-d",
        location=Location(address=f"Dropoff {bid}", lat=lat + 0.1, lng=0.0),
        stop_type=StopType.DROPOFF,
        pickup_stop_id=pickup.id,
    )
    return Booking(id=bid, stops=(pickup, dropoff), **kwargs)


def test_generate_journey_payload_builds_full_plan():
    journey = Journey(
        bookings=(
            _booking("b1", 0.0, datetime(2024, 5, 1, 9, tzinfo=timezone.utc), request_id=201),
            _booking("b2", 0.02),
        ),
        journey_server_id=42,
        enable_messaging_service=True,
    )

    plan = generate_journey_payload(journey, now=_clock)

    assert [stop.id for stop in plan.ordered_stops] == ["b1-p", "b2-p", "b1-d", "b2-d"]
    assert len(plan.payloads) == 4
    assert plan.envelope.is_update
    assert plan.envelope.enable_messaging_service
    assert plan.metadata["stop_count"] == 4
    assert plan.metadata["booking_count"] == 2
    assert plan.metadata["is_update"] is True
    # b2's pickup and dropoff have no identifiers, b1's pickup has no segment id
    assert plan.metadata["placeholder_count"] == 3
    assert plan.metadata["orphaned_dropoffs"] == []
    assert plan.metadata["total_distance_m"] == pytest.approx(
        round(sum(payload.distance for payload in plan.payloads), 1)
    )


def test_unselected_bookings_are_skipped():
    journey = Journey(bookings=(_booking("b1", 0.0), _booking("b2", 0.5, selected=False)))

    plan = generate_journey_payload(journey, now=_clock)

    assert [stop.id for stop in plan.ordered_stops] == ["b1-p", "b1-d"]
    assert plan.metadata["skipped_bookings"] == 1


def test_nothing_selected_raises():
    journey = Journey(bookings=(_booking("b1", 0.0, selected=False),))
    with pytest.raises(NoPickupError):
        generate_journey_payload(journey, now=_clock)


def test_journey_input_is_left_untouched():
    journey = Journey(bookings=(_booking("b2", 0.5), _booking("b1", 0.0)))
    before = journey.bookings

    generate_journey_payload(journey, now=_clock)

    assert journey.bookings is before
    assert [booking.id for booking in journey.bookings] == ["b2", "b1"]


def test_envelope_wire_format_for_new_journey():
    payload = StopPayload(
        stop_id="s1",
        booking_id="b1",
        id_field="request_id",
        identifier=201,
        is_destination=True,
        planned_date="2024-05-01T10:00:00.000Z",
        distance=0.0,
    )
    envelope = assemble_envelope([payload])

    assert not envelope.is_update
    assert envelope_to_json(envelope) == {
        "logs": "false",
        "delete_outstanding_journeys": "false",
        "keyless_response": True,
        "journeys": [
            {
                "id": None,
                "enable_messaging_service": False,
                "bookings": [
                    {
                        "request_id": 201,
                        "is_destination": "true",
                        "planned_date": "2024-05-01T10:00:00.000Z",
                        "distance": 0.0,
                    }
                ],
            }
        ],
    }


def test_envelope_flags_can_be_overridden():
    envelope = assemble_envelope([], journey_server_id=7, logs=True, keyless_response=False)
    wire = envelope_to_json(envelope)

    assert wire["logs"] == "true"
    assert wire["keyless_response"] is False
    assert wire["journeys"][0]["id"] == 7


def test_ordered_stops_csv_manifest():
    journey = Journey(bookings=(_booking("b1", 0.0),))
    plan = generate_journey_payload(journey, now=_clock)

    lines = ordered_stops_to_csv(plan).strip().splitlines()

    assert lines[0].startswith("sequence,stop_id,booking_id,stop_type")
    assert len(lines) == 3
    assert lines[1].startswith("1,b1-p,b1,pickup,Passenger b1,Pickup b1")
    assert "(placeholder_request_id_for_b1)" in lines[2]


def test_passenger_count_excludes_hold_on_bookings():
    journey = Journey(
        bookings=(
            _booking("b1", 0.0, request_id=201),
            _booking("b2", 0.02, request_id=202),
            _booking("wait", 0.04, request_id=203, hold_on=True),
        )
    )

    plan = generate_journey_payload(journey, now=_clock)

    assert plan.metadata["booking_count"] == 3
    assert plan.metadata["passenger_count"] == 2
    assert plan.metadata["stop_count"] == 6
