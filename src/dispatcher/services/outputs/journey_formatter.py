"""Serializers for journey payload outputs."""

from __future__ import annotations

import csv
import io

from ..sequencing.models import JourneyEnvelope, JourneyPlan, StopPayload


def _flag(value: bool) -> str:
    return "true" if value else "false"


def stop_payload_to_wire(payload: StopPayload) -> dict:
    return {
        payload.id_field: payload.identifier,
        "is_destination": _flag(payload.is_destination),
        "planned_date": payload.planned_date,
        "distance": payload.distance,
    }


def envelope_to_json(envelope: JourneyEnvelope) -> dict:
    return {
        "logs": _flag(envelope.logs),
        "delete_outstanding_journeys": _flag(envelope.delete_outstanding_journeys),
        "keyless_response": envelope.keyless_response,
        "journeys": [
            {
                "id": envelope.journey_server_id,
                "enable_messaging_service": envelope.enable_messaging_service,
                "bookings": [stop_payload_to_wire(payload) for payload in envelope.stops],
            }
        ],
    }


def ordered_stops_to_csv(plan: JourneyPlan) -> str:
    buffer = io.StringIO()
    fieldnames = [
        "sequence",
        "stop_id",
        "booking_id",
        "stop_type",
        "name",
        "address",
        "lat",
        "lng",
        "id_field",
        "identifier",
        "is_destination",
        "planned_date",
        "distance_m",
    ]
    writer = csv.DictWriter(buffer, fieldnames=fieldnames)
    writer.writeheader()
    for sequence, (stop, payload) in enumerate(zip(plan.ordered_stops, plan.payloads), start=1):
        writer.writerow(
            {
                "sequence": sequence,
                "stop_id": stop.id,
                "booking_id": payload.booking_id,
                "stop_type": stop.stop_type.value,
                "name": stop.name or "",
                "address": stop.location.address,
                "lat": stop.location.lat,
                "lng": stop.location.lng,
                "id_field": payload.id_field,
                "identifier": payload.identifier,
                "is_destination": _flag(payload.is_destination),
                "planned_date": payload.planned_date,
                "distance_m": round(payload.distance, 1),
            }
        )
    return buffer.getvalue()
