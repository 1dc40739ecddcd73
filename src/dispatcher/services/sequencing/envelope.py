"""Journey envelope assembly."""

from __future__ import annotations

from typing import Optional, Sequence

from ...config import settings
from ...models.domain import Identifier
from .models import JourneyEnvelope, StopPayload


def assemble_envelope(
    payloads: Sequence[StopPayload],
    *,
    journey_server_id: Optional[Identifier] = None,
    enable_messaging_service: bool = False,
    logs: Optional[bool] = None,
    delete_outstanding_journeys: Optional[bool] = None,
    keyless_response: Optional[bool] = None,
) -> JourneyEnvelope:
    """Wrap per-stop payloads into the journey request; unset flags come from settings."""
    return JourneyEnvelope(
        stops=list(payloads),
        journey_server_id=journey_server_id,
        enable_messaging_service=enable_messaging_service,
        logs=settings.journey_logs if logs is None else logs,
        delete_outstanding_journeys=settings.delete_outstanding_journeys
        if delete_outstanding_journeys is None
        else delete_outstanding_journeys,
        keyless_response=settings.keyless_response if keyless_response is None else keyless_response,
    )
