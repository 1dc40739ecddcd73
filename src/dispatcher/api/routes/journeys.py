"""Journey sequencing and publishing endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status
from fastapi.responses import Response

from ...schemas.journeys import JourneyPayloadRequest, JourneyPayloadResponse, JourneyPublishResponse
from ...services.dispatch.client import DispatchAPIError, DispatchNotConfiguredError
from ...services.outputs.journey_formatter import ordered_stops_to_csv
from ...services.sequencing import service as journey_service
from ...services.sequencing.errors import SequencingError, UnpublishedIdentifierError

router = APIRouter(prefix="/journeys", tags=["journeys"])
logger = logging.getLogger(__name__)


@router.post("/payload", response_model=JourneyPayloadResponse, status_code=status.HTTP_200_OK)
def preview_payload(payload: JourneyPayloadRequest) -> JourneyPayloadResponse:
    try:
        return journey_service.preview_journey(payload)
    except SequencingError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception("Error generating journey payload: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to generate journey payload: {exc}",
        ) from exc


@router.post("/manifest", status_code=status.HTTP_200_OK)
def download_manifest(payload: JourneyPayloadRequest) -> Response:
    """Ordered stop manifest as CSV."""
    try:
        plan = journey_service.build_plan(payload)
    except SequencingError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return Response(
        content=ordered_stops_to_csv(plan),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="journey_manifest.csv"'},
    )


@router.post("/publish", response_model=JourneyPublishResponse, status_code=status.HTTP_200_OK)
def publish(payload: JourneyPayloadRequest) -> JourneyPublishResponse:
    try:
        return journey_service.publish_journey(payload)
    except UnpublishedIdentifierError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except SequencingError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except DispatchNotConfiguredError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    except (DispatchAPIError, ConnectionError) as exc:
        logger.error("Dispatch API rejected journey: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Failed to publish journey: {exc}",
        ) from exc
    except Exception as exc:
        logger.exception("Error publishing journey: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to publish journey: {exc}",
        ) from exc
