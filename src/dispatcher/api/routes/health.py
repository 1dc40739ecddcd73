"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...config import settings

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


def _get_dispatch_health_check():
    """Lazy import to avoid startup failures."""
    from ...services.dispatch.client import check_health as dispatch_health_check
    return dispatch_health_check


@router.get("/health/dispatch", status_code=status.HTTP_200_OK)
def health_dispatch() -> dict:
    """Check dispatch API reachability."""
    if not settings.dispatch_configured:
        return {
            "service": "dispatch",
            "configured": False,
            "healthy": False,
            "message": "Set DISPATCHER_DISPATCH_HOST, DISPATCHER_DISPATCH_APP_KEY and DISPATCHER_DISPATCH_SECRET_KEY.",
        }
    try:
        dispatch_health_check = _get_dispatch_health_check()
        return {"service": "dispatch", "configured": True, "healthy": dispatch_health_check()}
    except Exception as e:
        return {"service": "dispatch", "configured": True, "healthy": False, "error": str(e)}
