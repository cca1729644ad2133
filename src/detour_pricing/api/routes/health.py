"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...config import settings

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


def _get_routes_client():
    """Lazy import to avoid startup failures."""
    from ...services.distance.routes_client import RoutesClient
    return RoutesClient


@router.get("/health/routes", status_code=status.HTTP_200_OK)
def health_routes() -> dict:
    """Check that the routing service answers a distance lookup."""
    try:
        client = _get_routes_client()()
        meters = client.compute_distance(settings.base_location, settings.base_location)
        return {"service": "routes", "healthy": True, "probe_distance_m": meters}
    except Exception as e:
        return {"service": "routes", "healthy": False, "error": str(e)}
