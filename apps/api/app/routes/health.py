import gc
import sys
import time
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter

from apps.api.app.config import settings
from apps.api.app.models import HealthResponse
from jobs.ingest.languages import supported_countries

router = APIRouter()

_STARTED = time.monotonic()


@router.get("/health", response_model=HealthResponse)
def health() -> Dict[str, Any]:
    """
    Liveness. Always 200; does not touch Google Play.
    """
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": round(time.monotonic() - _STARTED, 3),
        "memory": {
            "allocatedBlocks": sys.getallocatedblocks(),
            "gcCounts": list(gc.get_count()),
        },
        "version": settings.app_version,
    }


@router.get("/info")
def api_info() -> Dict[str, Any]:
    return {
        "name": "Google Play Reviews API",
        "version": settings.app_version,
        "description": "Fetch Google Play Store app reviews with multi-language support",
        "endpoints": {
            "/app": "Get app reviews",
            "/app/info": "Get app information",
            "/app/search": "Search for apps",
            "/app/suggestions": "Get app suggestions",
            "/swagger": "Interactive API documentation",
            "/swagger.json": "OpenAPI specification",
            "/health": "API health status",
            "/info": "API information",
        },
        "features": [
            "Country-specific review languages",
            "Parallel multi-language fetching with per-language failure isolation",
            "Normalized review schema",
            "Relative and absolute date filtering",
            "Retries with exponential backoff",
        ],
        "supportedCountries": supported_countries(),
    }
