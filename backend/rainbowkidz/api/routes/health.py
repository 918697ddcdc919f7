"""Health & Readiness Probes — liveness and readiness endpoints.

Invariants:
    - GET / and GET /health always return 200 if the process is up (liveness)
    - GET /health/ready returns 503 if the data store is unreachable (readiness)
"""

import logging
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from rainbowkidz.api.deps import get_app_settings, get_data_store
from rainbowkidz.config import Settings
from rainbowkidz.infrastructure.data_store import DataStoreClient

logger = logging.getLogger(__name__)
router = APIRouter(tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
@router.get("/health", status_code=status.HTTP_200_OK)
async def health_check(settings: Settings = Depends(get_app_settings)):
    """Basic liveness probe. Returns 200 if the process is up."""
    return {
        "ok": True,
        "service": settings.service_name,
        "version": settings.service_version,
    }


@router.get("/health/ready")
async def readiness_check(store: DataStoreClient = Depends(get_data_store)):
    """Readiness probe — includes data store connectivity."""
    if not await store.health_check():
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"ok": False, "error": "data_store_unavailable"},
        )
    return {"ok": True, "checks": {"data_store": "healthy"}}
