"""Health check endpoints."""

from datetime import datetime, timezone

import structlog
from fastapi import APIRouter
from pydantic import BaseModel

from api.v1.dependencies import build_document_store
from core.config import settings
from core.exceptions import StoreRejectedError, StoreUnavailableError

router = APIRouter(tags=["health"])

logger = structlog.get_logger()

# Key that is never a real user id; reading it only proves the store answers.
_PROBE_KEY = "__health__"

VERSION = "1.0.0"


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    timestamp: str
    environment: str
    store_backend: str
    store: str | None = None


@router.get("/health", response_model=HealthResponse, summary="Basic health check")
async def health_check() -> HealthResponse:
    """
    Basic health check for load balancers.

    Returns service status without checking dependencies. Fast and lightweight.
    """
    return HealthResponse(
        status="healthy",
        version=VERSION,
        timestamp=datetime.now(timezone.utc).isoformat(),
        environment=settings.app_env,
        store_backend=settings.store_backend,
    )


@router.get(
    "/health/detailed",
    response_model=HealthResponse,
    summary="Detailed health check",
)
async def detailed_health_check() -> HealthResponse:
    """
    Detailed health check including document store reachability.

    An unauthenticated probe may be refused by Firestore security rules;
    a refusal still proves the store is reachable.
    """
    store = build_document_store()

    try:
        await store.get(_PROBE_KEY)
        store_status = "healthy"
    except StoreRejectedError:
        store_status = "healthy"
    except StoreUnavailableError as e:
        logger.warning("health_store_unavailable", error=e.message)
        store_status = f"unhealthy: {e.message}"

    overall_status = "healthy" if store_status == "healthy" else "degraded"

    return HealthResponse(
        status=overall_status,
        version=VERSION,
        timestamp=datetime.now(timezone.utc).isoformat(),
        environment=settings.app_env,
        store_backend=settings.store_backend,
        store=store_status,
    )
