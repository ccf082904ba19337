"""Main FastAPI application entry point."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import ORJSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from api.exception_handlers import setup_exception_handlers
from api.middleware.request_context import RequestContextMiddleware
from api.routes.health import VERSION
from api.routes.health import router as health_router
from api.v1 import router as v1_router
from api.v1.dependencies import get_http_client
from core.config import settings
from core.logging import setup_logging
from core.rate_limit import limiter, rate_limit_exceeded_handler
from infrastructure.database.session import get_engine

logger = structlog.get_logger()

# Initialize structured logging
setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager: release store connections on shutdown."""
    logger.info(
        "app_started",
        environment=settings.app_env,
        store_backend=settings.store_backend,
    )
    yield

    if get_http_client.cache_info().currsize:
        await get_http_client().aclose()
        get_http_client.cache_clear()
    if get_engine.cache_info().currsize:
        await get_engine().dispose()
    logger.info("app_stopped")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        title=settings.app_name,
        description=(
            "## QueCocino profile service\n\n"
            "Keeps one profile document per signed-in user. The app calls "
            "`POST /api/v1/profiles/reconcile` right after Google sign-in; the "
            "first call creates the profile, later calls return it unchanged.\n\n"
            "### Authentication\n"
            "Send the Firebase ID token obtained after sign-in:\n"
            "```\nAuthorization: Bearer <firebase_id_token>\n```\n\n"
            "### Errors\n"
            "- `STORE_UNAVAILABLE` (503): the document store could not be reached; "
            "safe to retry\n"
            "- `STORE_REJECTED` (502): the store refused the operation; do not retry\n\n"
            "### Rate Limits\n"
            "- POST /profiles/reconcile: 10 requests/minute\n"
            "- GET endpoints: 30 requests/minute"
        ),
        version=VERSION,
        debug=settings.debug,
        contact={
            "name": "QueCocino Support",
        },
        license_info={
            "name": "MIT",
        },
        openapi_tags=[
            {
                "name": "health",
                "description": "Health check endpoints",
            },
            {
                "name": "profiles",
                "description": "User profile reconciliation",
            },
        ],
    )

    # Rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # Request tracking (LIFO order - last added = outermost)
    app.add_middleware(RequestContextMiddleware)

    # GZip compression for responses > 1KB
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Setup exception handlers
    setup_exception_handlers(app)

    # Include routers
    app.include_router(health_router)
    app.include_router(v1_router, prefix="/api/v1")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=not settings.is_production,
    )
