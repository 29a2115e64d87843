"""
FastAPI backend for the meeting notes service.

Endpoints:
    GET  /health                       Health check
    *    /api/meetings/...             Meetings, processing, notetaker join
    *    /api/action-items/...         Action items
    *    /webhooks/nylas               Notetaker webhooks
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
import uvicorn

from api_service.src.rate_limit import limiter, settings
from api_service.src.routes import action_items, meetings, webhooks
from shared_utils.constants import APIEndpoints, ErrorCode, LogScope
from shared_utils.di_container import get_di_container
from shared_utils.logging_utils import ContextualLogger, configure_logging


# ---------------------------------------------------------------------------
# Application bootstrap
# ---------------------------------------------------------------------------

logger = ContextualLogger(scope=LogScope.API)


def register_webhooks() -> bool:
    """Point the notetaker provider at ``WEBHOOK_URL``; never fatal."""
    if not settings.webhook_url:
        logger.info("webhook_registration_skipped", reason="WEBHOOK_URL not set")
        return False
    notetaker = get_di_container().get_notetaker()
    if not notetaker.enabled:
        logger.info("webhook_registration_skipped", reason="notetaker disabled")
        return False
    try:
        return notetaker.setup_webhooks(settings.webhook_url)
    except Exception as e:
        logger.error("webhook_registration_failed", error=str(e))
        return False


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.log_level, json_output=settings.is_production)
    register_webhooks()
    logger.info(
        "api_initialized",
        environment=settings.environment,
        storage_backend=settings.storage_backend.value,
        notetaker_mode=settings.notetaker_mode,
    )
    yield
    logger.info("api_shutdown")


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description=settings.app_description,
    lifespan=lifespan,
)

app.state.limiter = limiter

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning("rate_limit_exceeded", path=request.url.path, limit=str(exc.detail))
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={
            "success": False,
            "error": f"Rate limit exceeded: {exc.detail}",
            "code": ErrorCode.RATE_LIMITED.value,
        },
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies get the same 400 envelope as service validation errors."""
    logger.warning("request_body_invalid", path=request.url.path)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "success": False,
            "error": "Invalid request body",
            "code": ErrorCode.INVALID_INPUT.value,
        },
    )


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------

@app.get(APIEndpoints.HEALTH)
def health_check() -> dict:
    """Health check endpoint."""
    logger.debug("health_check_requested")
    return {
        "status": "healthy",
        "environment": settings.environment,
        "storage": settings.storage_backend.value,
        "notetaker": settings.notetaker_mode,
    }


app.include_router(meetings.router)
app.include_router(action_items.router)
app.include_router(webhooks.router)


if __name__ == "__main__":
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )
