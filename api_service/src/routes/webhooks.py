"""
Nylas Notetaker webhook endpoints.

    GET  /webhooks/nylas?challenge=...   Subscription handshake (echo)
    POST /webhooks/nylas                 Signed event delivery
"""

from typing import Optional

from fastapi import APIRouter, Request, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from api_service.src.responses import error_response
from shared_utils.constants import APIEndpoints, LogScope, NylasEvents
from shared_utils.di_container import get_di_container
from shared_utils.error_handler import ValidationError
from shared_utils.logging_utils import ContextualLogger


logger = ContextualLogger(scope=LogScope.WEBHOOK)

router = APIRouter(tags=["webhooks"])


@router.get(APIEndpoints.NYLAS_WEBHOOK)
def webhook_challenge(challenge: Optional[str] = None) -> Response:
    """Echo the challenge token verbatim so Nylas accepts the endpoint."""
    if not challenge:
        logger.warning("webhook_challenge_missing")
        return error_response(ValidationError("No challenge parameter received"))
    logger.info("webhook_challenge_received")
    return PlainTextResponse(challenge)


@router.post(APIEndpoints.NYLAS_WEBHOOK)
async def receive_webhook(request: Request) -> JSONResponse:
    """Verify and apply one event.

    The signature covers the exact bytes received, so the body is read raw
    rather than parsed by FastAPI.
    """
    try:
        raw_body = await request.body()
        signature = request.headers.get(NylasEvents.SIGNATURE_HEADER)
        service = get_di_container().get_webhook_service()
        ack = await run_in_threadpool(service.handle_event, raw_body, signature)
        return JSONResponse(status_code=status.HTTP_200_OK, content=ack)
    except Exception as e:
        return error_response(e, "webhook_error")
