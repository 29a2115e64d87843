"""
Response envelope helpers shared by the routers.

Success: ``{"success": true, "data": ..., "count"?: n, "message"?: str}``
Error:   ``{"success": false, "error": str, "code": str}``
"""

from typing import Any, Optional

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from shared_utils.config_loader import get_settings
from shared_utils.constants import LogScope
from shared_utils.error_handler import AppException, handle_error
from shared_utils.logging_utils import ContextualLogger


logger = ContextualLogger(scope=LogScope.API)


def _dump(data: Any) -> Any:
    """camelCase JSON for models (and lists of models)."""
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json", by_alias=True)
    if isinstance(data, list):
        return [_dump(d) for d in data]
    return jsonable_encoder(data)


def success_response(
    data: Any = None,
    status_code: int = status.HTTP_200_OK,
    message: Optional[str] = None,
    count: Optional[int] = None,
) -> JSONResponse:
    content: dict = {"success": True}
    if data is not None:
        content["data"] = _dump(data)
    if count is not None:
        content["count"] = count
    if message:
        content["message"] = message
    return JSONResponse(status_code=status_code, content=content)


def error_response(exc: Exception, event: str = "request_failed") -> JSONResponse:
    """Map an exception to the error envelope.

    AppException carries its own HTTP status; anything else is a 500 with the
    message hidden in production.
    """
    if isinstance(exc, AppException):
        logger.warning(event, error_code=exc.error_code, http_status=exc.http_status)
        return JSONResponse(status_code=exc.http_status, content=exc.to_dict())

    error_body = handle_error(
        exc,
        scope=LogScope.API,
        expose_details=not get_settings().is_production,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body,
    )
