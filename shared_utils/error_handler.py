"""
Structured error handling and response formatting.
Provides consistent error responses with error codes and context.
"""

from typing import Optional, Dict, Any
import logging

from shared_utils.constants import ErrorCode, LogScope
from shared_utils.logging_utils import get_scoped_logger


class AppException(Exception):
    """Base exception for application errors."""

    def __init__(
        self,
        error_code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        http_status: int = 500
    ):
        self.error_code = error_code
        self.message = message
        self.context = context or {}
        self.http_status = http_status
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to the API error envelope."""
        body: Dict[str, Any] = {
            "success": False,
            "error": self.message,
            "code": self.error_code,
        }
        if self.context:
            body["context"] = self.context
        return body


class ValidationError(AppException):
    """Validation/input error."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(
            error_code=ErrorCode.INVALID_INPUT.value,
            message=message,
            context=context,
            http_status=400
        )


class NotFoundError(AppException):
    """Referenced document does not exist."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(
            error_code=ErrorCode.NOT_FOUND.value,
            message=message,
            context=context,
            http_status=404
        )


class ConflictError(AppException):
    """Operation clashes with the current state of a document."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(
            error_code=ErrorCode.CONFLICT.value,
            message=message,
            context=context,
            http_status=409
        )


class NoTranscriptError(AppException):
    """Meeting has neither inline text nor a fetchable transcript."""

    def __init__(
        self,
        message: str = "Meeting has no transcript to process",
        meeting_id: Optional[str] = None,
    ):
        super().__init__(
            error_code=ErrorCode.NO_TRANSCRIPT.value,
            message=message,
            context={"meeting_id": meeting_id} if meeting_id else None,
            http_status=400
        )


class SignatureError(AppException):
    """Webhook signature verification failed."""

    def __init__(self, message: str = "Invalid signature"):
        super().__init__(
            error_code=ErrorCode.INVALID_SIGNATURE.value,
            message=message,
            http_status=401
        )


class ConfigurationError(AppException):
    """Configuration error."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(
            error_code=ErrorCode.INVALID_CONFIG.value,
            message=message,
            context=context,
            http_status=500
        )


class UpstreamError(AppException):
    """Third-party call (LLM, notetaker, document store) failed."""

    def __init__(self, service: str, message: str, context: Optional[Dict[str, Any]] = None):
        full_message = f"{service} request failed: {message}"
        super().__init__(
            error_code=ErrorCode.UPSTREAM_FAILED.value,
            message=full_message,
            context={**(context or {}), "service": service},
            http_status=500
        )


class ProcessingError(AppException):
    """Meeting processing pipeline error."""

    def __init__(
        self,
        message: str,
        meeting_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = {**(context or {})}
        if meeting_id:
            ctx["meeting_id"] = meeting_id
        super().__init__(
            error_code=ErrorCode.PROCESSING_FAILED.value,
            message=message,
            context=ctx,
            http_status=500,
        )


def log_exception(
    exc: Exception,
    scope: str = LogScope.ERROR_HANDLER,
    logger: Optional[logging.Logger] = None
) -> None:
    """Log exception with structured context.

    Args:
        exc: Exception to log
        scope: Log scope identifier
        logger: Optional custom logger (uses structlog if not provided)
    """
    if logger is None:
        logger = get_scoped_logger(scope)

    if isinstance(exc, AppException):
        logger.error(
            "app_exception",
            error_code=exc.error_code,
            message=exc.message,
            http_status=exc.http_status,
            context=exc.context
        )
    else:
        logger.error(
            "unexpected_exception",
            error_type=type(exc).__name__,
            message=str(exc),
            exc_info=exc
        )


def handle_error(
    exc: Exception,
    scope: str = LogScope.ERROR_HANDLER,
    default_error_code: str = ErrorCode.INTERNAL_ERROR.value,
    expose_details: bool = True,
) -> Dict[str, Any]:
    """Handle exception and return the error envelope.

    Args:
        exc: Exception to handle
        scope: Log scope
        default_error_code: Default error code for non-AppException errors
        expose_details: Include the exception text for unexpected errors
            (disabled in production)

    Returns:
        Error response dictionary
    """
    log_exception(exc, scope)

    if isinstance(exc, AppException):
        return exc.to_dict()

    message = (
        f"An unexpected error occurred: {str(exc)}"
        if expose_details
        else "Internal server error"
    )
    return {
        "success": False,
        "error": message,
        "code": default_error_code,
    }
