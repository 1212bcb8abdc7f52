"""
DevCamper Backend — Error Taxonomy and Translator
===================================================

What:  Application error types plus the single function that turns any
       error into one of them.
How:   Every ApiError carries a user-facing message, an HTTP status code and
       an optional context dict (logged, never returned). Services return
       them inside `Err(...)`; anything that escapes a handler as a raw
       exception is mapped by `translate_exception()`.

Exception Hierarchy:
    ApiError (base)                → carried status
    ├── NotFoundError              → 404
    ├── UnauthorizedError          → 401 (missing / bad credentials)
    ├── ForbiddenError             → 403 (role or ownership violation)
    ├── ValidationFailedError      → 400 (aggregated field messages)
    ├── DuplicateKeyError          → 400 (unique constraint)
    ├── CastError                  → 400 (malformed id / filter value)
    ├── BadUploadError             → 400 (missing file, wrong type, too large)
    ├── GeocodingError             → 400 (address could not be resolved)
    ├── GeocoderUnavailableError   → 503
    ├── RateLimitExceededError     → 429
    ├── FileStorageError           → 500
    ├── MailDeliveryError          → 500
    └── InternalError              → 500

Envelope produced for every error: {"success": false, "error": message}
"""

import logging
from typing import Any, Dict, Optional

from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """
    Base class for all DevCamper application errors.

    Attributes:
        message:      User-facing error description (returned in the envelope)
        status_code:  HTTP status for the response
        context:      Additional debug info (logged but NOT returned to client)
    """

    status_code: int = 500
    default_message: str = "Server Error"

    def __init__(
        self,
        message: Optional[str] = None,
        status_code: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        self.context = context or {}
        super().__init__(self.message)

    @property
    def kind(self) -> str:
        """Tag used in logs, e.g. 'NotFoundError'."""
        return type(self).__name__

    def to_envelope(self) -> Dict[str, Any]:
        return {"success": False, "error": self.message}


class NotFoundError(ApiError):
    """Requested resource does not exist. The message names the missing id."""

    status_code = 404
    default_message = "Resource not found"


class UnauthorizedError(ApiError):
    status_code = 401
    default_message = "Not authorized to access this route"


class ForbiddenError(ApiError):
    status_code = 403
    default_message = "Not authorized to perform this action"


class ValidationFailedError(ApiError):
    """
    Client input failed schema or business validation.

    `errors` keeps the individual field messages; the envelope message is
    their comma-joined aggregate.
    """

    status_code = 400
    default_message = "Validation failed"

    def __init__(self, errors=None, message: Optional[str] = None, context=None):
        self.errors = list(errors or [])
        if message is None and self.errors:
            message = ", ".join(self.errors)
        super().__init__(message=message, context=context)


class DuplicateKeyError(ApiError):
    status_code = 400
    default_message = "Duplicate field value entered"


class CastError(ApiError):
    """A path id or filter value could not be converted to the column type."""

    status_code = 400
    default_message = "Invalid identifier"

    def __init__(self, value: Any, message: Optional[str] = None, context=None):
        self.value = value
        super().__init__(
            message=message or f"Resource not found with id of {value}",
            context=context,
        )


class BadUploadError(ApiError):
    status_code = 400
    default_message = "Please upload a file"


class GeocodingError(ApiError):
    status_code = 400
    default_message = "Address could not be geocoded"


class GeocoderUnavailableError(ApiError):
    status_code = 503
    default_message = "Geocoding service is temporarily unavailable"


class RateLimitExceededError(ApiError):
    status_code = 429
    default_message = "Too many requests, please try again later."

    def __init__(self, retry_after: int = 60, context=None):
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(context=ctx)
        self.retry_after = retry_after


class FileStorageError(ApiError):
    status_code = 500
    default_message = "Problem with file upload"


class MailDeliveryError(ApiError):
    status_code = 500
    default_message = "Email could not be sent"


class InternalError(ApiError):
    status_code = 500
    default_message = "Server Error"


# ══════════════════════════════════════════════════════════════════════════
# Translation
# ══════════════════════════════════════════════════════════════════════════

_UNIQUE_MARKERS = ("unique", "duplicate")


def _field_message(error: Dict[str, Any]) -> str:
    """Render one pydantic error as '<field>: <msg>'."""
    loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
    msg = error.get("msg", "Invalid value")
    return f"{'.'.join(loc)}: {msg}" if loc else msg


def translate_exception(exc: Exception) -> ApiError:
    """
    Map any exception to an ApiError.

    Known shapes:
        ApiError                 → itself
        IntegrityError (unique)  → DuplicateKeyError
        IntegrityError (other)   → ValidationFailedError
        Request/pydantic errors  → ValidationFailedError with field messages
        Starlette HTTPException  → ApiError with its status and detail
        anything else            → InternalError
    """
    if isinstance(exc, ApiError):
        return exc

    if isinstance(exc, IntegrityError):
        text = str(exc.orig if exc.orig is not None else exc).lower()
        if any(marker in text for marker in _UNIQUE_MARKERS):
            return DuplicateKeyError(context={"detail": text})
        return ValidationFailedError(
            message="Invalid reference or missing required field",
            context={"detail": text},
        )

    if isinstance(exc, (RequestValidationError, PydanticValidationError)):
        return ValidationFailedError(errors=[_field_message(e) for e in exc.errors()])

    if isinstance(exc, StarletteHTTPException):
        return ApiError(message=str(exc.detail), status_code=exc.status_code)

    return InternalError(context={"error_type": type(exc).__name__, "error": str(exc)})


def log_api_error(error: ApiError, request_id: str = "", exc: Optional[BaseException] = None) -> None:
    """Log at WARNING for client errors and ERROR (with traceback when available) for 5xx."""
    if error.status_code >= 500:
        logger.error(
            "[%s] %s (%d): %s | Context: %s",
            request_id,
            error.kind,
            error.status_code,
            error.message,
            error.context,
            exc_info=exc if exc is not None and exc is not error else None,
        )
    else:
        logger.warning(
            "[%s] %s (%d): %s", request_id, error.kind, error.status_code, error.message
        )
