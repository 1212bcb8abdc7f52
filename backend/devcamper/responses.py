"""
DevCamper Backend — Response Rendering
========================================

What:  The single boundary where service Results become HTTP responses.
How:   render() turns Ok(value) into the success envelope and Err(error)
       into the error envelope. Exception handlers in main.py call
       error_response() for exceptions that escape a handler, so both paths
       produce the same body and the same log line.

Envelopes:
    success  {"success": true, "data": ...}           (wrap=True)
             {"success": true, **value}               (wrap=False; list results)
    token    {"success": true, "token": "..."} + `token` cookie
    error    {"success": false, "error": "..."}
"""

from datetime import timedelta
from typing import Any, Optional

from fastapi.responses import JSONResponse

from devcamper.config import Settings
from devcamper.exceptions import ApiError, RateLimitExceededError, log_api_error
from devcamper.middleware.request_id import request_id_var
from devcamper.result import Result

TOKEN_COOKIE = "token"


def error_response(error: ApiError, exc: Optional[BaseException] = None) -> JSONResponse:
    log_api_error(error, request_id_var.get(""), exc)
    headers = {}
    if isinstance(error, RateLimitExceededError):
        headers["Retry-After"] = str(error.retry_after)
    return JSONResponse(status_code=error.status_code, content=error.to_envelope(), headers=headers)


def render(result: Result[Any], status_code: int = 200, wrap: bool = True) -> JSONResponse:
    if not result.ok:
        return error_response(result.error)
    body = {"success": True, "data": result.value} if wrap else {"success": True, **result.value}
    return JSONResponse(status_code=status_code, content=body)


def token_response(result: Result[str], settings: Settings, status_code: int = 200) -> JSONResponse:
    """Send the JWT in the body and as an httponly cookie."""
    if not result.ok:
        return error_response(result.error)
    response = JSONResponse(status_code=status_code, content={"success": True, "token": result.value})
    response.set_cookie(
        TOKEN_COOKIE,
        result.value,
        max_age=int(timedelta(days=settings.jwt_cookie_expire_days).total_seconds()),
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )
    return response


def clear_token_response() -> JSONResponse:
    response = JSONResponse(content={"success": True, "data": {}})
    response.delete_cookie(TOKEN_COOKIE)
    return response
