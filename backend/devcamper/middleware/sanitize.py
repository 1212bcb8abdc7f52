"""
DevCamper Backend — Input Sanitizing Middleware
=================================================

What:  Cleans client input before it reaches the routes.
How:   Query string: keys starting with `$` are dropped and a repeated key
       keeps only its last value (parameter pollution). JSON bodies: keys
       starting with `$` are dropped at any depth, and `<` / `>` inside string
       values are escaped as HTML entities.

Steps (per http request):
    1. Rewrite scope["query_string"] with clean_query_string()
    2. For POST, PUT and PATCH with a JSON content type, read the whole body
    3. Parse it, run clean_value(), re-encode it and fix Content-Length
    4. Hand the route a receive() that replays the cleaned body once

Non-JSON bodies (multipart photo uploads) are passed through as they are.

Written as a plain ASGI middleware because it has to replace the request
body, which BaseHTTPMiddleware cannot do.
"""

import json
import logging
from typing import Any, Dict, List, Tuple
from urllib.parse import parse_qsl, urlencode

from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger(__name__)

_BODY_METHODS = {"POST", "PUT", "PATCH"}


def escape_markup(value: str) -> str:
    """Escape angle brackets so stored text cannot carry markup."""
    return value.replace("<", "&lt;").replace(">", "&gt;")


def clean_value(value: Any) -> Any:
    """Recursively drop `$` keys and escape strings in a decoded JSON value."""
    if isinstance(value, dict):
        return {key: clean_value(item) for key, item in value.items() if not str(key).startswith("$")}
    if isinstance(value, list):
        return [clean_value(item) for item in value]
    if isinstance(value, str):
        return escape_markup(value)
    return value


def clean_query_string(raw: bytes) -> bytes:
    """Drop `$` keys and keep the last value of each repeated key."""
    pairs: List[Tuple[str, str]] = parse_qsl(raw.decode("latin-1"), keep_blank_values=True)
    last: Dict[str, str] = {}
    for key, value in pairs:
        if key.startswith("$"):
            continue
        last.pop(key, None)
        last[key] = value
    return urlencode(list(last.items())).encode("latin-1")


def _is_json(scope: Scope) -> bool:
    for name, value in scope.get("headers", []):
        if name == b"content-type":
            return value.split(b";")[0].strip().lower() == b"application/json"
    return False


class SanitizeMiddleware:
    """
    Query and JSON body sanitizer.

    Runs inside the rate limiter, so rejected requests are never parsed.
    Malformed JSON is left alone for request validation to report as 400.
    """

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        scope = dict(scope)
        if scope.get("query_string"):
            scope["query_string"] = clean_query_string(scope["query_string"])

        if scope["method"] not in _BODY_METHODS or not _is_json(scope):
            await self.app(scope, receive, send)
            return

        body = b""
        more_body = True
        while more_body:
            message = await receive()
            if message["type"] != "http.request":
                # client went away before the body arrived
                await self.app(scope, receive, send)
                return
            body += message.get("body", b"")
            more_body = message.get("more_body", False)

        try:
            cleaned = json.dumps(clean_value(json.loads(body))).encode("utf-8") if body else body
        except (ValueError, UnicodeDecodeError):
            # malformed JSON goes through untouched; request validation reports it
            cleaned = body

        scope["headers"] = [
            (name, value) for name, value in scope["headers"] if name != b"content-length"
        ] + [(b"content-length", str(len(cleaned)).encode("latin-1"))]

        sent = False

        async def replay() -> Message:
            nonlocal sent
            if not sent:
                sent = True
                return {"type": "http.request", "body": cleaned, "more_body": False}
            return await receive()

        await self.app(scope, replay, send)
