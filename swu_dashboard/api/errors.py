from __future__ import annotations

import json
from typing import Any

from aiohttp import web


def _payload(code: str, message: str, details: dict[str, Any] | None = None) -> str:
    body: dict[str, Any] = {"error": {"code": code, "message": message}}
    if details:
        body["error"]["details"] = details
    return json.dumps(body)


def api_error(
    *,
    status: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> web.HTTPException:
    text = _payload(code, message, details)
    if status == 404:
        return web.HTTPNotFound(text=text, content_type="application/json")
    if status == 500:
        return web.HTTPInternalServerError(text=text, content_type="application/json")
    if status == 503:
        return web.HTTPServiceUnavailable(text=text, content_type="application/json")
    return web.HTTPBadRequest(text=text, content_type="application/json")


def api_bad_request(message: str, *, field: str | None = None) -> web.HTTPException:
    details = {"field": field} if field else None
    return api_error(status=400, code="bad_request", message=message, details=details)


def api_not_found(message: str = "Not found.") -> web.HTTPException:
    return api_error(status=404, code="not_found", message=message)


def api_upstream_unavailable(*, error_id: str | None = None) -> web.HTTPException:
    details = {"error_id": error_id} if error_id else None
    return api_error(
        status=503,
        code="upstream_unavailable",
        message="Tournament data is temporarily unavailable.",
        details=details,
    )


def api_internal_error(*, error_id: str | None = None) -> web.HTTPException:
    details = {"error_id": error_id} if error_id else None
    return api_error(status=500, code="internal_error", message="Unexpected error.", details=details)
