from __future__ import annotations

import logging
import uuid

from aiohttp import web


class NotFoundError(LookupError):
    """
    A requested tournament or player has no matching record.
    """


class UpstreamFailure(RuntimeError):
    """
    The record store could not be read (network or storage fault).
    """


def log_request_error(
    error: BaseException,
    request: web.Request,
    *,
    source: str,
    error_id: str | None = None,
) -> None:
    prefix = f"[error_id={error_id}] " if error_id else ""
    route = request.match_info.route.resource.canonical if request.match_info.route.resource else None
    logging.error(
        "%sRequest error source=%s method=%s path=%s route=%s",
        prefix,
        source,
        request.method,
        request.path,
        route,
        exc_info=error,
    )


def new_error_id() -> str:
    return uuid.uuid4().hex[:8]
