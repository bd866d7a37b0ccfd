from __future__ import annotations

import asyncio
import logging
import os
import sys
from datetime import datetime, timezone

from aiohttp import web

from config import Settings, load_settings
from config.settings import summarize_settings
from database import close_client, ping
from services.error_reporting_service import capture_exception, init_error_reporting
from services.head_to_head_service import get_head_to_head
from services.leaderboard_service import get_leaderboard
from services.name_service import build_anonymizer
from services.player_stats_service import get_player, list_players
from services.site_stats_service import HomeOverview, SiteStats, get_home_overview, get_site_stats
from services.tournament_service import get_tournament_detail, list_tournament_summaries
from swu_dashboard.api.errors import api_internal_error, api_upstream_unavailable
from swu_dashboard.api.routes import add_api_routes
from swu_dashboard.request_context import (
    request_collection,
    request_listing_collection,
    request_names,
    request_settings,
)
from swu_dashboard.web_templates import render, static_dir
from utils.errors import UpstreamFailure, log_request_error, new_error_id

SITE_TITLE = "SWU Tournament Dashboard"
HOME_TOP_PLAYERS = 3
LOG_FORMAT = "%(asctime)s level=%(levelname)s name=%(name)s msg=\"%(message)s\""


def setup_logging() -> None:
    level = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.captureWarnings(True)


def install_excepthook() -> None:
    def _hook(exc_type, exc_value, exc_traceback):
        logging.error(
            "Uncaught exception",
            exc_info=(exc_type, exc_value, exc_traceback),
        )
    sys.excepthook = _hook


def _page(template_name: str, *, title: str, status: int = 200, **context) -> web.Response:
    html = render(template_name, title=title, site_title=SITE_TITLE, **context)
    return web.Response(text=html, content_type="text/html", status=status)


def _not_found_page(message: str) -> web.Response:
    return _page("not_found.html", title="Not found", status=404, message=message)


def _is_api_request(request: web.Request) -> bool:
    return request.path.startswith("/api/")


@web.middleware
async def security_headers_middleware(request: web.Request, handler):
    try:
        response = await handler(request)
    except web.HTTPException as exc:
        response = exc

    if not isinstance(response, web.StreamResponse):
        return response

    response.headers.setdefault("Cache-Control", "no-store")
    response.headers.setdefault("X-Content-Type-Options", "nosniff")
    response.headers.setdefault("X-Frame-Options", "DENY")
    response.headers.setdefault("Referrer-Policy", "no-referrer")
    response.headers.setdefault(
        "Content-Security-Policy",
        "default-src 'self'; "
        "base-uri 'self'; "
        "frame-ancestors 'none'; "
        "img-src 'self' data:; "
        "style-src 'self'; "
        "form-action 'self';",
    )
    return response


@web.middleware
async def timeout_middleware(request: web.Request, handler):
    settings: Settings = request.app["settings"]
    try:
        return await asyncio.wait_for(handler(request), timeout=float(settings.request_timeout_seconds))
    except asyncio.TimeoutError:
        logging.warning("event=request_timeout path=%s", request.path)
        raise web.HTTPRequestTimeout(text="Request timed out.") from None


@web.middleware
async def error_middleware(request: web.Request, handler):
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except UpstreamFailure as exc:
        error_id = new_error_id()
        log_request_error(exc, request, source="upstream", error_id=error_id)
        capture_exception(exc, error_id=error_id)
        if _is_api_request(request):
            raise api_upstream_unavailable(error_id=error_id) from None
        return _page(
            "error.html",
            title="Data unavailable",
            status=503,
            message="Tournament data is temporarily unavailable. Please try again shortly.",
            error_id=error_id,
        )
    except Exception as exc:
        error_id = new_error_id()
        log_request_error(exc, request, source="handler", error_id=error_id)
        capture_exception(exc, error_id=error_id)
        if _is_api_request(request):
            raise api_internal_error(error_id=error_id) from None
        return _page(
            "error.html",
            title="Error",
            status=500,
            message="Something went wrong while building this page.",
            error_id=error_id,
        )


async def index(request: web.Request) -> web.Response:
    settings = request_settings(request)
    collection = request_listing_collection(request)
    if collection is None:
        overview = HomeOverview(tournament_count=0, player_count=0, recent_tournaments=[], top_players=[])
    else:
        overview = await asyncio.to_thread(
            get_home_overview,
            collection=collection,
            names=request_names(request),
            recent_limit=settings.recent_tournaments_limit,
            top=HOME_TOP_PLAYERS,
        )
    return _page("index.html", title="Home", overview=overview)


async def tournaments_page(request: web.Request) -> web.Response:
    collection = request_listing_collection(request)
    summaries = []
    if collection is not None:
        summaries = await asyncio.to_thread(
            list_tournament_summaries, collection=collection, names=request_names(request)
        )
    return _page("tournaments.html", title="Tournaments", tournaments=summaries)


async def tournament_detail_page(request: web.Request) -> web.Response:
    tournament_id = request.match_info["tournament_id"]
    detail = await asyncio.to_thread(
        get_tournament_detail,
        tournament_id,
        collection=request_collection(request),
        names=request_names(request),
    )
    if detail is None:
        return _not_found_page("That tournament does not exist.")
    return _page("tournament_detail.html", title=detail.summary.name, detail=detail)


async def players_page(request: web.Request) -> web.Response:
    collection = request_listing_collection(request)
    players = []
    if collection is not None:
        players = await asyncio.to_thread(list_players, collection=collection, names=request_names(request))
    return _page("players.html", title="Players", players=players)


async def player_detail_page(request: web.Request) -> web.Response:
    discord_id = request.match_info["discord_id"]
    collection = request_collection(request)
    names = request_names(request)
    record = await asyncio.to_thread(get_player, discord_id, collection=collection, names=names)
    if record is None:
        return _not_found_page("That player has not played in any tournament.")
    head_to_head = await asyncio.to_thread(get_head_to_head, discord_id, collection=collection, names=names)
    return _page(
        "player_detail.html",
        title=record.display_name,
        player=record,
        best_finishes=record.best_finishes(),
        head_to_head=head_to_head,
    )


async def leaderboard_page(request: web.Request) -> web.Response:
    collection = request_listing_collection(request)
    entries = []
    if collection is not None:
        entries = await asyncio.to_thread(get_leaderboard, collection=collection, names=request_names(request))
    return _page("leaderboard.html", title="Leaderboard", entries=entries)


async def stats_page(request: web.Request) -> web.Response:
    collection = request_listing_collection(request)
    stats = SiteStats()
    if collection is not None:
        stats = await asyncio.to_thread(get_site_stats, collection=collection)
    return _page("stats.html", title="Statistics", stats=stats)


async def health(_request: web.Request) -> web.Response:
    return web.json_response({"ok": True})


async def ready(request: web.Request) -> web.Response:
    settings = request_settings(request)
    if not settings.mongodb_uri:
        return web.json_response({"ok": False, "mongo": "not_configured"}, status=503)
    try:
        await asyncio.to_thread(ping, settings)
    except Exception as exc:
        logging.warning("event=ready_ping_failed error=%s", exc)
        return web.json_response({"ok": False, "mongo": str(exc)}, status=503)
    return web.json_response(
        {"ok": True, "mongo": "ok", "ts": datetime.now(timezone.utc).isoformat()}
    )


async def _on_cleanup(_app: web.Application) -> None:
    close_client()


def create_app(*, settings: Settings | None = None) -> web.Application:
    app = web.Application(
        middlewares=[
            security_headers_middleware,
            timeout_middleware,
            error_middleware,
        ]
    )
    app_settings = settings or load_settings()
    app["settings"] = app_settings
    app["names"] = build_anonymizer(app_settings)
    init_error_reporting(settings=app_settings, service_name="dashboard")
    app.on_cleanup.append(_on_cleanup)

    static_path = static_dir()
    if static_path.is_dir():
        app.router.add_static("/static/", path=str(static_path), name="static")

    app.router.add_get("/health", health)
    app.router.add_get("/ready", ready)
    app.router.add_get("/", index)
    app.router.add_get("/tournaments", tournaments_page)
    app.router.add_get("/tournaments/{tournament_id}", tournament_detail_page)
    app.router.add_get("/players", players_page)
    app.router.add_get("/players/{discord_id}", player_detail_page)
    app.router.add_get("/leaderboard", leaderboard_page)
    app.router.add_get("/stats", stats_page)
    add_api_routes(app)
    return app


def main() -> None:
    setup_logging()
    install_excepthook()
    try:
        settings = load_settings()
    except RuntimeError as exc:
        logging.error("Configuration error: %s", exc)
        raise
    logging.info("Loaded configuration (non-secret): %s", summarize_settings(settings))
    app = create_app(settings=settings)
    web.run_app(app, host=settings.dashboard_host, port=settings.dashboard_port)


if __name__ == "__main__":
    main()
