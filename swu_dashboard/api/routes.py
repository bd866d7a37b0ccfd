from __future__ import annotations

import asyncio

from aiohttp import web

from services.head_to_head_service import get_head_to_head
from services.leaderboard_service import get_leaderboard
from services.player_stats_service import get_player
from services.tournament_service import get_tournament_detail
from swu_dashboard.api.errors import api_bad_request, api_not_found
from swu_dashboard.request_context import request_collection, request_listing_collection, request_names


def _parse_limit(raw: str | None) -> int | None:
    if raw is None or not raw.strip():
        return None
    try:
        value = int(raw.strip())
    except ValueError:
        raise api_bad_request("limit must be a positive integer.", field="limit") from None
    if value <= 0:
        raise api_bad_request("limit must be a positive integer.", field="limit")
    return value


async def api_leaderboard(request: web.Request) -> web.Response:
    limit = _parse_limit(request.query.get("limit"))
    collection = request_listing_collection(request)
    if collection is None:
        return web.json_response([])
    entries = await asyncio.to_thread(
        get_leaderboard,
        collection=collection,
        names=request_names(request),
        limit=limit,
    )
    return web.json_response([entry.to_dict() for entry in entries])


async def api_player(request: web.Request) -> web.Response:
    discord_id = request.match_info["discord_id"]
    record = await asyncio.to_thread(
        get_player,
        discord_id,
        collection=request_collection(request),
        names=request_names(request),
    )
    if record is None:
        raise api_not_found("Player not found.")
    return web.json_response(record.to_dict())


async def api_head_to_head(request: web.Request) -> web.Response:
    discord_id = request.match_info["discord_id"]
    records = await asyncio.to_thread(
        get_head_to_head,
        discord_id,
        collection=request_collection(request),
        names=request_names(request),
    )
    return web.json_response([record.to_dict() for record in records])


async def api_tournament(request: web.Request) -> web.Response:
    tournament_id = request.match_info["tournament_id"]
    detail = await asyncio.to_thread(
        get_tournament_detail,
        tournament_id,
        collection=request_collection(request),
        names=request_names(request),
    )
    if detail is None:
        raise api_not_found("Tournament not found.")
    return web.json_response(detail.to_dict())


def add_api_routes(app: web.Application) -> None:
    app.router.add_get("/api/leaderboard", api_leaderboard)
    app.router.add_get("/api/players/{discord_id}", api_player)
    app.router.add_get("/api/players/{discord_id}/head-to-head", api_head_to_head)
    app.router.add_get("/api/tournaments/{tournament_id}", api_tournament)
