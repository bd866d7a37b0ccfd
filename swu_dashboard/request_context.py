from __future__ import annotations

import logging

from aiohttp import web
from pymongo.collection import Collection

from config import Settings
from database import get_collection
from services.name_service import NameAnonymizer
from utils.errors import UpstreamFailure


def request_settings(request: web.Request) -> Settings:
    return request.app["settings"]


def request_names(request: web.Request) -> NameAnonymizer:
    return request.app["names"]


def request_collection(request: web.Request) -> Collection:
    """
    Tournaments collection for this app; a missing MONGODB_URI is reported as an upstream outage.
    """
    settings = request_settings(request)
    if not settings.mongodb_uri:
        raise UpstreamFailure("MongoDB is not configured.")
    return get_collection(settings)


def request_listing_collection(request: web.Request) -> Collection | None:
    """
    Collection for list views, or None when MongoDB is not configured so the view renders empty.
    """
    try:
        return request_collection(request)
    except UpstreamFailure as exc:
        logging.warning("event=listing_unavailable path=%s error=%s", request.path, exc)
        return None
