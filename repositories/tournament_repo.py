from __future__ import annotations

from typing import Any

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import DESCENDING
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from database import get_collection
from repositories.records import Tournament
from utils.errors import NotFoundError, UpstreamFailure

DEFAULT_RECENT_LIMIT = 3


def _tournaments(docs: Any) -> list[Tournament]:
    return [Tournament.from_document(doc) for doc in docs]


def _parse_object_id(tournament_id: str) -> ObjectId | None:
    try:
        return ObjectId(str(tournament_id))
    except (InvalidId, TypeError):
        return None


def count_tournaments(*, collection: Collection | None = None) -> int:
    if collection is None:
        collection = get_collection()
    try:
        return int(collection.count_documents({}))
    except PyMongoError as exc:
        raise UpstreamFailure("Failed to count tournaments.") from exc


def count_players(*, collection: Collection | None = None) -> int:
    """
    Count distinct player identities across every tournament.
    """
    if collection is None:
        collection = get_collection()
    pipeline = [
        {"$unwind": "$players"},
        {"$match": {"players.discordId": {"$nin": [None, ""]}}},
        {"$group": {"_id": "$players.discordId"}},
        {"$count": "total"},
    ]
    try:
        result = list(collection.aggregate(pipeline))
    except PyMongoError as exc:
        raise UpstreamFailure("Failed to count players.") from exc
    return int(result[0]["total"]) if result else 0


def list_recent_tournaments(
    limit: int = DEFAULT_RECENT_LIMIT, *, collection: Collection | None = None
) -> list[Tournament]:
    if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
        raise ValueError("limit must be a positive integer.")
    if collection is None:
        collection = get_collection()
    try:
        docs = list(collection.find({}).sort([("date", DESCENDING)]).limit(limit))
    except PyMongoError as exc:
        raise UpstreamFailure("Failed to fetch recent tournaments.") from exc
    return _tournaments(docs)


def list_tournaments(*, collection: Collection | None = None) -> list[Tournament]:
    if collection is None:
        collection = get_collection()
    try:
        docs = list(collection.find({}).sort([("date", DESCENDING)]))
    except PyMongoError as exc:
        raise UpstreamFailure("Failed to fetch tournaments.") from exc
    return _tournaments(docs)


def get_tournament(tournament_id: str, *, collection: Collection | None = None) -> Tournament:
    oid = _parse_object_id(tournament_id)
    if oid is None:
        raise NotFoundError(f"Tournament {tournament_id!r} not found.")
    if collection is None:
        collection = get_collection()
    try:
        doc = collection.find_one({"_id": oid})
    except PyMongoError as exc:
        raise UpstreamFailure("Failed to fetch tournament.") from exc
    if doc is None:
        raise NotFoundError(f"Tournament {tournament_id!r} not found.")
    return Tournament.from_document(doc)


def find_tournament(tournament_id: str, *, collection: Collection | None = None) -> Tournament | None:
    try:
        return get_tournament(tournament_id, collection=collection)
    except NotFoundError:
        return None


def list_tournaments_for_player(
    discord_id: str, *, collection: Collection | None = None
) -> list[Tournament]:
    if collection is None:
        collection = get_collection()
    try:
        docs = list(
            collection.find({"players.discordId": str(discord_id)}).sort([("date", DESCENDING)])
        )
    except PyMongoError as exc:
        raise UpstreamFailure("Failed to fetch tournaments for player.") from exc
    return _tournaments(docs)
