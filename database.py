from __future__ import annotations

import logging
import re

from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.database import Database

from config import Settings, load_settings
from config.constants import DEFAULT_COLLECTION_NAME, DEFAULT_DB_NAME

INVALID_DB_NAME_PATTERN = re.compile(r'[\\/\.\s"$\x00]')
_CLIENT: MongoClient | None = None


def _require_value(value: str | None, name: str) -> str:
    if not value:
        raise RuntimeError(f"{name} is required for database access.")
    return value


def _normalize_db_name(name: str) -> str:
    normalized = INVALID_DB_NAME_PATTERN.sub("_", name.strip())
    if not normalized:
        raise RuntimeError("MONGODB_DB_NAME resolved to empty after sanitization.")
    if len(normalized.encode("utf-8")) > 63:
        raise RuntimeError("MONGODB_DB_NAME exceeds MongoDB length limits.")
    if normalized != name:
        logging.warning(
            "Normalized MONGODB_DB_NAME from %r to %r to satisfy MongoDB naming rules.",
            name,
            normalized,
        )
    return normalized


def _settings_or_default(settings: Settings | None) -> Settings:
    return settings or load_settings()


def get_client(settings: Settings | None = None) -> MongoClient:
    global _CLIENT
    if _CLIENT is not None:
        return _CLIENT
    settings = _settings_or_default(settings)
    uri = _require_value(settings.mongodb_uri, "MONGODB_URI")
    _CLIENT = MongoClient(uri, serverSelectionTimeoutMS=5000)
    return _CLIENT


def get_database(settings: Settings | None = None) -> Database:
    settings = _settings_or_default(settings)
    db_name = _normalize_db_name(settings.mongodb_db_name or DEFAULT_DB_NAME)
    return get_client(settings)[db_name]


def get_collection(settings: Settings | None = None, *, name: str | None = None) -> Collection:
    """
    Return the tournaments collection (or another collection by name) in the configured database.
    """
    settings = _settings_or_default(settings)
    if name is None:
        name = settings.mongodb_collection or DEFAULT_COLLECTION_NAME
    return get_database(settings)[name]


def ping(settings: Settings | None = None) -> None:
    client = get_client(settings)
    client.admin.command("ping")


def close_client() -> None:
    """
    Close the cached Mongo client (used during graceful shutdown).
    """
    global _CLIENT
    if _CLIENT is not None:
        _CLIENT.close()
        _CLIENT = None


def ensure_indexes(collection: Collection) -> list[str]:
    """
    Indexes backing the dashboard's read paths: newest-first listings and per-player lookups.
    """
    indexes: list[str] = []
    indexes.append(collection.create_index([("date", -1)], name="idx_tournament_date"))
    indexes.append(
        collection.create_index(
            [("players.discordId", 1), ("date", -1)],
            name="idx_tournament_player_date",
        )
    )
    return indexes
