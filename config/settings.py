from __future__ import annotations

import os
from dataclasses import dataclass, field

from . import constants


@dataclass(frozen=True)
class Settings:
    mongodb_uri: str | None
    mongodb_db_name: str = constants.DEFAULT_DB_NAME
    mongodb_collection: str = constants.DEFAULT_COLLECTION_NAME
    anonymize_player_names: bool = False
    anonymize_keep_names: frozenset[str] = field(default_factory=frozenset)
    recent_tournaments_limit: int = constants.DEFAULT_RECENT_TOURNAMENTS_LIMIT
    dashboard_host: str = constants.DEFAULT_HOST
    dashboard_port: int = constants.DEFAULT_PORT
    request_timeout_seconds: float = constants.DEFAULT_REQUEST_TIMEOUT_SECONDS


def _optional_str(name: str) -> str | None:
    raw = os.getenv(name, "").strip()
    return raw or None


def _optional_int_default(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer.") from None


def _optional_float_default(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be a number.") from None


def _optional_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    if raw in {"1", "true", "yes", "on"}:
        return True
    if raw in {"0", "false", "no", "off"}:
        return False
    raise RuntimeError(f"{name} must be a boolean (true/false).")


def _optional_str_set(name: str) -> frozenset[str]:
    raw = os.getenv(name, "").strip()
    if not raw:
        return frozenset()
    return frozenset(part.strip() for part in raw.split(",") if part.strip())


def load_settings() -> Settings:
    """
    Load and validate environment configuration.
    Raises RuntimeError with a consolidated message when values are invalid.
    """
    problems: list[str] = []

    mongodb_uri = _optional_str(constants.MONGODB_URI_ENV) or _optional_str(constants.DATABASE_URL_ENV)

    recent_limit = _optional_int_default(
        constants.RECENT_TOURNAMENTS_LIMIT_ENV, default=constants.DEFAULT_RECENT_TOURNAMENTS_LIMIT
    )
    if recent_limit <= 0:
        problems.append(f"{constants.RECENT_TOURNAMENTS_LIMIT_ENV} must be > 0")

    port = _optional_int_default(constants.PORT_ENV, default=0) or _optional_int_default(
        constants.DASHBOARD_PORT_ENV, default=constants.DEFAULT_PORT
    )
    if not 0 < port < 65536:
        problems.append("PORT/DASHBOARD_PORT must be between 1 and 65535")

    timeout = _optional_float_default(
        constants.DASHBOARD_REQUEST_TIMEOUT_SECONDS_ENV,
        default=constants.DEFAULT_REQUEST_TIMEOUT_SECONDS,
    )
    if timeout <= 0:
        problems.append(f"{constants.DASHBOARD_REQUEST_TIMEOUT_SECONDS_ENV} must be > 0")

    if problems:
        raise RuntimeError("Invalid config: " + "; ".join(problems))

    return Settings(
        mongodb_uri=mongodb_uri,
        mongodb_db_name=_optional_str(constants.MONGODB_DB_NAME_ENV) or constants.DEFAULT_DB_NAME,
        mongodb_collection=(
            _optional_str(constants.MONGODB_COLLECTION_ENV) or constants.DEFAULT_COLLECTION_NAME
        ),
        anonymize_player_names=_optional_bool(constants.ANONYMIZE_PLAYER_NAMES_ENV, default=False),
        anonymize_keep_names=_optional_str_set(constants.ANONYMIZE_KEEP_NAMES_ENV),
        recent_tournaments_limit=recent_limit,
        dashboard_host=_optional_str(constants.DASHBOARD_HOST_ENV) or constants.DEFAULT_HOST,
        dashboard_port=port,
        request_timeout_seconds=timeout,
    )


def summarize_settings(settings: Settings) -> dict[str, object]:
    """
    Produce a non-secret snapshot of configuration for startup logging.
    """
    return {
        "mongodb_uri_present": bool(settings.mongodb_uri),
        "mongodb_db_name": settings.mongodb_db_name,
        "mongodb_collection": settings.mongodb_collection,
        "anonymize_player_names": settings.anonymize_player_names,
        "anonymize_keep_names_count": len(settings.anonymize_keep_names),
        "recent_tournaments_limit": settings.recent_tournaments_limit,
        "dashboard": {
            "host": settings.dashboard_host,
            "port": settings.dashboard_port,
            "request_timeout_seconds": settings.request_timeout_seconds,
        },
    }
