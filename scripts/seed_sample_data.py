"""
Seed sample tournaments into MongoDB for local development.

Usage:
  # Option A: rely on environment variables
  set MONGODB_URI=...
  set MONGODB_DB_NAME=swu_tournaments

  python -m scripts.seed_sample_data --tag swu-demo --purge

  # Option B: load variables from a .env file (recommended for local dev)
  python -m scripts.seed_sample_data --env-file .env --collection tournaments --tag swu-demo --purge
"""

from __future__ import annotations

import argparse
import logging
import os
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Optional

from config import Settings
from config.constants import DEFAULT_COLLECTION_NAME, DEFAULT_DB_NAME
from database import ensure_indexes, get_collection
from utils.env_file import load_env_file

BYE_GAME_WINS = 2
MATCH_WIN_POINTS = 3
MATCH_DRAW_POINTS = 1

SAMPLE_GUILD_ID = "999000000000000001"
SAMPLE_PLAYERS: dict[str, str] = {
    "999100000000000001": "Rey",
    "999100000000000002": "Kylo",
    "999100000000000003": "Finn",
    "999100000000000004": "Poe",
}

# (player1, player2 or None for a bye, player1 score, player2 score)
MatchSpec = tuple[str, Optional[str], int, int]


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed sample tournaments for the SWU dashboard.")
    parser.add_argument(
        "--env-file",
        type=str,
        default=None,
        help="Optional path to a .env file to load (defaults to .env when present).",
    )
    parser.add_argument(
        "--db-name",
        type=str,
        default=None,
        help=f"Override MONGODB_DB_NAME (default {DEFAULT_DB_NAME}).",
    )
    parser.add_argument(
        "--collection",
        type=str,
        default=None,
        help=f"Override MONGODB_COLLECTION (default {DEFAULT_COLLECTION_NAME}).",
    )
    parser.add_argument(
        "--tag",
        type=str,
        default="swu-demo",
        help="Seed tag stored on documents (used for idempotent re-seeding).",
    )
    parser.add_argument(
        "--purge",
        action="store_true",
        help="Delete existing documents with the same seed tag before inserting.",
    )
    return parser.parse_args()


def _delete_seeded(col, *, tag: str) -> int:
    result = col.delete_many({"seed_tag": tag})
    return int(result.deleted_count or 0)


def _match_doc(spec: MatchSpec) -> dict[str, Any]:
    player1, player2, score1, score2 = spec
    if player2 is None:
        return {
            "player1Id": player1,
            "player2Id": None,
            "player1Score": BYE_GAME_WINS,
            "player2Score": 0,
            "winnerId": player1,
            "isBye": True,
            "isIntentionalDraw": False,
            "isTie": False,
            "status": "complete",
        }
    winner = player1 if score1 > score2 else player2 if score2 > score1 else None
    return {
        "player1Id": player1,
        "player2Id": player2,
        "player1Score": score1,
        "player2Score": score2,
        "winnerId": winner,
        "isBye": False,
        "isIntentionalDraw": False,
        "isTie": winner is None,
        "status": "complete",
    }


def _player_docs(
    player_ids: list[str], rounds: list[list[dict[str, Any]]], ranks: list[str]
) -> list[dict[str, Any]]:
    stats: dict[str, dict[str, int]] = {
        pid: {
            "matchWins": 0,
            "matchLosses": 0,
            "matchDraws": 0,
            "gameWins": 0,
            "gameLosses": 0,
            "gameDraws": 0,
        }
        for pid in player_ids
    }
    for matches in rounds:
        for match in matches:
            # Byes are not matches; they never reach the player totals.
            if match["isBye"]:
                continue
            p1 = match["player1Id"]
            p2 = match["player2Id"]
            stats[p1]["gameWins"] += match["player1Score"]
            stats[p1]["gameLosses"] += match["player2Score"]
            stats[p2]["gameWins"] += match["player2Score"]
            stats[p2]["gameLosses"] += match["player1Score"]
            if match["winnerId"] is None:
                stats[p1]["matchDraws"] += 1
                stats[p2]["matchDraws"] += 1
            else:
                loser = p2 if match["winnerId"] == p1 else p1
                stats[match["winnerId"]]["matchWins"] += 1
                stats[loser]["matchLosses"] += 1

    docs = []
    for pid in player_ids:
        row = stats[pid]
        docs.append(
            {
                "discordId": pid,
                "username": SAMPLE_PLAYERS[pid],
                **row,
                "rank": ranks.index(pid) + 1 if pid in ranks else 0,
                "points": row["matchWins"] * MATCH_WIN_POINTS + row["matchDraws"] * MATCH_DRAW_POINTS,
            }
        )
    return docs


def build_tournament_doc(
    *,
    name: str,
    date: datetime,
    player_ids: list[str],
    rounds: list[list[MatchSpec]],
    ranks: list[str],
    seed_tag: str,
) -> dict[str, Any]:
    round_matches = [[_match_doc(spec) for spec in specs] for specs in rounds]
    return {
        "name": name,
        "date": date,
        "guildId": SAMPLE_GUILD_ID,
        "guildName": f"[SEED:{seed_tag}] Sample Guild",
        "channelId": None,
        "status": "complete",
        "playerCount": len(player_ids),
        "players": _player_docs(player_ids, round_matches, ranks),
        "rounds": [
            {"number": number, "status": "complete", "matches": matches}
            for number, matches in enumerate(round_matches, start=1)
        ],
        "seed_tag": seed_tag,
    }


def sample_tournaments(*, seed_tag: str, now: datetime) -> list[dict[str, Any]]:
    rey, kylo, finn, poe = SAMPLE_PLAYERS
    return [
        build_tournament_doc(
            name=f"[SEED:{seed_tag}] Store Showdown",
            date=now - timedelta(days=21),
            player_ids=[rey, kylo, finn, poe],
            rounds=[
                [(rey, kylo, 2, 1), (finn, poe, 2, 0)],
                [(rey, finn, 2, 0), (kylo, poe, 1, 1)],
            ],
            ranks=[rey, finn, kylo, poe],
            seed_tag=seed_tag,
        ),
        build_tournament_doc(
            name=f"[SEED:{seed_tag}] Weekly Premier",
            date=now - timedelta(days=14),
            player_ids=[rey, kylo, finn],
            rounds=[
                [(kylo, rey, 2, 0), (finn, None, 0, 0)],
                [(kylo, finn, 2, 1), (rey, None, 0, 0)],
            ],
            ranks=[kylo, rey, finn],
            seed_tag=seed_tag,
        ),
        build_tournament_doc(
            name=f"[SEED:{seed_tag}] Sector Qualifier",
            date=now - timedelta(days=7),
            player_ids=[rey, kylo, finn, poe],
            rounds=[
                [(poe, rey, 2, 1), (kylo, finn, 0, 2)],
                [(poe, finn, 2, 0), (rey, kylo, 2, 1)],
            ],
            ranks=[poe, rey, finn, kylo],
            seed_tag=seed_tag,
        ),
    ]


def main() -> None:
    args = _parse_args()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")

    env_path = Path(args.env_file) if args.env_file else Path(".env")
    if env_path.exists():
        load_env_file(env_path, override=False)

    mongo_uri = (os.environ.get("MONGODB_URI", "") or os.environ.get("DATABASE_URL", "")).strip()
    if not mongo_uri:
        raise SystemExit("Set MONGODB_URI (or pass --env-file).")

    settings = Settings(
        mongodb_uri=mongo_uri,
        mongodb_db_name=(args.db_name or os.environ.get("MONGODB_DB_NAME", "").strip()) or DEFAULT_DB_NAME,
        mongodb_collection=(args.collection or os.environ.get("MONGODB_COLLECTION", "").strip())
        or DEFAULT_COLLECTION_NAME,
    )
    collection = get_collection(settings)
    ensure_indexes(collection)

    seed_tag = str(args.tag).strip() or "swu-demo"
    if args.purge:
        deleted = _delete_seeded(collection, tag=seed_tag)
        logging.info("Purged %s seeded docs (seed_tag=%s).", deleted, seed_tag)

    now = datetime.now(timezone.utc).replace(microsecond=0)
    docs = sample_tournaments(seed_tag=seed_tag, now=now)
    for doc in docs:
        collection.replace_one({"seed_tag": seed_tag, "name": doc["name"]}, doc, upsert=True)
    logging.info(
        "Seeded %s tournaments with %s players into %s.%s (seed_tag=%s).",
        len(docs),
        len(SAMPLE_PLAYERS),
        settings.mongodb_db_name,
        settings.mongodb_collection,
        seed_tag,
    )


if __name__ == "__main__":
    main()
