from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Mapping

from bson.decimal128 import Decimal128

MATCH_COMPLETE_STATUS = "complete"


def _int(value: Any) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, Decimal128):
        value = value.to_decimal()
    if isinstance(value, Decimal):
        return int(value) if value.is_finite() else 0
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else 0
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return 0
    return 0


def _identity(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _text(value: Any) -> str:
    return str(value).strip() if value is not None else ""


def _date(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    return None


def _list(value: Any) -> list[Mapping[str, Any]]:
    if not isinstance(value, (list, tuple)):
        return []
    return [item for item in value if isinstance(item, Mapping)]


@dataclass(frozen=True)
class TournamentPlayer:
    discord_id: str | None
    username: str
    match_wins: int = 0
    match_losses: int = 0
    match_draws: int = 0
    game_wins: int = 0
    game_losses: int = 0
    game_draws: int = 0
    rank: int = 0
    points: int = 0

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> TournamentPlayer:
        return cls(
            discord_id=_identity(doc.get("discordId")),
            username=_text(doc.get("username")),
            match_wins=_int(doc.get("matchWins")),
            match_losses=_int(doc.get("matchLosses")),
            match_draws=_int(doc.get("matchDraws")),
            game_wins=_int(doc.get("gameWins")),
            game_losses=_int(doc.get("gameLosses")),
            game_draws=_int(doc.get("gameDraws")),
            rank=_int(doc.get("rank")),
            points=_int(doc.get("points")),
        )

    @property
    def matches_played(self) -> int:
        return self.match_wins + self.match_losses + self.match_draws


@dataclass(frozen=True)
class Match:
    player1_id: str | None
    player2_id: str | None = None
    player1_score: int = 0
    player2_score: int = 0
    winner_id: str | None = None
    is_bye: bool = False
    is_intentional_draw: bool = False
    is_tie: bool = False
    status: str = ""

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> Match:
        return cls(
            player1_id=_identity(doc.get("player1Id")),
            player2_id=_identity(doc.get("player2Id")),
            player1_score=_int(doc.get("player1Score")),
            player2_score=_int(doc.get("player2Score")),
            winner_id=_identity(doc.get("winnerId")),
            is_bye=bool(doc.get("isBye", False)),
            is_intentional_draw=bool(doc.get("isIntentionalDraw", False)),
            is_tie=bool(doc.get("isTie", False)),
            status=_text(doc.get("status")),
        )

    def involves(self, discord_id: str) -> bool:
        return discord_id in (self.player1_id, self.player2_id)

    @property
    def is_pending(self) -> bool:
        return self.status != MATCH_COMPLETE_STATUS


@dataclass(frozen=True)
class Round:
    number: int
    matches: tuple[Match, ...] = ()

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> Round:
        return cls(
            number=_int(doc.get("number")),
            matches=tuple(Match.from_document(m) for m in _list(doc.get("matches"))),
        )


@dataclass(frozen=True)
class Tournament:
    """
    A tournament as stored by the bot, reduced to the fields the dashboard reads.

    Unknown document fields are dropped here; nothing downstream sees raw documents.
    """

    id: str
    name: str
    date: datetime | None = None
    guild_name: str | None = None
    player_count: int = 0
    players: tuple[TournamentPlayer, ...] = ()
    rounds: tuple[Round, ...] = ()
    has_players: bool = False
    has_rounds: bool = False

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> Tournament:
        raw_players = doc.get("players")
        raw_rounds = doc.get("rounds")
        return cls(
            id=str(doc.get("_id", "")),
            name=_text(doc.get("name")) or "Untitled Tournament",
            date=_date(doc.get("date")),
            guild_name=_identity(doc.get("guildName")),
            player_count=_int(doc.get("playerCount")),
            players=tuple(TournamentPlayer.from_document(p) for p in _list(raw_players)),
            rounds=tuple(Round.from_document(r) for r in _list(raw_rounds)),
            has_players=isinstance(raw_players, (list, tuple)),
            has_rounds=isinstance(raw_rounds, (list, tuple)),
        )

    @property
    def effective_player_count(self) -> int:
        if self.player_count > 0:
            return self.player_count
        return len(self.players)

    def find_player(self, discord_id: str | None) -> TournamentPlayer | None:
        if not discord_id:
            return None
        for player in self.players:
            if player.discord_id == discord_id:
                return player
        return None

    def iter_matches(self):
        for rnd in self.rounds:
            yield from rnd.matches
