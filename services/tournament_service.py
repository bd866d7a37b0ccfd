from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from pymongo.collection import Collection

from repositories.records import Match, Tournament, TournamentPlayer
from repositories.tournament_repo import (
    DEFAULT_RECENT_LIMIT,
    find_tournament,
    list_recent_tournaments,
    list_tournaments,
)
from services.name_service import NameAnonymizer, display_name
from utils.errors import UpstreamFailure

BYE_LABEL = "BYE"
DRAW_LABEL = "Draw"
INTENTIONAL_DRAW_LABEL = "ID"
PENDING_LABEL = "Pending"
UNKNOWN_ID_PREFIX_LENGTH = 8


@dataclass(frozen=True)
class TournamentSummary:
    tournament_id: str
    name: str
    date: datetime | None
    player_count: int
    winner_identity: str | None
    winner_display_name: str | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "tournamentId": self.tournament_id,
            "name": self.name,
            "date": self.date.isoformat() if self.date else None,
            "playerCount": self.player_count,
            "winnerIdentity": self.winner_identity,
            "winnerDisplayName": self.winner_display_name,
        }


@dataclass(frozen=True)
class StandingRow:
    identity: str | None
    display_name: str
    rank: int
    match_wins: int
    match_losses: int
    match_draws: int
    game_wins: int
    game_losses: int
    game_draws: int
    points: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "identity": self.identity,
            "displayName": self.display_name,
            "rank": self.rank,
            "matchWins": self.match_wins,
            "matchLosses": self.match_losses,
            "matchDraws": self.match_draws,
            "gameWins": self.game_wins,
            "gameLosses": self.game_losses,
            "gameDraws": self.game_draws,
            "points": self.points,
        }


@dataclass(frozen=True)
class MatchRow:
    player1_identity: str | None
    player1_name: str
    player2_identity: str | None
    player2_name: str
    player1_score: int
    player2_score: int
    winner_identity: str | None
    winner_name: str | None
    result: str
    is_bye: bool
    is_intentional_draw: bool
    is_pending: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "player1Identity": self.player1_identity,
            "player1Name": self.player1_name,
            "player2Identity": self.player2_identity,
            "player2Name": self.player2_name,
            "player1Score": self.player1_score,
            "player2Score": self.player2_score,
            "winnerIdentity": self.winner_identity,
            "winnerName": self.winner_name,
            "result": self.result,
            "isBye": self.is_bye,
            "isIntentionalDraw": self.is_intentional_draw,
            "isPending": self.is_pending,
        }


@dataclass(frozen=True)
class RoundView:
    number: int
    matches: tuple[MatchRow, ...]

    def to_dict(self) -> dict[str, Any]:
        return {"number": self.number, "matches": [m.to_dict() for m in self.matches]}


@dataclass(frozen=True)
class TournamentDetail:
    summary: TournamentSummary
    guild_name: str | None
    standings: tuple[StandingRow, ...]
    rounds: tuple[RoundView, ...]

    def to_dict(self) -> dict[str, Any]:
        body = self.summary.to_dict()
        body["guildName"] = self.guild_name
        body["standings"] = [row.to_dict() for row in self.standings]
        body["rounds"] = [rnd.to_dict() for rnd in self.rounds]
        return body


def _winner(tournament: Tournament) -> TournamentPlayer | None:
    for player in tournament.players:
        if player.rank == 1:
            return player
    return None


def summarize_tournament(
    tournament: Tournament, *, names: NameAnonymizer | None = None
) -> TournamentSummary:
    winner = _winner(tournament)
    return TournamentSummary(
        tournament_id=tournament.id,
        name=tournament.name,
        date=tournament.date,
        player_count=tournament.effective_player_count,
        winner_identity=winner.discord_id if winner else None,
        winner_display_name=display_name(winner.username, names) if winner else None,
    )


def _player_label(
    tournament: Tournament, discord_id: str | None, names: NameAnonymizer | None
) -> str:
    if not discord_id:
        return BYE_LABEL
    player = tournament.find_player(discord_id)
    if player is None:
        return discord_id[:UNKNOWN_ID_PREFIX_LENGTH]
    return display_name(player.username, names)


def _match_result(match: Match) -> str:
    if match.is_bye or not match.player2_id:
        return BYE_LABEL
    if match.is_pending:
        return PENDING_LABEL
    if match.is_intentional_draw:
        return INTENTIONAL_DRAW_LABEL
    if match.winner_id is None or match.is_tie:
        return DRAW_LABEL
    return f"{match.player1_score}-{match.player2_score}"


def _has_winner(match: Match) -> bool:
    # Pending matches and draws show no winner.
    return bool(match.winner_id) and not (match.is_pending or match.is_intentional_draw or match.is_tie)


def _standing_sort_key(player: TournamentPlayer) -> tuple[int, int]:
    # Unranked (rank 0) players go last.
    return (0 if player.rank > 0 else 1, player.rank)


def build_tournament_detail(
    tournament: Tournament, *, names: NameAnonymizer | None = None
) -> TournamentDetail:
    standings = tuple(
        StandingRow(
            identity=player.discord_id,
            display_name=display_name(player.username, names),
            rank=player.rank,
            match_wins=player.match_wins,
            match_losses=player.match_losses,
            match_draws=player.match_draws,
            game_wins=player.game_wins,
            game_losses=player.game_losses,
            game_draws=player.game_draws,
            points=player.points,
        )
        for player in sorted(tournament.players, key=_standing_sort_key)
    )
    rounds = tuple(
        RoundView(
            number=rnd.number,
            matches=tuple(
                MatchRow(
                    player1_identity=match.player1_id,
                    player1_name=_player_label(tournament, match.player1_id, names),
                    player2_identity=match.player2_id,
                    player2_name=_player_label(tournament, match.player2_id, names),
                    player1_score=match.player1_score,
                    player2_score=match.player2_score,
                    winner_identity=match.winner_id,
                    winner_name=(
                        _player_label(tournament, match.winner_id, names) if _has_winner(match) else None
                    ),
                    result=_match_result(match),
                    is_bye=match.is_bye or not match.player2_id,
                    is_intentional_draw=match.is_intentional_draw,
                    is_pending=match.is_pending,
                )
                for match in rnd.matches
            ),
        )
        for rnd in sorted(tournament.rounds, key=lambda r: r.number)
    )
    return TournamentDetail(
        summary=summarize_tournament(tournament, names=names),
        guild_name=tournament.guild_name,
        standings=standings,
        rounds=rounds,
    )


def get_tournament_detail(
    tournament_id: str,
    *,
    collection: Collection | None = None,
    names: NameAnonymizer | None = None,
) -> TournamentDetail | None:
    tournament = find_tournament(tournament_id, collection=collection)
    if tournament is None:
        return None
    return build_tournament_detail(tournament, names=names)


def list_tournament_summaries(
    *,
    collection: Collection | None = None,
    names: NameAnonymizer | None = None,
) -> list[TournamentSummary]:
    try:
        tournaments = list_tournaments(collection=collection)
    except UpstreamFailure as exc:
        logging.warning("event=tournaments_unavailable error=%s", exc)
        return []
    return [summarize_tournament(t, names=names) for t in tournaments]


def list_recent_tournament_summaries(
    limit: int = DEFAULT_RECENT_LIMIT,
    *,
    collection: Collection | None = None,
    names: NameAnonymizer | None = None,
) -> list[TournamentSummary]:
    try:
        tournaments = list_recent_tournaments(limit, collection=collection)
    except UpstreamFailure as exc:
        logging.warning("event=recent_tournaments_unavailable error=%s", exc)
        return []
    return [summarize_tournament(t, names=names) for t in tournaments]
