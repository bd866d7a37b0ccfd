from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable

from pymongo.collection import Collection

from repositories.records import Tournament
from repositories.tournament_repo import list_tournaments, list_tournaments_for_player
from services.name_service import NameAnonymizer, display_name
from utils.errors import UpstreamFailure
from utils.formatting import win_ratio


@dataclass(frozen=True)
class TournamentHistoryEntry:
    tournament_id: str
    name: str
    date: datetime | None
    player_count: int
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
            "tournamentId": self.tournament_id,
            "name": self.name,
            "date": self.date.isoformat() if self.date else None,
            "playerCount": self.player_count,
            "rank": self.rank,
            "matchWins": self.match_wins,
            "matchLosses": self.match_losses,
            "matchDraws": self.match_draws,
            "gameWins": self.game_wins,
            "gameLosses": self.game_losses,
            "gameDraws": self.game_draws,
            "points": self.points,
        }


@dataclass
class PlayerRecord:
    identity: str
    display_name: str
    match_wins: int = 0
    match_losses: int = 0
    match_draws: int = 0
    game_wins: int = 0
    game_losses: int = 0
    game_draws: int = 0
    tournaments_played: int = 0
    tournaments_won: int = 0
    tournament_history: list[TournamentHistoryEntry] = field(default_factory=list)

    @property
    def match_win_percentage(self) -> float:
        return win_ratio(self.match_wins, self.match_losses, self.match_draws)

    @property
    def game_win_percentage(self) -> float:
        return win_ratio(self.game_wins, self.game_losses, self.game_draws)

    def best_finishes(self, *, top: int = 3, limit: int = 4) -> list[TournamentHistoryEntry]:
        finishes = [entry for entry in self.tournament_history if 0 < entry.rank <= top]
        return sorted(finishes, key=lambda entry: entry.rank)[:limit]

    def to_dict(self) -> dict[str, Any]:
        return {
            "identity": self.identity,
            "displayName": self.display_name,
            "matchWins": self.match_wins,
            "matchLosses": self.match_losses,
            "matchDraws": self.match_draws,
            "gameWins": self.game_wins,
            "gameLosses": self.game_losses,
            "gameDraws": self.game_draws,
            "tournamentsPlayed": self.tournaments_played,
            "tournamentsWon": self.tournaments_won,
            "tournamentHistory": [entry.to_dict() for entry in self.tournament_history],
        }


@dataclass
class PlayerSummary:
    identity: str
    display_name: str
    match_wins: int = 0
    match_losses: int = 0
    match_draws: int = 0
    game_wins: int = 0
    game_losses: int = 0
    game_draws: int = 0
    tournaments_played: int = 0
    tournaments_won: int = 0

    @property
    def match_win_percentage(self) -> float:
        return win_ratio(self.match_wins, self.match_losses, self.match_draws)

    def to_dict(self) -> dict[str, Any]:
        return {
            "identity": self.identity,
            "displayName": self.display_name,
            "matchWins": self.match_wins,
            "matchLosses": self.match_losses,
            "matchDraws": self.match_draws,
            "gameWins": self.game_wins,
            "gameLosses": self.game_losses,
            "gameDraws": self.game_draws,
            "tournamentsPlayed": self.tournaments_played,
            "tournamentsWon": self.tournaments_won,
        }


def aggregate_player(
    discord_id: str,
    tournaments: Iterable[Tournament],
    *,
    names: NameAnonymizer | None = None,
) -> PlayerRecord:
    """
    Fold one player's per-tournament totals into a cumulative record.

    History follows the order of ``tournaments`` (newest first when fed from the repository).
    The display name is taken from the first tournament listing the player.
    """
    raw_name: str | None = None
    record = PlayerRecord(identity=discord_id, display_name="")
    for tournament in tournaments:
        if not tournament.has_players:
            continue
        player = tournament.find_player(discord_id)
        if player is None:
            continue
        if raw_name is None and player.username:
            raw_name = player.username

        record.match_wins += player.match_wins
        record.match_losses += player.match_losses
        record.match_draws += player.match_draws
        record.game_wins += player.game_wins
        record.game_losses += player.game_losses
        record.game_draws += player.game_draws
        record.tournaments_played += 1
        if player.rank == 1:
            record.tournaments_won += 1

        record.tournament_history.append(
            TournamentHistoryEntry(
                tournament_id=tournament.id,
                name=tournament.name,
                date=tournament.date,
                player_count=tournament.effective_player_count,
                rank=player.rank,
                match_wins=player.match_wins,
                match_losses=player.match_losses,
                match_draws=player.match_draws,
                game_wins=player.game_wins,
                game_losses=player.game_losses,
                game_draws=player.game_draws,
                points=player.points,
            )
        )
    record.display_name = display_name(raw_name, names)
    return record


def get_player(
    discord_id: str,
    *,
    collection: Collection | None = None,
    names: NameAnonymizer | None = None,
) -> PlayerRecord | None:
    """
    Return the player's cumulative record, or None when they appear in no tournament.
    UpstreamFailure propagates to the caller.
    """
    tournaments = list_tournaments_for_player(discord_id, collection=collection)
    if not tournaments:
        return None
    record = aggregate_player(discord_id, tournaments, names=names)
    if record.tournaments_played == 0:
        return None
    return record


def summarize_players(
    tournaments: Iterable[Tournament],
    *,
    names: NameAnonymizer | None = None,
) -> list[PlayerSummary]:
    summaries: dict[str, PlayerSummary] = {}
    raw_names: dict[str, str] = {}
    for tournament in tournaments:
        for player in tournament.players:
            if not player.discord_id:
                continue
            summary = summaries.get(player.discord_id)
            if summary is None:
                summary = PlayerSummary(identity=player.discord_id, display_name="")
                summaries[player.discord_id] = summary
            if player.discord_id not in raw_names and player.username:
                raw_names[player.discord_id] = player.username
            summary.match_wins += player.match_wins
            summary.match_losses += player.match_losses
            summary.match_draws += player.match_draws
            summary.game_wins += player.game_wins
            summary.game_losses += player.game_losses
            summary.game_draws += player.game_draws
            summary.tournaments_played += 1
            if player.rank == 1:
                summary.tournaments_won += 1

    for identity, summary in summaries.items():
        summary.display_name = display_name(raw_names.get(identity), names)
    return sorted(summaries.values(), key=lambda s: -s.match_wins)


def list_players(
    *,
    collection: Collection | None = None,
    names: NameAnonymizer | None = None,
) -> list[PlayerSummary]:
    try:
        tournaments = list_tournaments(collection=collection)
    except UpstreamFailure as exc:
        logging.warning("event=players_unavailable error=%s", exc)
        return []
    return summarize_players(tournaments, names=names)
