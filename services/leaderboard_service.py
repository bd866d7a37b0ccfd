from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable

from pymongo.collection import Collection

from repositories.records import Tournament
from repositories.tournament_repo import list_tournaments
from services.name_service import NameAnonymizer, display_name
from utils.errors import UpstreamFailure
from utils.formatting import win_ratio

PLACEMENT_POINTS: dict[int, int] = {1: 5, 2: 3, 3: 1}


@dataclass
class LeaderboardEntry:
    identity: str
    display_name: str
    leaderboard_points: int = 0
    tournaments_played: int = 0
    first_place: int = 0
    second_place: int = 0
    third_place: int = 0
    match_wins: int = 0
    match_losses: int = 0
    match_draws: int = 0
    game_wins: int = 0
    game_losses: int = 0
    game_draws: int = 0

    @property
    def match_win_percentage(self) -> float:
        return win_ratio(self.match_wins, self.match_losses, self.match_draws)

    def sort_key(self) -> tuple[int, int, int, int, float]:
        return (
            self.leaderboard_points,
            self.first_place,
            self.second_place,
            self.third_place,
            self.match_win_percentage,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "identity": self.identity,
            "displayName": self.display_name,
            "leaderboardPoints": self.leaderboard_points,
            "tournamentsPlayed": self.tournaments_played,
            "firstPlace": self.first_place,
            "secondPlace": self.second_place,
            "thirdPlace": self.third_place,
            "matchWins": self.match_wins,
            "matchLosses": self.match_losses,
            "matchDraws": self.match_draws,
            "gameWins": self.game_wins,
            "gameLosses": self.game_losses,
            "gameDraws": self.game_draws,
        }


def _award_placement(entry: LeaderboardEntry, rank: int) -> None:
    entry.leaderboard_points += PLACEMENT_POINTS.get(rank, 0)
    if rank == 1:
        entry.first_place += 1
    elif rank == 2:
        entry.second_place += 1
    elif rank == 3:
        entry.third_place += 1


def rank_leaderboard(
    tournaments: Iterable[Tournament],
    *,
    names: NameAnonymizer | None = None,
) -> list[LeaderboardEntry]:
    """
    Placement-weighted leaderboard across all tournaments.

    Order: points, 1st places, 2nd places, 3rd places, match win percentage (all descending).
    Entries still tied keep the order in which players were first seen.
    """
    table: dict[str, LeaderboardEntry] = {}
    for tournament in tournaments:
        for player in tournament.players:
            if not player.discord_id or not player.username:
                continue
            entry = table.get(player.discord_id)
            if entry is None:
                entry = LeaderboardEntry(
                    identity=player.discord_id,
                    display_name=display_name(player.username, names),
                )
                table[player.discord_id] = entry
            entry.tournaments_played += 1
            entry.match_wins += player.match_wins
            entry.match_losses += player.match_losses
            entry.match_draws += player.match_draws
            entry.game_wins += player.game_wins
            entry.game_losses += player.game_losses
            entry.game_draws += player.game_draws
            _award_placement(entry, player.rank)

    # sorted() is stable, so exact ties stay in encounter order.
    return sorted(table.values(), key=LeaderboardEntry.sort_key, reverse=True)


def get_leaderboard(
    *,
    collection: Collection | None = None,
    names: NameAnonymizer | None = None,
    limit: int | None = None,
) -> list[LeaderboardEntry]:
    try:
        tournaments = list_tournaments(collection=collection)
    except UpstreamFailure as exc:
        logging.warning("event=leaderboard_unavailable error=%s", exc)
        return []
    entries = rank_leaderboard(tournaments, names=names)
    if limit is not None:
        return entries[: max(0, limit)]
    return entries
