from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable

from pymongo.collection import Collection

from repositories.records import Tournament
from repositories.tournament_repo import count_players, count_tournaments, list_tournaments
from services.leaderboard_service import LeaderboardEntry, get_leaderboard
from services.name_service import NameAnonymizer
from services.tournament_service import TournamentSummary, list_recent_tournament_summaries
from utils.errors import UpstreamFailure


@dataclass(frozen=True)
class SiteStats:
    total_tournaments: int = 0
    total_players: int = 0
    total_matches: int = 0
    total_games: int = 0
    draw_percentage: float = 0.0
    avg_games_per_match: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalTournaments": self.total_tournaments,
            "totalPlayers": self.total_players,
            "totalMatches": self.total_matches,
            "totalGames": self.total_games,
            "drawPercentage": self.draw_percentage,
            "avgGamesPerMatch": self.avg_games_per_match,
        }


@dataclass(frozen=True)
class HomeOverview:
    tournament_count: int
    player_count: int
    recent_tournaments: list[TournamentSummary]
    top_players: list[LeaderboardEntry]


def compute_site_stats(tournaments: Iterable[Tournament]) -> SiteStats:
    """
    Totals across every tournament. Tournaments lacking a players or rounds array only count
    towards the tournament total. Byes are not matches; a draw is a match with equal scores.
    """
    tournament_count = 0
    players: set[str] = set()
    total_matches = 0
    total_games = 0
    total_draws = 0
    for tournament in tournaments:
        tournament_count += 1
        if not (tournament.has_players and tournament.has_rounds):
            continue
        players.update(p.discord_id for p in tournament.players if p.discord_id)
        for match in tournament.iter_matches():
            if match.is_bye:
                continue
            total_matches += 1
            total_games += match.player1_score + match.player2_score
            if match.player1_score == match.player2_score:
                total_draws += 1

    draw_percentage = (total_draws / total_matches) * 100 if total_matches else 0.0
    return SiteStats(
        total_tournaments=tournament_count,
        total_players=len(players),
        total_matches=total_matches,
        total_games=total_games,
        draw_percentage=round(draw_percentage, 1),
        avg_games_per_match=(total_games / total_matches) if total_matches else 0.0,
    )


def get_site_stats(*, collection: Collection | None = None) -> SiteStats:
    try:
        tournaments = list_tournaments(collection=collection)
    except UpstreamFailure as exc:
        logging.warning("event=site_stats_unavailable error=%s", exc)
        return SiteStats()
    return compute_site_stats(tournaments)


def _count_or_zero(counter, *, collection: Collection | None) -> int:
    try:
        return counter(collection=collection)
    except UpstreamFailure as exc:
        logging.warning("event=count_unavailable counter=%s error=%s", counter.__name__, exc)
        return 0


def get_home_overview(
    *,
    collection: Collection | None = None,
    names: NameAnonymizer | None = None,
    recent_limit: int = 3,
    top: int = 3,
) -> HomeOverview:
    return HomeOverview(
        tournament_count=_count_or_zero(count_tournaments, collection=collection),
        player_count=_count_or_zero(count_players, collection=collection),
        recent_tournaments=list_recent_tournament_summaries(
            recent_limit, collection=collection, names=names
        ),
        top_players=get_leaderboard(collection=collection, names=names, limit=top),
    )
