from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

from pymongo.collection import Collection

from repositories.records import Tournament
from repositories.tournament_repo import list_tournaments_for_player
from services.name_service import NameAnonymizer, display_name
from utils.formatting import win_ratio


@dataclass
class HeadToHeadRecord:
    opponent_identity: str
    opponent_display_name: str
    match_wins: int = 0
    match_losses: int = 0
    match_draws: int = 0
    game_wins: int = 0
    game_losses: int = 0

    @property
    def matches_played(self) -> int:
        return self.match_wins + self.match_losses + self.match_draws

    @property
    def match_win_percentage(self) -> float:
        return win_ratio(self.match_wins, self.match_losses, self.match_draws)

    def to_dict(self) -> dict[str, Any]:
        return {
            "opponentIdentity": self.opponent_identity,
            "opponentDisplayName": self.opponent_display_name,
            "matchWins": self.match_wins,
            "matchLosses": self.match_losses,
            "matchDraws": self.match_draws,
            "gameWins": self.game_wins,
            "gameLosses": self.game_losses,
        }


def resolve_head_to_head(
    discord_id: str,
    tournaments: Iterable[Tournament],
    *,
    names: NameAnonymizer | None = None,
    allow_unknown_opponents: bool = False,
) -> list[HeadToHeadRecord]:
    """
    Build the subject's record against every opponent faced in a non-bye match.

    Opponents missing from the tournament's player list are skipped unless
    ``allow_unknown_opponents`` is set, in which case their raw identity is shown.
    Sorted by matches played against the opponent, most first; ties keep encounter order.
    """
    records: dict[str, HeadToHeadRecord] = {}
    for tournament in tournaments:
        for rnd in tournament.rounds:
            for match in rnd.matches:
                if match.is_bye or not match.involves(discord_id):
                    continue
                subject_is_player1 = match.player1_id == discord_id
                opponent_id = match.player2_id if subject_is_player1 else match.player1_id
                if not opponent_id:
                    continue

                opponent = tournament.find_player(opponent_id)
                if opponent is None and not allow_unknown_opponents:
                    continue

                record = records.get(opponent_id)
                if record is None:
                    name = display_name(opponent.username, names) if opponent else opponent_id
                    record = HeadToHeadRecord(opponent_identity=opponent_id, opponent_display_name=name)
                    records[opponent_id] = record

                if match.winner_id == discord_id:
                    record.match_wins += 1
                elif match.winner_id == opponent_id:
                    record.match_losses += 1
                else:
                    record.match_draws += 1

                if subject_is_player1:
                    record.game_wins += match.player1_score
                    record.game_losses += match.player2_score
                else:
                    record.game_wins += match.player2_score
                    record.game_losses += match.player1_score

    return sorted(records.values(), key=lambda r: r.matches_played, reverse=True)


def get_head_to_head(
    discord_id: str,
    *,
    collection: Collection | None = None,
    names: NameAnonymizer | None = None,
) -> list[HeadToHeadRecord]:
    tournaments = list_tournaments_for_player(discord_id, collection=collection)
    return resolve_head_to_head(discord_id, tournaments, names=names)
