from __future__ import annotations

from datetime import datetime


def win_ratio(wins: int, losses: int, draws: int = 0) -> float:
    """
    Fraction of wins over all results; 0.0 when nothing has been played.
    """
    total = wins + losses + draws
    if total <= 0:
        return 0.0
    return wins / total


def format_percentage(ratio: float) -> str:
    return f"{ratio * 100:.1f}%"


def format_record(wins: int, losses: int, draws: int | None = None) -> str:
    if draws is None:
        return f"{wins}-{losses}"
    return f"{wins}-{losses}-{draws}"


def ordinal(rank: int) -> str:
    if rank <= 0:
        return "-"
    if 10 <= rank % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(rank % 10, "th")
    return f"{rank}{suffix}"


def format_date(value: datetime | None, *, long: bool = False) -> str:
    if value is None:
        return "Unknown date"
    if long:
        return f"{value.strftime('%B')} {value.day}, {value.year}"
    return f"{value.strftime('%b')} {value.day}, {value.year}"
