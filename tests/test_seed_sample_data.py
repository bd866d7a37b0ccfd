from datetime import datetime

import mongomock

from repositories.records import Tournament
from scripts.seed_sample_data import SAMPLE_PLAYERS, sample_tournaments
from services.leaderboard_service import get_leaderboard
from services.site_stats_service import compute_site_stats


def test_sample_tournaments_are_internally_consistent():
    docs = sample_tournaments(seed_tag="t", now=datetime(2024, 7, 1))
    tournaments = [Tournament.from_document({"_id": str(i), **doc}) for i, doc in enumerate(docs)]

    assert len(tournaments) == 3
    for tournament in tournaments:
        participations = sum(p.matches_played for p in tournament.players)
        non_bye = sum(1 for m in tournament.iter_matches() if not m.is_bye)
        assert participations == 2 * non_bye
        assert sorted(p.rank for p in tournament.players) == list(range(1, len(tournament.players) + 1))

    stats = compute_site_stats(tournaments)
    assert stats.total_players == len(SAMPLE_PLAYERS)
    assert stats.total_matches == 8
    assert stats.draw_percentage > 0


def test_sample_tournaments_load_into_store():
    collection = mongomock.MongoClient()["test_db"]["tournaments"]
    collection.insert_many(sample_tournaments(seed_tag="t", now=datetime(2024, 7, 1)))

    entries = get_leaderboard(collection=collection)

    assert len(entries) == len(SAMPLE_PLAYERS)
    assert entries[0].leaderboard_points == 11
    assert collection.count_documents({"seed_tag": "t"}) == 3
