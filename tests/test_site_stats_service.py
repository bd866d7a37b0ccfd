from datetime import datetime

import mongomock
import pytest
from pymongo.errors import PyMongoError

import services.site_stats_service as ss
from repositories.records import Tournament


def _collection():
    client = mongomock.MongoClient()
    return client["test_db"]["tournaments"]


def _match(p1, p2, s1, s2, *, bye=False):
    return {"player1Id": p1, "player2Id": p2, "player1Score": s1, "player2Score": s2, "isBye": bye}


def _doc(name, date, players, matches, *, rank_first=None):
    return {
        "name": name,
        "date": date,
        "players": [
            {"discordId": pid, "username": pid.upper(), "rank": 1 if pid == rank_first else 2}
            for pid in players
        ],
        "rounds": [{"number": 1, "matches": matches}],
    }


def test_compute_site_stats_counts_matches_games_and_draws():
    tournaments = [
        Tournament.from_document(
            {"_id": "t1", **_doc("One", None, ["a", "b", "c"], [_match("a", "b", 2, 1), _match("c", None, 2, 0, bye=True)])}
        ),
        Tournament.from_document(
            {"_id": "t2", **_doc("Two", None, ["a", "c"], [_match("a", "c", 1, 1), _match("a", "c", 2, 0)])}
        ),
    ]

    stats = ss.compute_site_stats(tournaments)

    assert stats.total_tournaments == 2
    assert stats.total_players == 3
    assert stats.total_matches == 3
    assert stats.total_games == 7
    assert stats.draw_percentage == pytest.approx(33.3)
    assert stats.avg_games_per_match == pytest.approx(7 / 3)


def test_tournaments_missing_players_or_rounds_are_skipped():
    no_players = Tournament.from_document({"_id": "t1", "name": "Broken", "rounds": [{"number": 1, "matches": [_match("a", "b", 2, 0)]}]})
    no_rounds = Tournament.from_document({"_id": "t2", "name": "Fresh", "players": [{"discordId": "z", "username": "Zed"}]})
    not_started = Tournament.from_document(
        {"_id": "t3", "name": "Lobby", "players": [{"discordId": "y", "username": "Yan"}], "rounds": []}
    )

    stats = ss.compute_site_stats([no_players, no_rounds, not_started])

    assert stats.total_tournaments == 3
    assert stats.total_players == 1
    assert stats.total_matches == 0
    assert stats.avg_games_per_match == 0.0
    assert stats.draw_percentage == 0.0


class _FailingCollection:
    def _fail(self, *_args, **_kwargs):
        raise PyMongoError("down")

    find = _fail
    count_documents = _fail
    aggregate = _fail


def test_get_site_stats_degrades_to_zero():
    assert ss.get_site_stats(collection=_FailingCollection()) == ss.SiteStats()


def test_home_overview_combines_counts_recent_and_top_players():
    collection = _collection()
    collection.insert_many(
        [
            _doc("Old", datetime(2024, 1, 1), ["a", "b"], [_match("a", "b", 2, 0)], rank_first="a"),
            _doc("Mid", datetime(2024, 2, 1), ["a", "c"], [_match("a", "c", 2, 1)], rank_first="a"),
            _doc("New", datetime(2024, 3, 1), ["b", "d"], [_match("b", "d", 2, 1)], rank_first="b"),
            _doc("Newest", datetime(2024, 4, 1), ["c", "d"], [_match("c", "d", 0, 2)], rank_first="d"),
        ]
    )

    overview = ss.get_home_overview(collection=collection, recent_limit=3, top=3)

    assert overview.tournament_count == 4
    assert overview.player_count == 4
    assert [t.name for t in overview.recent_tournaments] == ["Newest", "New", "Mid"]
    assert overview.recent_tournaments[0].winner_display_name == "D"
    assert len(overview.top_players) == 3
    assert overview.top_players[0].identity == "a"


def test_home_overview_degrades_on_store_failure():
    overview = ss.get_home_overview(collection=_FailingCollection())

    assert overview.tournament_count == 0
    assert overview.player_count == 0
    assert overview.recent_tournaments == []
    assert overview.top_players == []
