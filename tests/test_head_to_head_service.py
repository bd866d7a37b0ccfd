from datetime import datetime

import mongomock

import services.head_to_head_service as h2h
from repositories.records import Tournament
from services.name_service import NameAnonymizer


def _collection():
    client = mongomock.MongoClient()
    return client["test_db"]["tournaments"]


def _players(*pairs):
    return [{"discordId": pid, "username": name} for pid, name in pairs]


def _match(p1, p2, s1, s2, *, winner=None, bye=False):
    return {
        "player1Id": p1,
        "player2Id": p2,
        "player1Score": s1,
        "player2Score": s2,
        "winnerId": winner,
        "isBye": bye,
    }


def _tournament(tid, players, rounds):
    return Tournament.from_document(
        {
            "_id": tid,
            "name": f"Event {tid}",
            "players": players,
            "rounds": [{"number": n, "matches": m} for n, m in enumerate(rounds, start=1)],
        }
    )


PLAYERS = _players(("a", "Alice"), ("b", "Bob"), ("c", "Cara"), ("d", "Dan"))


def test_bye_only_history_yields_no_records():
    tournament = _tournament("t1", PLAYERS, [[_match("a", None, 2, 0, winner="a", bye=True)]])

    assert h2h.resolve_head_to_head("a", [tournament]) == []


def test_records_classify_results_from_subject_side():
    tournament = _tournament(
        "t1",
        PLAYERS,
        [
            [_match("a", "b", 2, 1, winner="a")],
            [_match("c", "a", 2, 0, winner="c")],
            [_match("a", "d", 1, 1)],
        ],
    )

    records = {r.opponent_identity: r for r in h2h.resolve_head_to_head("a", [tournament])}

    assert (records["b"].match_wins, records["b"].game_wins, records["b"].game_losses) == (1, 2, 1)
    assert (records["c"].match_losses, records["c"].game_wins, records["c"].game_losses) == (1, 0, 2)
    assert records["d"].match_draws == 1
    assert records["d"].match_win_percentage == 0.0


def test_records_sorted_by_matches_played_with_stable_ties():
    first = _tournament(
        "t1",
        PLAYERS,
        [[_match("a", "b", 2, 0, winner="a")], [_match("a", "c", 2, 1, winner="a")]],
    )
    second = _tournament(
        "t2",
        PLAYERS,
        [[_match("d", "a", 2, 1, winner="d")], [_match("a", "c", 0, 2, winner="c")]],
    )

    records = h2h.resolve_head_to_head("a", [first, second])

    assert [r.opponent_identity for r in records] == ["c", "b", "d"]
    assert records[0].matches_played == 2
    assert records[0].to_dict() == {
        "opponentIdentity": "c",
        "opponentDisplayName": "Cara",
        "matchWins": 1,
        "matchLosses": 1,
        "matchDraws": 0,
        "gameWins": 2,
        "gameLosses": 3,
    }


def test_unknown_opponents_skipped_unless_allowed():
    tournament = _tournament(
        "t1",
        _players(("a", "Alice")),
        [[_match("a", "zz-unknown", 2, 0, winner="a")]],
    )

    assert h2h.resolve_head_to_head("a", [tournament]) == []

    records = h2h.resolve_head_to_head("a", [tournament], allow_unknown_opponents=True)
    assert [(r.opponent_identity, r.opponent_display_name) for r in records] == [
        ("zz-unknown", "zz-unknown")
    ]


def test_opponent_names_go_through_anonymizer():
    tournament = _tournament("t1", PLAYERS, [[_match("a", "b", 2, 0, winner="a")]])
    names = NameAnonymizer(enabled=True, keep=["Bo"])

    records = h2h.resolve_head_to_head("a", [tournament], names=names)

    assert records[0].opponent_display_name == "Bob"


def test_get_head_to_head_reads_player_tournaments():
    collection = _collection()
    collection.insert_one(
        {
            "name": "Cup",
            "date": datetime(2024, 3, 1),
            "players": PLAYERS,
            "rounds": [{"number": 1, "matches": [_match("b", "a", 1, 2, winner="a")]}],
        }
    )
    collection.insert_one(
        {
            "name": "Other",
            "date": datetime(2024, 4, 1),
            "players": _players(("c", "Cara"), ("d", "Dan")),
            "rounds": [{"number": 1, "matches": [_match("c", "d", 2, 0, winner="c")]}],
        }
    )

    records = h2h.get_head_to_head("a", collection=collection)

    assert len(records) == 1
    assert records[0].opponent_identity == "b"
    assert (records[0].game_wins, records[0].game_losses) == (2, 1)
