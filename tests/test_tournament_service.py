from datetime import datetime

import mongomock
from pymongo.errors import PyMongoError

import services.tournament_service as ts
from repositories.records import Tournament
from services.name_service import NameAnonymizer


def _collection():
    client = mongomock.MongoClient()
    return client["test_db"]["tournaments"]


def _doc(**overrides):
    doc = {
        "name": "Sector Qualifier",
        "date": datetime(2024, 6, 1),
        "guildName": "Outer Rim",
        "playerCount": 0,
        "players": [
            {"discordId": "c", "username": "Cara", "rank": 0},
            {"discordId": "b", "username": "Bob", "rank": 2, "matchWins": 1},
            {"discordId": "a", "username": "Alice", "rank": 1, "matchWins": 2},
        ],
        "rounds": [
            {
                "number": 2,
                "matches": [
                    {"player1Id": "a", "player2Id": "b", "player1Score": 1, "player2Score": 1, "isTie": True, "status": "complete"},
                ],
            },
            {
                "number": 1,
                "matches": [
                    {"player1Id": "a", "player2Id": "stranger-1234", "player1Score": 2, "player2Score": 1, "winnerId": "a", "status": "complete"},
                    {"player1Id": "c", "player2Id": None, "isBye": True, "winnerId": "c", "status": "complete"},
                ],
            },
        ],
    }
    doc.update(overrides)
    return doc


def test_summary_uses_rank_one_winner_and_effective_player_count():
    tournament = Tournament.from_document({"_id": "t1", **_doc()})

    summary = ts.summarize_tournament(tournament)

    assert summary.winner_identity == "a"
    assert summary.winner_display_name == "Alice"
    assert summary.player_count == 3
    assert summary.to_dict()["date"] == "2024-06-01T00:00:00"


def test_summary_without_winner():
    tournament = Tournament.from_document({"_id": "t1", **_doc(players=[], playerCount=16)})

    summary = ts.summarize_tournament(tournament)

    assert summary.winner_display_name is None
    assert summary.player_count == 16


def test_detail_orders_standings_and_rounds_and_labels_matches():
    tournament = Tournament.from_document({"_id": "t1", **_doc()})

    detail = ts.build_tournament_detail(tournament)

    assert [row.identity for row in detail.standings] == ["a", "b", "c"]
    assert [rnd.number for rnd in detail.rounds] == [1, 2]

    first_round = detail.rounds[0].matches
    assert first_round[0].player2_name == "stranger"
    assert first_round[0].result == "2-1"
    assert first_round[1].player2_name == ts.BYE_LABEL
    assert first_round[1].result == ts.BYE_LABEL
    assert first_round[1].is_bye is True
    assert detail.rounds[1].matches[0].result == ts.DRAW_LABEL

    body = detail.to_dict()
    assert body["guildName"] == "Outer Rim"
    assert body["standings"][0]["displayName"] == "Alice"


def test_detail_labels_pending_intentional_draw_and_winner():
    rounds = [
        {
            "number": 3,
            "matches": [
                {"player1Id": "a", "player2Id": "b", "winnerId": None, "status": "pending"},
                {"player1Id": "b", "player2Id": "c", "isIntentionalDraw": True, "isTie": True, "status": "complete"},
                {"player1Id": "c", "player2Id": "a", "player1Score": 0, "player2Score": 2, "winnerId": "a", "status": "complete"},
                {"player1Id": "a", "player2Id": "c", "player1Score": 1, "player2Score": 0, "winnerId": "a"},
            ],
        }
    ]
    tournament = Tournament.from_document({"_id": "t1", **_doc(rounds=rounds)})

    pending, intentional, decided, unmarked = ts.build_tournament_detail(tournament).rounds[0].matches

    assert pending.result == ts.PENDING_LABEL
    assert pending.is_pending is True
    assert pending.winner_name is None
    assert intentional.result == ts.INTENTIONAL_DRAW_LABEL
    assert intentional.winner_name is None
    assert decided.result == "0-2"
    assert decided.winner_name == "Alice"
    assert decided.to_dict()["winnerName"] == "Alice"
    assert unmarked.result == ts.PENDING_LABEL
    assert unmarked.winner_name is None


def test_detail_anonymizes_names():
    tournament = Tournament.from_document({"_id": "t1", **_doc()})

    detail = ts.build_tournament_detail(tournament, names=NameAnonymizer(enabled=True))

    assert {row.display_name for row in detail.standings} == {"User A", "User B", "User C"}


def test_get_tournament_detail_by_id_or_none():
    collection = _collection()
    inserted = collection.insert_one(_doc())

    detail = ts.get_tournament_detail(str(inserted.inserted_id), collection=collection)

    assert detail is not None
    assert detail.summary.tournament_id == str(inserted.inserted_id)
    assert ts.get_tournament_detail("missing", collection=collection) is None


def test_list_summaries_newest_first():
    collection = _collection()
    collection.insert_one(_doc(name="Older", date=datetime(2024, 1, 1)))
    collection.insert_one(_doc(name="Newer", date=datetime(2024, 2, 1)))

    summaries = ts.list_tournament_summaries(collection=collection)
    recent = ts.list_recent_tournament_summaries(1, collection=collection)

    assert [s.name for s in summaries] == ["Newer", "Older"]
    assert [s.name for s in recent] == ["Newer"]


class _FailingCollection:
    def find(self, *_args, **_kwargs):
        raise PyMongoError("down")


def test_listings_degrade_on_store_failure():
    assert ts.list_tournament_summaries(collection=_FailingCollection()) == []
    assert ts.list_recent_tournament_summaries(collection=_FailingCollection()) == []
