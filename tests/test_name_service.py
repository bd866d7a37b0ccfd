from config import Settings
from services.name_service import (
    UNKNOWN_PLAYER_NAME,
    NameAnonymizer,
    _label_for,
    build_anonymizer,
    display_name,
)


def test_labels_follow_first_seen_order_and_are_stable():
    names = NameAnonymizer(enabled=True)

    assert names.display("Alice") == "User A"
    assert names.display("Bob") == "User B"
    assert names.display("Alice") == "User A"
    assert names.display("Cara") == "User C"


def test_labels_continue_past_z():
    assert _label_for(0) == "A"
    assert _label_for(25) == "Z"
    assert _label_for(26) == "AA"
    assert _label_for(27) == "AB"
    assert _label_for(701) == "ZZ"
    assert _label_for(702) == "AAA"


def test_keep_list_and_disabled_pass_through():
    names = NameAnonymizer(enabled=True, keep=["Organizer"])
    assert names.display("Organizer Sam") == "Organizer Sam"
    assert names.display("Alice") == "User A"

    disabled = NameAnonymizer(enabled=False)
    assert disabled.display("Alice") == "Alice"


def test_missing_names_use_placeholder():
    assert NameAnonymizer(enabled=True).display(None) == UNKNOWN_PLAYER_NAME
    assert display_name("", None) == UNKNOWN_PLAYER_NAME
    assert display_name("Alice", None) == "Alice"


def test_build_anonymizer_from_settings():
    settings = Settings(
        mongodb_uri=None,
        anonymize_player_names=True,
        anonymize_keep_names=frozenset({"Host"}),
    )

    names = build_anonymizer(settings)

    assert names.enabled is True
    assert names.display("Host Kim") == "Host Kim"
    assert names.display("Alice") == "User A"
