# tests/test_session.py
"""
Unit tests for SessionState.scan and its lookups.

Covers:
- "to"-only packets
- make / HEREIS_$ recording (history, noid index, aliases)
- ME / USER / GHOST assignment
- avatar lookups
"""

from __future__ import annotations

import copy

from elko_client.session import SessionState
from elko_client.testing.fakes import hereis_message, make_message


def test_to_only_packet_registers_name_but_no_state() -> None:
    session = SessionState()
    result = session.scan({"to": "context-Downtown_5f"})

    assert session.substitute_name("Downtown_5f") == "context-Downtown_5f"
    assert session.history == {}
    assert session.noids == {}
    assert result.ref is None


def test_make_records_history_and_noid() -> None:
    session = SessionState()
    msg = make_message("item-rock-77", 12, "Rock", name="rock")
    session.scan(msg)

    assert session.history["item-rock-77"] is msg
    assert session.noids[12]["ref"] == "item-rock-77"
    assert session.substitute_name("rock") == "item-rock-77"
    # the "to" of the make message is a known name too
    assert session.substitute_name("test") == "context-test"


def test_you_sets_me_user_and_reports_region_entry() -> None:
    session = SessionState()
    result = session.scan(make_message("user-randy-1230958410291", 3, you=True))

    assert result.entered_region is True
    assert session.me_ref == "user-randy-1230958410291"
    assert session.user_ref == "user-randy"
    assert session.substitute_name("ME") == "user-randy-1230958410291"


def test_other_objects_do_not_enter_region() -> None:
    session = SessionState()
    result = session.scan(make_message("user-bob-2", 4))

    assert result.entered_region is False
    assert session.me_ref is None


def test_ghost_type_sets_ghost_alias() -> None:
    session = SessionState()
    session.scan(make_message("ghost-randy-9", 250, "Ghost"))

    assert session.ghost_ref == "ghost-randy-9"


def test_hereis_is_processed_like_make() -> None:
    via_make = SessionState()
    via_hereis = SessionState()

    make_msg = make_message("user-bob-2", 4, you=True)
    hereis_msg = hereis_message("user-bob-2", 4)
    hereis_msg["you"] = True

    r1 = via_make.scan(copy.deepcopy(make_msg))
    r2 = via_hereis.scan(hereis_msg)

    assert r1.entered_region == r2.entered_region
    assert via_make.history["user-bob-2"]["obj"] == via_hereis.history["user-bob-2"]["obj"]
    assert via_make.noids.keys() == via_hereis.noids.keys()
    assert via_make.me_ref == via_hereis.me_ref
    # HEREIS_$ payload is now also available as "obj"
    assert hereis_msg["obj"] is hereis_msg["object"]


def test_later_make_overwrites_history_and_keeps_other_aliases() -> None:
    session = SessionState()
    session.scan(make_message("user-randy-1", 3, x=10))
    session.scan(make_message("item-rock-77", 12, "Rock"))
    session.scan(make_message("user-randy-1", 3, x=20))

    assert session.history["user-randy-1"]["obj"]["mods"][0]["x"] == 20
    assert session.substitute_name("rock") == "item-rock-77"
    assert session.substitute_name("randy") == "user-randy-1"
    assert len(session.history) == 2


def test_reannounced_noid_supersedes_prior_entry() -> None:
    session = SessionState()
    session.scan(make_message("item-rock-77", 12, "Rock"))
    session.scan(make_message("item-key-78", 12, "Key"))

    assert session.noids[12]["ref"] == "item-key-78"


def test_make_without_mods_is_recorded_without_noid() -> None:
    session = SessionState()
    msg = {"op": "make", "to": "context-test", "obj": {"ref": "item-blank-1", "mods": []}}
    session.scan(msg)

    assert "item-blank-1" in session.history
    assert session.noids == {}


def test_malformed_make_is_ignored() -> None:
    session = SessionState()
    session.scan({"op": "make", "to": "context-test"})

    assert session.history == {}


def test_avatar_lookups() -> None:
    session = SessionState()
    assert session.get_avatar() is None
    assert session.get_avatar_noid() == -1
    assert session.is_ghosted() is False

    session.scan(make_message("user-randy-1", 3, you=True, amAGhost=True, x=84))

    assert session.get_avatar()["ref"] == "user-randy-1"
    assert session.get_avatar_noid() == 3
    assert session.is_ghosted() is True
    assert session.get_mod(3)["x"] == 84
    assert session.get_object("randy")["ref"] == "user-randy-1"


def test_get_noid_missing_returns_none() -> None:
    session = SessionState()

    assert session.get_noid(999) is None
    assert session.get_mod(999) is None


def test_unhashable_noid_is_skipped_but_object_recorded() -> None:
    session = SessionState()
    msg = make_message("item-odd-5", 0, "Rock")
    msg["obj"]["mods"][0]["noid"] = ["not", "hashable"]

    session.scan(msg)

    assert session.noids == {}
    assert session.history["item-odd-5"] is msg
    assert session.substitute_name("odd") == "item-odd-5"
