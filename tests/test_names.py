# tests/test_names.py

from __future__ import annotations

from elko_client.names import NameTable


def test_add_name_registers_every_dash_segment() -> None:
    names = NameTable()
    names.add_name("npc-region7-4471")

    for alias in ("npc-region7-4471", "npc", "region7", "4471"):
        assert names.substitute_name(alias) == "npc-region7-4471"


def test_add_name_registers_dot_subsegments() -> None:
    names = NameTable()
    names.add_name("item-box.small-5521")

    assert names["box.small"] == "item-box.small-5521"
    assert names["box"] == "item-box.small-5521"
    assert names["small"] == "item-box.small-5521"


def test_later_registration_wins_on_collision() -> None:
    names = NameTable()
    names.add_name("user-randy-1")
    names.add_name("user-bob-2")

    # "user" now points at bob, but randy's unique fragments survive.
    assert names["user"] == "user-bob-2"
    assert names["randy"] == "user-randy-1"
    assert names["1"] == "user-randy-1"


def test_substitute_name_passes_unknown_through() -> None:
    names = NameTable()

    assert names.substitute_name("context-unknown") == "context-unknown"
    assert "context-unknown" not in names


def test_aliases_for_lists_fragments() -> None:
    names = NameTable()
    names.add_name("user-randy-1")
    names.set_alias("ME", "user-randy-1")

    assert set(names.aliases_for("user-randy-1")) == {
        "user-randy-1",
        "user",
        "randy",
        "1",
        "ME",
    }
