# src/elko_client/names.py
"""
Symbolic name table for Elko object references.

References look like "<kind>-<owner>-<suffix>", e.g.
"user-randy-1230958410291" or "item-box.small-5521". Every dash segment and
every dot sub-segment of a dash segment becomes an alias for the full
reference, so scripts can say "randy" or "box" instead of the whole thing.

Later registrations win on alias collisions.
"""

from __future__ import annotations

from typing import Dict, Iterator, List, Optional

ME = "ME"
USER = "USER"
GHOST = "GHOST"

WELL_KNOWN_ALIASES = (ME, USER, GHOST)


class NameTable:
    """Alias -> reference mapping owned by a single SessionState."""

    def __init__(self) -> None:
        self._names: Dict[str, str] = {}

    def add_name(self, ref: str) -> None:
        """Register `ref` and all of its dash / dot fragments as aliases."""
        self._names[ref] = ref
        for dash in ref.split("-"):
            self._names[dash] = ref
            for dot in dash.split("."):
                self._names[dot] = ref

    def set_alias(self, alias: str, ref: str) -> None:
        self._names[alias] = ref

    def substitute_name(self, name: str) -> str:
        """Resolve an alias, or return `name` unchanged if it is unknown."""
        return self._names.get(name) or name

    def get(self, alias: str, default: Optional[str] = None) -> Optional[str]:
        return self._names.get(alias, default)

    def aliases_for(self, ref: str) -> List[str]:
        """All aliases currently pointing at `ref` (debugging aid)."""
        return [alias for alias, target in self._names.items() if target == ref]

    def __contains__(self, alias: object) -> bool:
        return alias in self._names

    def __getitem__(self, alias: str) -> str:
        return self._names[alias]

    def __iter__(self) -> Iterator[str]:
        return iter(self._names)

    def __len__(self) -> int:
        return len(self._names)


__all__ = ["NameTable", "ME", "USER", "GHOST", "WELL_KNOWN_ALIASES"]
