# src/elko_client/templating.py
"""
"$" state substitution for outbound commands.

Any top-level string field containing "$" is rewritten from session state
just before the command goes on the wire:

    {"op": "WALK", "to": "ME", "x": "$ME.x"}        -> "x": 84 (native int)
    {"op": "SPEAK", "text": "Hi $ME.noid$!"}         -> "text": "Hi 7!"

Each "$" starts a dot path. The first segment names an object (through the
name table) whose History entry is the starting point; later segments are
looked up in the object's first modifier, then the object itself, then
the value reached so far.

Nothing here raises. Unresolvable paths degrade to literal text.
"""

from __future__ import annotations

import json
from typing import Any, Mapping, MutableMapping, Optional

from .session import SessionState

_MISSING = object()


def _lookup(container: Any, key: str) -> Any:
    if isinstance(container, Mapping):
        return container.get(key, _MISSING)
    if isinstance(container, (list, tuple)) and key.isdigit():
        index = int(key)
        if index < len(container):
            return container[index]
    return _MISSING


def resolve_path(expr: str, session: SessionState) -> Any:
    """
    Resolve one "$" chunk (without the "$") against session state.

    When the first segment has no History entry the rest of the path is
    dropped and the chunk becomes the segment's name-table value, or the
    chunk text itself.
    """
    segments = expr.split(".")
    head = segments[0]

    entry = session.history.get(session.substitute_name(head))
    if entry is None:
        return session.names.get(head) or expr

    value: Any = entry
    obj: Optional[Mapping[str, Any]] = None
    mod: Optional[Mapping[str, Any]] = None

    payload = entry.get("obj")
    if isinstance(payload, Mapping):
        obj = payload
        mods = obj.get("mods")
        if isinstance(mods, list) and mods and isinstance(mods[0], Mapping):
            mod = mods[0]

    for seg in segments[1:]:
        found = _MISSING
        if mod is not None:
            found = _lookup(mod, seg)
        if found is _MISSING and obj is not None:
            found = _lookup(obj, seg)
        if found is _MISSING:
            found = _lookup(value, seg)
        value = None if found is _MISSING else found

    return value


def _as_text(value: Any) -> str:
    # Joins render the way the server's JavaScript clients would.
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (bool, dict, list)):
        return json.dumps(value, separators=(",", ":"))
    return str(value)


def substitute_value(text: str, session: SessionState) -> Any:
    """Substitute every "$" expression in a single string value."""
    chunks: list[Any] = text.split("$")
    for i in range(1, len(chunks)):
        chunks[i] = resolve_path(chunks[i], session)

    # A lone "$expr" keeps the resolved value's own type (ints, bools, ...).
    if len(chunks) == 2 and chunks[0] == "":
        return chunks[1]
    return "".join(_as_text(chunk) for chunk in chunks)


def substitute_state(message: MutableMapping[str, Any], session: SessionState) -> None:
    """
    Rewrite all eligible fields of `message` in place.

    "op" is never rewritten: several operation names end in "$"
    (HEREIS_$, OBJECTSPEAK_$).
    """
    for name, value in list(message.items()):
        if name == "op":
            continue
        if isinstance(value, str) and "$" in value:
            message[name] = substitute_value(value, session)


__all__ = ["substitute_state", "substitute_value", "resolve_path"]
