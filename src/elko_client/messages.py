# src/elko_client/messages.py
"""
Message vocabulary for the Elko protocol.

Messages stay plain dicts on the wire and in callbacks: the server defines
the protocol and new ops show up without notice. The only shape the client
depends on is object creation/announcement, exposed here as MakeMessage.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Union

Message = Dict[str, Any]

# Operation names (opaque strings as far as the core is concerned)
OP_MAKE = "make"
OP_HEREIS = "HEREIS_$"
OP_WALK = "WALK"
OP_POSTURE = "POSTURE"
OP_SPEAK = "SPEAK"
OP_OBJECTSPEAK = "OBJECTSPEAK_$"
OP_CORPORATE = "CORPORATE"
OP_DISCORPORATE = "DISCORPORATE"
OP_ENTERCONTEXT = "entercontext"

CREATION_OPS = frozenset({OP_MAKE, OP_HEREIS})

GHOST_TYPE = "Ghost"


@dataclass(frozen=True)
class MakeMessage:
    """
    Read-only view over a `make` / `HEREIS_$` message.

    `obj` is the object payload after normalization (HEREIS_$ carries it
    under "object" instead of "obj").
    """

    raw: Mapping[str, Any]
    ref: str
    obj: Mapping[str, Any]

    @property
    def op(self) -> str:
        return str(self.raw.get("op"))

    @property
    def you(self) -> bool:
        return bool(self.raw.get("you"))

    @property
    def mods(self) -> List[Mapping[str, Any]]:
        mods = self.obj.get("mods")
        if not isinstance(mods, list):
            return []
        return [m for m in mods if isinstance(m, Mapping)]

    @property
    def first_mod(self) -> Optional[Mapping[str, Any]]:
        mods = self.mods
        return mods[0] if mods else None

    @property
    def noid(self) -> Any:
        mod = self.first_mod
        return None if mod is None else mod.get("noid")

    @property
    def is_ghost(self) -> bool:
        mod = self.first_mod
        return mod is not None and mod.get("type") == GHOST_TYPE


def object_payload(message: Mapping[str, Any]) -> Any:
    """Object payload of a creation message, whichever field carries it."""
    if message.get("op") == OP_HEREIS and "object" in message:
        return message["object"]
    return message.get("obj")


def classify(message: Mapping[str, Any]) -> Union[MakeMessage, Mapping[str, Any]]:
    """
    Return a MakeMessage for creation/announcement ops, else the raw mapping.

    Malformed creation messages (no object, no ref) fall back to the raw
    mapping as well.
    """
    if message.get("op") not in CREATION_OPS:
        return message
    obj = object_payload(message)
    if not isinstance(obj, Mapping):
        return message
    ref = obj.get("ref")
    if not isinstance(ref, str) or not ref:
        return message
    return MakeMessage(raw=message, ref=ref, obj=obj)


__all__ = [
    "Message",
    "MakeMessage",
    "classify",
    "object_payload",
    "CREATION_OPS",
    "GHOST_TYPE",
    "OP_MAKE",
    "OP_HEREIS",
    "OP_WALK",
    "OP_POSTURE",
    "OP_SPEAK",
    "OP_OBJECTSPEAK",
    "OP_CORPORATE",
    "OP_DISCORPORATE",
    "OP_ENTERCONTEXT",
]
