# src/elko_client/session.py
"""
Session state for one Elko connection.

Consumes every decoded inbound message and maintains:
    - names:   alias -> reference (NameTable)
    - history: reference -> latest make / HEREIS_$ message for it
    - noids:   numeric object id -> object payload

Rules:
- scan() is the ONLY mutator; everything else here is a read.
- One SessionState per client; nothing is shared between clients.
- History and the noid index only grow during a session.
"""

from __future__ import annotations

import logging
from collections.abc import Hashable
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from .messages import OP_HEREIS, MakeMessage, Message, classify
from .names import GHOST, ME, USER, NameTable

log = logging.getLogger(__name__)


@dataclass
class ScanResult:
    """Outcome of scanning one message."""

    message: Message
    ref: Optional[str] = None
    entered_region: bool = False


class SessionState:
    """
    Reference/name tables built from the inbound message stream.

    The client calls scan() for each frame before any listener sees it, so
    listeners can already resolve the names the message introduced.
    """

    def __init__(self) -> None:
        self.names = NameTable()
        self.history: Dict[str, Message] = {}
        self.noids: Dict[Any, Mapping[str, Any]] = {}

    # ------------------------------------------------------------------
    # Scan step
    # ------------------------------------------------------------------

    def scan(self, message: Message) -> ScanResult:
        result = ScanResult(message=message)

        to = message.get("to")
        if isinstance(to, str) and to:
            self.names.add_name(to)

        op = message.get("op")
        if not op:
            return result

        if op == OP_HEREIS and "object" in message:
            message["obj"] = message["object"]

        view = classify(message)
        if not isinstance(view, MakeMessage):
            return result

        ref = view.ref
        result.ref = ref
        self.names.add_name(ref)
        self.history[ref] = message

        mod = view.first_mod
        if mod is not None:
            noid = mod.get("noid")
            if isinstance(noid, Hashable):
                self.noids[noid] = view.obj
            else:
                log.warning("Ignoring unhashable noid on %s: %r", ref, noid)

        if view.you:
            owner = ref.split("-")[:2]
            self.names.set_alias(ME, ref)
            self.names.set_alias(USER, "-".join(owner))
            result.entered_region = True
            log.debug("Session avatar is now %s", ref)

        if view.is_ghost:
            self.names.set_alias(GHOST, ref)
            log.debug("Ghost reference is now %s", ref)

        return result

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def substitute_name(self, name: str) -> str:
        return self.names.substitute_name(name)

    @property
    def me_ref(self) -> Optional[str]:
        return self.names.get(ME)

    @property
    def user_ref(self) -> Optional[str]:
        return self.names.get(USER)

    @property
    def ghost_ref(self) -> Optional[str]:
        return self.names.get(GHOST)

    def get_object(self, name: str) -> Optional[Mapping[str, Any]]:
        """Object payload recorded for a reference or alias, if any."""
        entry = self.history.get(self.substitute_name(name))
        if entry is None:
            return None
        obj = entry.get("obj")
        return obj if isinstance(obj, Mapping) else None

    def get_avatar(self) -> Optional[Mapping[str, Any]]:
        ref = self.me_ref
        if ref is None:
            return None
        return self.get_object(ref)

    def _avatar_mod(self) -> Optional[Mapping[str, Any]]:
        avatar = self.get_avatar()
        if avatar is None:
            return None
        mods = avatar.get("mods")
        if not isinstance(mods, list) or not mods or not isinstance(mods[0], Mapping):
            return None
        return mods[0]

    def get_avatar_noid(self) -> Any:
        mod = self._avatar_mod()
        if mod is None:
            return -1
        return mod.get("noid", -1)

    def is_ghosted(self) -> bool:
        mod = self._avatar_mod()
        if mod is None:
            return False
        return bool(mod.get("amAGhost", False))

    def get_noid(self, noid: Any) -> Optional[Mapping[str, Any]]:
        if noid in self.noids:
            return self.noids[noid]
        log.error("Could not find noid: %s", noid)
        return None

    def get_mod(self, noid: Any) -> Optional[Mapping[str, Any]]:
        obj = self.get_noid(noid)
        if obj is None:
            return None
        mods = obj.get("mods")
        if not isinstance(mods, list) or not mods:
            return None
        return mods[0]


__all__ = ["SessionState", "ScanResult"]
