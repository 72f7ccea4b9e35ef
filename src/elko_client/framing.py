# src/elko_client/framing.py
"""
Wire framing for the Elko protocol.

Frames are UTF-8 JSON objects terminated by a blank line:

    {"to":"context-test","op":"make", ...}\n
    \n

FrameDecoder keeps its state between feed() calls, so a frame split across
any number of socket reads is reassembled exactly as if it had arrived in
one piece.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Mapping, Optional

log = logging.getLogger(__name__)

OPEN_BRACE = 0x7B  # "{"
NEWLINE = 0x0A  # "\n"
TERMINATOR = b"\n\n"


class FrameDecoder:
    """
    Incremental splitter for double-newline terminated JSON frames.

    Rules:
      - Unframed: "{" opens a frame; "\n" is skipped silently; anything else
        is noise and dropped (logged at DEBUG).
      - Framed: every byte is kept. Two consecutive "\n" close the frame;
        the emitted text ends with the first of them.
    """

    def __init__(self) -> None:
        self._framed: bool = False
        self._pending_newline: bool = False
        self._buffer = bytearray()

    @property
    def framed(self) -> bool:
        """True while a frame is open and waiting for its terminator."""
        return self._framed

    def feed(self, chunk: bytes) -> List[str]:
        """Consume a chunk of bytes and return every frame it completed."""
        frames: List[str] = []
        for byte in chunk:
            if self._framed:
                if byte == NEWLINE:
                    if self._pending_newline:
                        frames.append(self._take())
                        continue
                    self._pending_newline = True
                else:
                    self._pending_newline = False
                self._buffer.append(byte)
            elif byte == OPEN_BRACE:
                self._framed = True
                self._pending_newline = False
                self._buffer.append(byte)
            elif byte != NEWLINE:
                log.debug("IGNORED: %d", byte)
        return frames

    def flush(self) -> Optional[str]:
        """
        Return a partially accumulated frame at end of stream, if any.

        Best effort only: if the stream ended mid-message the result will
        not parse, and parse_frame() will report it.
        """
        if not self._framed:
            return None
        return self._take()

    def _take(self) -> str:
        text = self._buffer.decode("utf-8", errors="replace")
        self._buffer = bytearray()
        self._framed = False
        self._pending_newline = False
        return text


def parse_frame(text: str) -> Dict[str, Any]:
    """
    Decode one frame into a message mapping.

    Parse failures are logged at WARNING and yield {} so the connection
    keeps going.
    """
    try:
        obj = json.loads(text)
    except ValueError as exc:
        log.warning("Unable to parse: %s\n\n%s", text, exc)
        return {}
    if not isinstance(obj, dict):
        log.warning("Frame is not a JSON object: %s", text)
        return {}
    return obj


def encode_frame(message: Mapping[str, Any]) -> bytes:
    """Serialize a message for the wire (compact JSON plus blank line)."""
    return json.dumps(dict(message), separators=(",", ":")).encode("utf-8") + TERMINATOR


__all__ = ["FrameDecoder", "parse_frame", "encode_frame", "TERMINATOR"]
