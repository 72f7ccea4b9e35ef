# src/elko_client/commands.py
"""
Builders for the commands the client itself issues.

Each returns a fresh message dict; ElkoClient submits it through the
dispatcher, so "ME" and "$..." expressions are resolved at send time.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from .messages import (
    OP_CORPORATE,
    OP_DISCORPORATE,
    OP_ENTERCONTEXT,
    OP_POSTURE,
    OP_SPEAK,
    OP_WALK,
)
from .names import ME


def corporate(to: str = ME) -> Dict[str, Any]:
    return {"op": OP_CORPORATE, "to": to}


def discorporate(to: str = ME) -> Dict[str, Any]:
    return {"op": OP_DISCORPORATE, "to": to}


def enter_context(user: Optional[str] = None, context: Optional[str] = None) -> Dict[str, Any]:
    """
    Session entry request, addressed to the session object.

    A missing context is filled in by the dispatcher from its configured
    default.
    """
    msg: Dict[str, Any] = {"op": OP_ENTERCONTEXT, "to": "session"}
    if context is not None:
        msg["context"] = context
    if user is not None:
        msg["user"] = user
    return msg


def speak(text: str, esp: int = 0, to: str = ME) -> Dict[str, Any]:
    return {"op": OP_SPEAK, "to": to, "esp": esp, "text": text}


def walk(x: Any, y: Any, how: int = 0, to: str = ME) -> Dict[str, Any]:
    return {"op": OP_WALK, "to": to, "x": x, "y": y, "how": how}


def posture(pose: int, to: str = ME) -> Dict[str, Any]:
    return {"op": OP_POSTURE, "to": to, "pose": pose}


__all__ = ["corporate", "discorporate", "enter_context", "speak", "walk", "posture"]
