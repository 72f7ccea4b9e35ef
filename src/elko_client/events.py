# src/elko_client/events.py
"""
Listener registry for client lifecycle and message events.

Categories:
    - EventCategory.CONNECTED / DISCONNECTED: fn(client)
    - EventCategory.ENTERED_REGION:           fn(client, message)
    - EventCategory.MSG (every decoded frame): fn(client, message)
    - any op name, e.g. "APPEARING_$":        fn(client, message)

Registration is additive only. Listeners run synchronously in registration
order; a failing listener is logged and does not stop the others.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Union

log = logging.getLogger(__name__)

Listener = Callable[..., Any]


class EventCategory(str, Enum):
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    ENTERED_REGION = "enteredRegion"
    MSG = "msg"


Category = Union[EventCategory, str]


def _key(category: Category) -> str:
    if isinstance(category, EventCategory):
        return category.value
    return str(category)


class ListenerRegistry:
    """Ordered per-category listener lists."""

    def __init__(self) -> None:
        self._listeners: Dict[str, List[Listener]] = {
            c.value: [] for c in EventCategory
        }

    def on(self, category: Category, fn: Listener) -> None:
        self._listeners.setdefault(_key(category), []).append(fn)

    def listeners(self, category: Category) -> List[Listener]:
        return list(self._listeners.get(_key(category), ()))

    def has_listeners(self, category: Category) -> bool:
        return bool(self._listeners.get(_key(category)))

    def fire(self, category: Category, *args: Any) -> int:
        """
        Call every listener of `category` with `args`.

        Iterates over a snapshot so listeners may register more listeners.
        Returns the number of listeners that failed.
        """
        key = _key(category)
        failures = 0
        for fn in self.listeners(key):
            try:
                fn(*args)
            except Exception:
                failures += 1
                log.exception("Listener %r for %s failed", fn, key)
        return failures


__all__ = ["EventCategory", "ListenerRegistry", "Listener", "Category"]
