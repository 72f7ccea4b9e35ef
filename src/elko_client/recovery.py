# src/elko_client/recovery.py
"""
Embodiment recovery for the controlled avatar.

The server flips the avatar into its ghost (disembodied) form before it
announces the ghost object, so a CORPORATE sent right away would address
a reference that does not exist yet. ensure_embodied() therefore polls for
the GHOST alias a bounded number of times before giving up.

States:
    EMBODIED                    avatar has a full presence (or is unknown)
    DISEMBODIED_AWAITING_GHOST  avatar is a ghost, no ghost ref seen yet
    DISEMBODIED_READY           avatar is a ghost and the ghost ref is known
    RECOVERING                  a CORPORATE is being sent / settling
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from .errors import RecoveryExhaustedError
from .messages import OP_CORPORATE, Message
from .session import SessionState

log = logging.getLogger(__name__)

SleepFn = Callable[[float], Awaitable[Any]]
SendFn = Callable[[Message], Awaitable[Any]]


class EmbodimentState(str, Enum):
    EMBODIED = "embodied"
    DISEMBODIED_AWAITING_GHOST = "disembodied_awaiting_ghost"
    DISEMBODIED_READY = "disembodied_ready"
    RECOVERING = "recovering"


@dataclass
class RecoveryConfig:
    """
    poll_interval: seconds between checks for the ghost reference.
    max_attempts:  number of checks before giving up.
    settle_delay:  seconds to wait after CORPORATE so clients can load
                   the avatar's imagery.
    """

    poll_interval: float = 2.0
    max_attempts: int = 5
    settle_delay: float = 6.0


class RecoveryController:
    """Bounded-retry state machine restoring the avatar to embodied form."""

    def __init__(
        self,
        session: SessionState,
        send: SendFn,
        *,
        config: Optional[RecoveryConfig] = None,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self._session = session
        self._send = send
        self._config = config or RecoveryConfig()
        self._sleep = sleep
        self._recovering = False

    @property
    def config(self) -> RecoveryConfig:
        return self._config

    @property
    def state(self) -> EmbodimentState:
        if self._recovering:
            return EmbodimentState.RECOVERING
        if not self._session.is_ghosted():
            return EmbodimentState.EMBODIED
        if self._session.ghost_ref is None:
            return EmbodimentState.DISEMBODIED_AWAITING_GHOST
        return EmbodimentState.DISEMBODIED_READY

    async def ensure_embodied(self) -> None:
        """
        Return once the avatar is embodied.

        Raises RecoveryExhaustedError when no ghost reference shows up within
        max_attempts polls, and propagates a rejection of the CORPORATE
        command itself.
        """
        if not self._session.is_ghosted():
            return

        cfg = self._config
        attempts = 0
        while self._session.ghost_ref is None:
            if attempts >= cfg.max_attempts:
                log.error(
                    "No ghost reference after %d attempts; giving up on embodiment",
                    attempts,
                )
                raise RecoveryExhaustedError(attempts, cfg.poll_interval)
            attempts += 1
            log.debug(
                "Avatar is ghosted but GHOST is unknown; attempt %d/%d, waiting %.1fs",
                attempts,
                cfg.max_attempts,
                cfg.poll_interval,
            )
            await self._sleep(cfg.poll_interval)

        ghost = self._session.ghost_ref
        log.info("Corporating avatar via %s", ghost)
        self._recovering = True
        try:
            await self._send({"op": OP_CORPORATE, "to": ghost})
            await self._sleep(cfg.settle_delay)
        finally:
            self._recovering = False


__all__ = ["RecoveryController", "RecoveryConfig", "EmbodimentState"]
