# src/elko_runtime/runtime.py
"""
Runnable Elko client.

Wires an env.yaml profile into an ElkoClient with the standard session
behaviour:
    - on connect: enter the configured context
    - on region entry: make sure the avatar is embodied, optionally render
      the session table

Bot scripts register their own listeners on the returned client before
run() starts the connection.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

from elko_client import ElkoClient, ElkoClientError, EventCategory
from elko_client.session_view import print_session
from elko_env import ClientProfile, load_environment

from .logging_config import configure_logging

log = logging.getLogger(__name__)


def _log_failure(what: str) -> Any:
    def _done(fut: "asyncio.Future[Any]") -> None:
        if fut.cancelled():
            return
        exc = fut.exception()
        if exc is not None:
            log.error("%s failed: %s", what, exc)

    return _done


def create_client(profile: ClientProfile, **kwargs: Any) -> ElkoClient:
    """Build a client for `profile` with the standard listeners attached."""
    client = ElkoClient.from_profile(profile, **kwargs)

    def on_connected(bot: ElkoClient) -> None:
        log.debug("Connected; entering context %s", profile.session.context)
        bot.goto_context().add_done_callback(_log_failure("entercontext"))

    def on_entered_region(bot: ElkoClient, message: Any) -> None:
        log.info("Entered region as %s", bot.session.me_ref)
        if profile.logging.show_session:
            print_session(bot.session, embodiment=bot.embodiment_state.value)
        task = asyncio.get_running_loop().create_task(bot.ensure_embodied())
        task.add_done_callback(_log_failure("ensure_embodied"))

    client.on(EventCategory.CONNECTED, on_connected)
    client.on(EventCategory.ENTERED_REGION, on_entered_region)
    return client


async def run(profile: ClientProfile, client: Optional[ElkoClient] = None) -> None:
    """Connect and keep the session alive until it closes for good."""
    client = client or create_client(profile)
    try:
        await client.run_forever()
    except ElkoClientError as exc:
        log.error("Client stopped: %s", exc)
        raise
    finally:
        await client.disconnect()


def main() -> None:
    profile = load_environment()
    configure_logging(profile.logging.level)
    log.info(
        "Starting Elko client profile=%s server=%s:%d",
        profile.name,
        profile.connection.host,
        profile.connection.port,
    )
    try:
        asyncio.run(run(profile))
    except KeyboardInterrupt:
        log.info("Interrupted; shutting down")


if __name__ == "__main__":
    main()
