#!/usr/bin/env python3
"""
tools/smoke_client.py

Minimal harness to sanity-check ElkoClient wiring.

Default mode:
    - Uses FakeTransport (no real network)
    - Feeds a few synthetic server frames (avatar, ghost, an item)
    - Calls:
        - goto_context()
        - say() with a "$ME.noid" template
        - ensure_embodied()
    - Prints the session table and the frames the client wrote

Real mode:
    - Connects to the server from the active env.yaml profile and stays
      up until interrupted.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# ---------------------------------------------------------------------------
# Ensure src/ is on sys.path when running as a script
# ---------------------------------------------------------------------------

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

# ---------------------------------------------------------------------------
# Imports from the project
# ---------------------------------------------------------------------------

from elko_client import ElkoClient, ElkoClientError  # type: ignore[import]
from elko_client.session_view import print_session  # type: ignore[import]
from elko_client.testing.fakes import (  # type: ignore[import]
    FakeClock,
    FakeTransportFactory,
    make_message,
)
from elko_env import load_environment  # type: ignore[import]
from elko_runtime import run  # type: ignore[import]
from elko_runtime.logging_config import configure_logging  # type: ignore[import]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _print_header(title: str) -> None:
    print("\n" + "=" * 80)
    print(title)
    print("=" * 80)


async def _settle(rounds: int = 20) -> None:
    for _ in range(rounds):
        await asyncio.sleep(0)


async def run_fake_mode() -> None:
    """
    Run a pure in-memory smoke test with FakeTransport.

    This does NOT require a running Elko server.
    """
    _print_header("Fake mode: initializing ElkoClient with FakeTransport")

    factory = FakeTransportFactory()
    clock = FakeClock()
    client = ElkoClient("fake", 1337, username="phil", transport_factory=factory, sleep=clock.sleep)
    client.on("msg", lambda bot, m: print(f"  <- {m.get('op')} to={m.get('to')}"))

    await client.connect()
    transport = factory.last

    await client.goto_context("context-Downtown_5f")

    _print_header("Inbound frames")
    transport.push_message(make_message("ghost-phil-9", 250, "Ghost"))
    transport.push_message(make_message("user-phil-1", 3, you=True, name="phil", amAGhost=True, x=84, y=130))
    transport.push_message(make_message("item-rock-77", 12, "Rock", name="Rock"))
    await _settle()

    _print_header("Session")
    print_session(client.session, embodiment=client.embodiment_state.value)

    _print_header("Commands")
    await client.ensure_embodied()
    await client.say("Hello from noid $ME.noid")
    await client.walk_to("$ME.x", 131)

    print("\nSent frames:")
    for m in transport.sent_messages:
        print(f"  -> {m}")
    print(f"\nSimulated sleeps: {clock.sleeps}")

    await client.disconnect()
    _print_header("Fake mode completed")


async def run_real_mode() -> None:
    """Connect with the active env.yaml profile until interrupted."""
    profile = load_environment()
    _print_header(f"Real mode: {profile.connection.host}:{profile.connection.port}")
    try:
        await run(profile)
    except ElkoClientError as exc:
        print("client stopped:", repr(exc))


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        description="Smoke test harness for elko_client ElkoClient",
    )
    parser.add_argument(
        "--mode",
        choices=["fake", "real"],
        default="fake",
        help="Run in 'fake' (no network) or 'real' (env.yaml profile) mode",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )

    args = parser.parse_args(argv)
    configure_logging(args.log_level.upper())

    try:
        if args.mode == "fake":
            asyncio.run(run_fake_mode())
        else:
            asyncio.run(run_real_mode())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
