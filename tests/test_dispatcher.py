# tests/test_dispatcher.py
"""
Tests for OutboundDispatcher.

Covers:
- FIFO order and single in-flight write
- name + "$" substitution before the write
- default / explicit delay
- rejection while disconnected (no mutation, queue keeps going)
- write failures
- default context for entercontext
"""

from __future__ import annotations

import asyncio
import copy
from typing import List, Optional

import pytest

from elko_client.dispatcher import DispatchConfig, OutboundDispatcher
from elko_client.errors import NotConnectedError, TransportError
from elko_client.session import SessionState
from elko_client.testing.fakes import FakeClock, FakeTransport, make_message


class SlowTransport(FakeTransport):
    """FakeTransport whose writes take a few loop iterations."""

    def __init__(self) -> None:
        super().__init__()
        self.in_flight = 0
        self.max_in_flight = 0

    async def write(self, data: bytes) -> None:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        for _ in range(3):
            await asyncio.sleep(0)
        try:
            await super().write(data)
        finally:
            self.in_flight -= 1


def _dispatcher(
    transport: Optional[FakeTransport],
    session: Optional[SessionState] = None,
    clock: Optional[FakeClock] = None,
    config: Optional[DispatchConfig] = None,
) -> OutboundDispatcher:
    return OutboundDispatcher(
        session or SessionState(),
        lambda: transport,
        host="test",
        port=1337,
        config=config,
        sleep=(clock or FakeClock()).sleep,
    )


def test_commands_are_written_in_submission_order_one_at_a_time() -> None:
    async def scenario() -> None:
        transport = SlowTransport()
        await transport.open()
        dispatcher = _dispatcher(transport)

        completed: List[int] = []
        futures = []
        for i in range(6):
            fut = dispatcher.submit({"op": "SPEAK", "seq": i})
            fut.add_done_callback(lambda _f, i=i: completed.append(i))
            futures.append(fut)

        await asyncio.gather(*futures)

        assert [m["seq"] for m in transport.sent_messages] == list(range(6))
        assert completed == list(range(6))
        assert transport.max_in_flight == 1
        assert dispatcher.pending == 0
        await dispatcher.close()

    asyncio.run(scenario())


def test_write_happens_only_after_previous_command_resolves() -> None:
    async def scenario() -> None:
        transport = FakeTransport()
        await transport.open()
        dispatcher = _dispatcher(transport)

        first = dispatcher.submit({"op": "A"})
        observed = []

        original_write = transport.write

        async def checking_write(data: bytes) -> None:
            observed.append((data, first.done()))
            await original_write(data)

        transport.write = checking_write  # type: ignore[method-assign]
        second = dispatcher.submit({"op": "B"})
        await asyncio.gather(first, second)

        assert observed[0][1] is False
        assert observed[1][1] is True
        await dispatcher.close()

    asyncio.run(scenario())


def test_default_and_explicit_delays_are_applied() -> None:
    async def scenario() -> None:
        transport = FakeTransport()
        await transport.open()
        clock = FakeClock()
        dispatcher = _dispatcher(transport, clock=clock)

        await dispatcher.submit({"op": "A"})
        await dispatcher.submit({"op": "B"}, 2000)
        await dispatcher.submit({"op": "C"}, 0)

        assert clock.sleeps == [0.5, 2.0]
        await dispatcher.close()

    asyncio.run(scenario())


def test_to_and_templates_are_resolved_before_write() -> None:
    async def scenario() -> None:
        transport = FakeTransport()
        await transport.open()
        session = SessionState()
        session.scan(make_message("user-randy-1", 7, you=True, x=84))
        dispatcher = _dispatcher(transport, session=session)

        msg = {"op": "WALK", "to": "ME", "x": "$ME.x", "text": "noid=$ME.noid"}
        await dispatcher.submit(msg)

        assert transport.sent_messages == [
            {"op": "WALK", "to": "user-randy-1", "x": 84, "text": "noid=7"}
        ]
        await dispatcher.close()

    asyncio.run(scenario())


def test_disconnected_submission_rejects_without_side_effects() -> None:
    async def scenario() -> None:
        transport = FakeTransport()  # never opened
        session = SessionState()
        session.scan(make_message("user-randy-1", 7, you=True, x=84))
        before_history = copy.deepcopy(session.history)
        before_names = dict((k, session.names[k]) for k in session.names)
        before_noids = copy.deepcopy(session.noids)
        dispatcher = _dispatcher(transport, session=session)

        msg = {"op": "WALK", "to": "ME", "x": "$ME.x"}
        with pytest.raises(NotConnectedError):
            await dispatcher.submit(msg)

        assert msg == {"op": "WALK", "to": "ME", "x": "$ME.x"}
        assert session.history == before_history
        assert dict((k, session.names[k]) for k in session.names) == before_names
        assert session.noids == before_noids
        assert transport.written == []

        # The queue keeps working once the link is up.
        await transport.open()
        await dispatcher.submit({"op": "SPEAK", "text": "back"})
        assert transport.sent_messages == [{"op": "SPEAK", "text": "back"}]
        await dispatcher.close()

    asyncio.run(scenario())


def test_no_transport_at_all_rejects() -> None:
    async def scenario() -> None:
        dispatcher = _dispatcher(None)
        with pytest.raises(NotConnectedError) as excinfo:
            await dispatcher.submit({"op": "SPEAK"})
        assert excinfo.value.code == "not_connected"
        await dispatcher.close()

    asyncio.run(scenario())


def test_write_failure_rejects_that_command_only() -> None:
    async def scenario() -> None:
        transport = FakeTransport()
        await transport.open()
        dispatcher = _dispatcher(transport)

        transport.fail_write = True
        failing = dispatcher.submit({"op": "A"})
        with pytest.raises(TransportError):
            await failing

        transport.fail_write = False
        await dispatcher.submit({"op": "B"})
        assert transport.sent_messages == [{"op": "B"}]
        await dispatcher.close()

    asyncio.run(scenario())


def test_entercontext_gets_default_context() -> None:
    async def scenario() -> None:
        transport = FakeTransport()
        await transport.open()
        dispatcher = _dispatcher(
            transport, config=DispatchConfig(default_delay_ms=0, default_context="context-Downtown_5f")
        )

        await dispatcher.submit({"op": "entercontext", "to": "session"})
        await dispatcher.submit({"op": "entercontext", "to": "session", "context": "context-Other"})

        sent = transport.sent_messages
        assert sent[0]["context"] == "context-Downtown_5f"
        assert sent[1]["context"] == "context-Other"
        await dispatcher.close()

    asyncio.run(scenario())


def test_close_rejects_queued_commands() -> None:
    async def scenario() -> None:
        transport = SlowTransport()
        await transport.open()
        dispatcher = _dispatcher(transport)

        futures = [dispatcher.submit({"op": "A", "seq": i}) for i in range(3)]
        await asyncio.sleep(0)
        await dispatcher.close()

        results = await asyncio.gather(*futures, return_exceptions=True)
        assert all(isinstance(r, NotConnectedError) for r in results if r is not None)
        assert any(isinstance(r, NotConnectedError) for r in results)

    asyncio.run(scenario())


def test_worker_restarts_on_the_same_queue_after_close() -> None:
    async def scenario() -> None:
        transport = FakeTransport()
        await transport.open()
        dispatcher = _dispatcher(transport, config=DispatchConfig(default_delay_ms=0))

        await dispatcher.submit({"op": "A"})
        await dispatcher.close()
        await dispatcher.submit({"op": "B"})

        assert [m["op"] for m in transport.sent_messages] == ["A", "B"]
        assert dispatcher.pending == 0
        await dispatcher.close()

    asyncio.run(scenario())
