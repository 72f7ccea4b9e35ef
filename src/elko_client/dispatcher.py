# src/elko_client/dispatcher.py
"""
Serialized outbound command queue.

The Elko server cannot cope with concurrent requests, so every outbound
command goes through one FIFO queue drained by a single worker task:

    submit() -> [queue] -> resolve "to" -> "$" substitution -> encode
             -> sleep(delay) -> write + drain -> future resolved

Exactly one command is between dequeue and resolution at any time. A
command dequeued while the transport is down is rejected with
NotConnectedError without touching the message or session state, and the
queue moves on. There is no retry here; callers (or the recovery
controller) decide what to do with a rejection.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional

from .errors import ElkoClientError, NotConnectedError, TransportError
from .framing import encode_frame
from .messages import OP_ENTERCONTEXT, Message
from .net import StreamTransport
from .session import SessionState
from .templating import substitute_state

log = logging.getLogger(__name__)

DEFAULT_DELAY_MS = 500

SleepFn = Callable[[float], Awaitable[Any]]
ConnectionFn = Callable[[], Optional[StreamTransport]]


@dataclass
class DispatchConfig:
    """
    default_delay_ms: pacing delay applied when submit() gets no delay.
    default_context:  context filled into "entercontext" commands sent
                      without one.
    """

    default_delay_ms: int = DEFAULT_DELAY_MS
    default_context: Optional[str] = None


@dataclass
class PendingCommand:
    message: Message
    delay_ms: int
    future: "asyncio.Future[None]"

    @property
    def op(self) -> Any:
        return self.message.get("op")


class OutboundDispatcher:
    """Single-in-flight FIFO dispatcher bound to one SessionState."""

    def __init__(
        self,
        session: SessionState,
        connection: ConnectionFn,
        *,
        host: str = "",
        port: int = 0,
        config: Optional[DispatchConfig] = None,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self._session = session
        self._connection = connection
        self._host = host
        self._port = port
        self._config = config or DispatchConfig()
        self._sleep = sleep

        self._queue: Optional["asyncio.Queue[PendingCommand]"] = None
        self._worker: Optional["asyncio.Task[None]"] = None
        self._current: Optional[PendingCommand] = None

    @property
    def config(self) -> DispatchConfig:
        return self._config

    @property
    def pending(self) -> int:
        """Commands waiting in the queue plus the one in flight, if any."""
        queued = self._queue.qsize() if self._queue is not None else 0
        return queued + (1 if self._current is not None else 0)

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def submit(self, message: Message, delay_ms: Optional[int] = None) -> "asyncio.Future[None]":
        """
        Queue `message` for sending and return a future for its outcome.

        Must be called from a running event loop. The message is mutated in
        place when it is processed (name and "$" substitution).
        """
        loop = asyncio.get_running_loop()
        future: "asyncio.Future[None]" = loop.create_future()
        delay = self._config.default_delay_ms if delay_ms is None else int(delay_ms)
        self._ensure_worker().put_nowait(PendingCommand(message, delay, future))
        return future

    def _ensure_worker(self) -> "asyncio.Queue[PendingCommand]":
        if self._queue is None:
            self._queue = asyncio.Queue()
        if self._worker is None or self._worker.done():
            self._worker = asyncio.get_running_loop().create_task(self._drain(self._queue))
        return self._queue

    # ------------------------------------------------------------------
    # Worker
    # ------------------------------------------------------------------

    async def _drain(self, queue: "asyncio.Queue[PendingCommand]") -> None:
        while True:
            cmd = await queue.get()
            self._current = cmd
            try:
                await self._process(cmd)
            except asyncio.CancelledError:
                self._reject(cmd, NotConnectedError(self._host, self._port, cmd.op))
                raise
            except Exception as exc:
                log.exception("Dispatcher failed processing op=%s", cmd.op)
                self._reject(cmd, ElkoClientError(code="dispatch_failed", details={"exception": repr(exc)}))
            finally:
                self._current = None
                queue.task_done()

    async def _process(self, cmd: PendingCommand) -> None:
        transport = self._connection()
        if transport is None or not transport.connected:
            log.error(
                "Not connected to %s:%s, rejecting op=%s", self._host, self._port, cmd.op
            )
            self._reject(cmd, NotConnectedError(self._host, self._port, cmd.op))
            return

        msg = cmd.message
        to = msg.get("to")
        if isinstance(to, str):
            msg["to"] = self._session.substitute_name(to)
        if (
            msg.get("op") == OP_ENTERCONTEXT
            and msg.get("context") is None
            and self._config.default_context
        ):
            msg["context"] = self._config.default_context
        substitute_state(msg, self._session)

        try:
            data = encode_frame(msg)
        except (TypeError, ValueError) as exc:
            self._reject(cmd, ElkoClientError(code="encode_failed", details={"exception": repr(exc), "op": cmd.op}))
            return

        if cmd.delay_ms > 0:
            await self._sleep(cmd.delay_ms / 1000.0)

        log.debug("%s:%s->: %s", self._host, self._port, data.decode("utf-8").strip())
        try:
            await transport.write(data)
        except (ConnectionError, OSError) as exc:
            log.error("Write to %s:%s failed for op=%s: %r", self._host, self._port, cmd.op, exc)
            self._reject(cmd, TransportError(exc, cmd.op))
            return

        if not cmd.future.done():
            cmd.future.set_result(None)

    @staticmethod
    def _reject(cmd: PendingCommand, exc: BaseException) -> None:
        if not cmd.future.done():
            cmd.future.set_exception(exc)

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    async def close(self) -> None:
        """Stop the worker and reject everything still queued."""
        worker = self._worker
        self._worker = None
        if worker is not None and not worker.done():
            worker.cancel()
            try:
                await worker
            except asyncio.CancelledError:
                pass
        if self._queue is not None:
            while not self._queue.empty():
                cmd = self._queue.get_nowait()
                self._reject(cmd, NotConnectedError(self._host, self._port, cmd.op))
                self._queue.task_done()


__all__ = [
    "OutboundDispatcher",
    "DispatchConfig",
    "PendingCommand",
    "DEFAULT_DELAY_MS",
]
