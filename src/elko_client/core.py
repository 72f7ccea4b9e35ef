# src/elko_client/core.py
"""
ElkoClient: one persistent connection, one controlled avatar.

This module wires together:
- StreamTransport (asyncio TCP by default)
- FrameDecoder (inbound framing)
- SessionState (names, history, noid index)
- ListenerRegistry (lifecycle / op / msg callbacks)
- OutboundDispatcher (single-in-flight command queue)
- RecoveryController (ghost -> embodied)

Public surface (for bot scripts and bridges):
    class ElkoClient:
        connect() / disconnect() / wait_closed() / run_forever()
        on(category, fn)
        send(msg) / send_with_delay(msg, delay_ms) -> awaitable
        substitute_name(), get_avatar(), get_avatar_noid(), get_noid(),
        get_mod(), get_object(), is_ghosted(), embodiment_state
        ensure_embodied()
        corporate(), discorporate(), goto_context(), say(), walk_to(),
        do_posture()

Design constraints:
- Session state is mutated only while handling inbound frames.
- All inbound processing and listener calls happen on the event loop
  thread, synchronously, in arrival order.
- A failed command is reported to its caller; it never tears down the
  connection. Connection loss never fails the process; with reconnect
  enabled the client dials again on its own.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Mapping, Optional

from . import commands
from .dispatcher import DispatchConfig, OutboundDispatcher
from .errors import ConnectionFailedError
from .events import Category, EventCategory, Listener, ListenerRegistry
from .framing import FrameDecoder, parse_frame
from .messages import Message
from .net import StreamTransport, TransportFactory, create_tcp_transport
from .recovery import EmbodimentState, RecoveryConfig, RecoveryController, SleepFn
from .session import SessionState

log = logging.getLogger(__name__)

DEFAULT_RECONNECT_DELAY = 2.0


class ElkoClient:
    """
    Asyncio client for an Elko server.

    Construction does no I/O; call `await connect()` from a running loop.
    """

    def __init__(
        self,
        host: str,
        port: int,
        *,
        username: Optional[str] = None,
        reconnect: bool = False,
        reconnect_delay: float = DEFAULT_RECONNECT_DELAY,
        dispatch: Optional[DispatchConfig] = None,
        recovery: Optional[RecoveryConfig] = None,
        transport_factory: TransportFactory = create_tcp_transport,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self.host = host
        self.port = int(port)
        self.username = username
        self.reconnect = reconnect
        self.reconnect_delay = reconnect_delay

        self.session = SessionState()

        self._events = ListenerRegistry()
        self._decoder = FrameDecoder()
        self._transport_factory = transport_factory
        self._transport: Optional[StreamTransport] = None
        self._connected = False
        self._closing = False
        self._sleep = sleep

        self._dispatcher = OutboundDispatcher(
            self.session,
            self._live_transport,
            host=self.host,
            port=self.port,
            config=dispatch,
            sleep=sleep,
        )
        self._recovery = RecoveryController(
            self.session,
            self.send,
            config=recovery,
            sleep=sleep,
        )

        self._read_task: Optional["asyncio.Task[None]"] = None
        self._reconnect_task: Optional["asyncio.Task[None]"] = None
        self._closed = asyncio.Event()

    @classmethod
    def from_profile(cls, profile: Any, **kwargs: Any) -> "ElkoClient":
        """Build a client from an elko_env ClientProfile."""
        conn = profile.connection
        return cls(
            conn.host,
            conn.port,
            username=profile.session.username,
            reconnect=conn.reconnect,
            reconnect_delay=conn.reconnect_delay,
            dispatch=DispatchConfig(
                default_delay_ms=profile.dispatch.default_delay_ms,
                default_context=profile.session.context,
            ),
            recovery=RecoveryConfig(
                poll_interval=profile.recovery.poll_interval,
                max_attempts=profile.recovery.max_attempts,
                settle_delay=profile.recovery.settle_delay,
            ),
            **kwargs,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def connected(self) -> bool:
        return self._connected

    def _live_transport(self) -> Optional[StreamTransport]:
        return self._transport if self._connected else None

    async def connect(self) -> None:
        """
        Open the stream, fire `connected` listeners and start reading.

        Raises:
            ConnectionFailedError if the transport cannot be opened.
        """
        if self._connected:
            return

        self._closing = False
        self._closed.clear()
        transport = self._transport_factory(self.host, self.port)
        try:
            await transport.open()
        except OSError as exc:
            log.error("Unable to connect to %s:%d: %r", self.host, self.port, exc)
            raise ConnectionFailedError(self.host, self.port, exc) from exc

        self._transport = transport
        self._decoder = FrameDecoder()
        self._connected = True
        log.info("Connected to server @%s:%d", self.host, self.port)

        self._events.fire(EventCategory.CONNECTED, self)
        self._read_task = asyncio.get_running_loop().create_task(self._read_loop(transport))

    async def disconnect(self) -> None:
        """Close the connection for good (no automatic reconnect)."""
        self._closing = True

        reconnect_task = self._reconnect_task
        self._reconnect_task = None
        if reconnect_task is not None and reconnect_task is not asyncio.current_task():
            reconnect_task.cancel()

        read_task = self._read_task
        self._read_task = None
        if read_task is not None and read_task is not asyncio.current_task():
            read_task.cancel()

        transport = self._transport
        was_connected = self._connected
        self._transport = None
        self._connected = False
        if transport is not None:
            await transport.close()
        if was_connected:
            log.info("Disconnected from server @%s:%d", self.host, self.port)
            self._events.fire(EventCategory.DISCONNECTED, self)

        await self._dispatcher.close()
        self._closed.set()

    async def wait_closed(self) -> None:
        """Wait until the client is closed and not going to reconnect."""
        await self._closed.wait()

    async def run_forever(self) -> None:
        await self.connect()
        await self.wait_closed()

    async def _read_loop(self, transport: StreamTransport) -> None:
        while True:
            chunk = await transport.read()
            if not chunk:
                break
            self.process_data(chunk)

        tail = self._decoder.flush()
        if tail is not None:
            self._process_frame(tail)
        await self._on_stream_end(transport)

    async def _on_stream_end(self, transport: StreamTransport) -> None:
        if self._transport is not transport:
            return
        self._connected = False
        self._transport = None
        self._read_task = None
        await transport.close()

        log.info("Disconnected from server @%s:%d...", self.host, self.port)
        self._events.fire(EventCategory.DISCONNECTED, self)

        if self.reconnect and not self._closing:
            self._reconnect_task = asyncio.get_running_loop().create_task(self._reconnect_loop())
        else:
            self._closed.set()

    async def _reconnect_loop(self) -> None:
        while not self._closing and not self._connected:
            try:
                await self.connect()
                return
            except ConnectionFailedError:
                log.warning(
                    "Reconnect to %s:%d failed; retrying in %.1fs",
                    self.host,
                    self.port,
                    self.reconnect_delay,
                )
                await self._sleep(self.reconnect_delay)

    # ------------------------------------------------------------------
    # Inbound
    # ------------------------------------------------------------------

    def process_data(self, chunk: bytes) -> None:
        """Feed raw inbound bytes; each completed frame is handled in order."""
        for text in self._decoder.feed(chunk):
            self._process_frame(text)

    def _process_frame(self, text: str) -> None:
        log.debug("<-%s:%s: %s", self.host, self.port, text.strip())
        message = parse_frame(text)
        if not message:
            return

        result = self.session.scan(message)
        if result.entered_region:
            log.debug("Running callbacks for enteredRegion")
            self._events.fire(EventCategory.ENTERED_REGION, self, message)

        op = message.get("op")
        if isinstance(op, str) and op and self._events.has_listeners(op):
            log.debug("Running callbacks for op: %s", op)
            self._events.fire(op, self, message)

        self._events.fire(EventCategory.MSG, self, message)

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def on(self, category: Category, fn: Listener) -> None:
        self._events.on(category, fn)

    # ------------------------------------------------------------------
    # Outbound
    # ------------------------------------------------------------------

    def send(self, message: Message) -> "asyncio.Future[None]":
        """Queue a command with the default pacing delay."""
        return self._dispatcher.submit(message)

    def send_with_delay(self, message: Message, delay_ms: int) -> "asyncio.Future[None]":
        return self._dispatcher.submit(message, delay_ms)

    def corporate(self) -> "asyncio.Future[None]":
        return self.send(commands.corporate())

    def discorporate(self) -> "asyncio.Future[None]":
        return self.send(commands.discorporate())

    def goto_context(self, context: Optional[str] = None) -> "asyncio.Future[None]":
        user = f"user-{self.username}" if self.username else None
        return self.send(commands.enter_context(user=user, context=context))

    def say(self, text: str, esp: int = 0) -> "asyncio.Future[None]":
        return self.send(commands.speak(text, esp=esp))

    def walk_to(self, x: Any, y: Any, how: int = 0) -> "asyncio.Future[None]":
        return self.send(commands.walk(x, y, how=how))

    def do_posture(self, pose: int) -> "asyncio.Future[None]":
        return self.send(commands.posture(pose))

    # ------------------------------------------------------------------
    # Session lookups
    # ------------------------------------------------------------------

    def substitute_name(self, name: str) -> str:
        return self.session.substitute_name(name)

    def get_avatar(self) -> Optional[Mapping[str, Any]]:
        return self.session.get_avatar()

    def get_avatar_noid(self) -> Any:
        return self.session.get_avatar_noid()

    def get_noid(self, noid: Any) -> Optional[Mapping[str, Any]]:
        return self.session.get_noid(noid)

    def get_mod(self, noid: Any) -> Optional[Mapping[str, Any]]:
        return self.session.get_mod(noid)

    def get_object(self, name: str) -> Optional[Mapping[str, Any]]:
        return self.session.get_object(name)

    def is_ghosted(self) -> bool:
        return self.session.is_ghosted()

    # ------------------------------------------------------------------
    # Embodiment
    # ------------------------------------------------------------------

    @property
    def embodiment_state(self) -> EmbodimentState:
        return self._recovery.state

    async def ensure_embodied(self) -> None:
        await self._recovery.ensure_embodied()


__all__ = ["ElkoClient", "DEFAULT_RECONNECT_DELAY"]
