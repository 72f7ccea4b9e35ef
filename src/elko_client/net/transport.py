# stream transport interface for the Elko client
# src/elko_client/net/transport.py
"""
Transport abstraction for elko_client.

Defines the StreamTransport protocol the client talks to, plus a factory
that builds the default asyncio TCP implementation.
"""

from __future__ import annotations

from typing import Callable, Protocol


class StreamTransport(Protocol):
    """
    Byte-stream connection to an Elko server.

    Implementations:
    - TcpTransport (asyncio streams)
    - testing.fakes.FakeTransport (in-memory)
    """

    @property
    def connected(self) -> bool:
        """True between a successful open() and EOF / close()."""
        ...

    async def open(self) -> None:
        """Establish the stream. Raises OSError on failure."""
        ...

    async def read(self) -> bytes:
        """Wait for the next chunk of inbound bytes; b"" means EOF."""
        ...

    async def write(self, data: bytes) -> None:
        """
        Write `data` and wait until the transport has accepted it.

        Only returns once the bytes are flushed to the OS (drain), which is
        what the dispatcher treats as the write acknowledgement.
        """
        ...

    async def close(self) -> None:
        """Close the stream. Safe to call more than once."""
        ...


TransportFactory = Callable[[str, int], StreamTransport]


def create_tcp_transport(host: str, port: int) -> StreamTransport:
    """Default factory: a fresh TcpTransport per connection attempt."""
    # Lazy import keeps this module free of asyncio stream details.
    from .tcp import TcpTransport

    return TcpTransport(host, port)
