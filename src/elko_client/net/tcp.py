# asyncio TCP stream for the Elko server
# src/elko_client/net/tcp.py
"""
TCP transport built on asyncio streams.

Framing is not done here; read() hands raw chunks to the client, which
owns the FrameDecoder.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

log = logging.getLogger(__name__)

READ_CHUNK_SIZE = 4096


@dataclass
class TcpConfig:
    host: str
    port: int
    read_chunk_size: int = READ_CHUNK_SIZE


class TcpTransport:
    """StreamTransport over asyncio.open_connection()."""

    def __init__(self, host: str, port: int, read_chunk_size: int = READ_CHUNK_SIZE) -> None:
        self._config = TcpConfig(host=host, port=int(port), read_chunk_size=read_chunk_size)
        self._reader: Optional[asyncio.StreamReader] = None
        self._writer: Optional[asyncio.StreamWriter] = None
        self._connected = False

    @property
    def connected(self) -> bool:
        return self._connected

    async def open(self) -> None:
        if self._connected:
            return
        log.debug("TcpTransport opening %s:%d", self._config.host, self._config.port)
        self._reader, self._writer = await asyncio.open_connection(
            self._config.host, self._config.port
        )
        self._connected = True

    async def read(self) -> bytes:
        if self._reader is None:
            return b""
        try:
            chunk = await self._reader.read(self._config.read_chunk_size)
        except (ConnectionError, OSError):
            log.exception("TcpTransport read failed; treating as EOF")
            chunk = b""
        if not chunk:
            self._connected = False
        return chunk

    async def write(self, data: bytes) -> None:
        if self._writer is None or not self._connected:
            raise ConnectionError("TcpTransport is not connected")
        self._writer.write(data)
        await self._writer.drain()

    async def close(self) -> None:
        writer = self._writer
        self._connected = False
        self._reader = None
        self._writer = None
        if writer is None:
            return
        writer.close()
        try:
            await writer.wait_closed()
        except (ConnectionError, OSError):
            log.debug("TcpTransport close raised; ignoring", exc_info=True)
