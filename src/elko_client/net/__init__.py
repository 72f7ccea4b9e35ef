# elko_client.net package
# src/elko_client/net/__init__.py
"""
Network layer for elko_client.

This package provides:
- StreamTransport protocol (common interface)
- TcpTransport: asyncio TCP implementation
- create_tcp_transport: default factory used by ElkoClient
"""

from __future__ import annotations

from .transport import StreamTransport, TransportFactory, create_tcp_transport
from .tcp import TcpTransport

__all__ = [
    "StreamTransport",
    "TransportFactory",
    "TcpTransport",
    "create_tcp_transport",
]
