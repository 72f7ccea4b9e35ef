# elko_client package
# src/elko_client/__init__.py
"""
elko_client package.

Exports:
    - ElkoClient: persistent Elko protocol client (one connection, one avatar)
    - EventCategory: lifecycle / catch-all listener categories
    - ElkoClientError and its subclasses
"""

from __future__ import annotations

from .core import ElkoClient
from .dispatcher import DispatchConfig
from .errors import (
    ConfigError,
    ConnectionFailedError,
    ElkoClientError,
    NotConnectedError,
    RecoveryExhaustedError,
    TransportError,
)
from .events import EventCategory
from .recovery import EmbodimentState, RecoveryConfig

__all__ = [
    "ElkoClient",
    "EventCategory",
    "DispatchConfig",
    "RecoveryConfig",
    "EmbodimentState",
    "ElkoClientError",
    "NotConnectedError",
    "TransportError",
    "ConnectionFailedError",
    "RecoveryExhaustedError",
    "ConfigError",
]
