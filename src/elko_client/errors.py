# src/elko_client/errors.py
"""
Domain errors for elko_client.

Only conditions a caller can act on are raised:
    - NotConnectedError: a command was dequeued while the stream is down
    - TransportError: the stream write failed mid-command
    - ConnectionFailedError: connect() could not open the stream
    - RecoveryExhaustedError: ensure_embodied() ran out of polling attempts
    - ConfigError: env.yaml / profile problems

Malformed frames and template misses never raise; they are logged and
degraded (see framing.parse_frame and templating.substitute_state).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class ElkoClientError(RuntimeError):
    """
    Base domain error for the client.

    `code` is a short stable identifier, `details` carries JSON-safe context
    for logs and callers.
    """

    code: str
    details: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, details={self.details!r})"


class NotConnectedError(ElkoClientError):
    def __init__(self, host: str, port: int, op: Any = None) -> None:
        super().__init__(
            code="not_connected",
            details={"host": host, "port": port, "op": op},
        )


class TransportError(ElkoClientError):
    def __init__(self, exc: BaseException, op: Any = None) -> None:
        super().__init__(
            code="transport_error",
            details={"exception": repr(exc), "op": op},
        )


class ConnectionFailedError(ElkoClientError):
    def __init__(self, host: str, port: int, exc: BaseException) -> None:
        super().__init__(
            code="connect_failed",
            details={"host": host, "port": port, "exception": repr(exc)},
        )


class RecoveryExhaustedError(ElkoClientError):
    """Raised when no ghost reference showed up within the polling budget."""

    def __init__(self, attempts: int, poll_interval: float) -> None:
        super().__init__(
            code="recovery_exhausted",
            details={"attempts": attempts, "poll_interval": poll_interval},
        )

    @property
    def attempts(self) -> int:
        return int(self.details["attempts"])


class ConfigError(ElkoClientError):
    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(code="config_error", details={"message": message, **details})
