# ClientProfile and section dataclasses
# src/elko_env/schema.py

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class ConnectionConfig:
    """Where the Elko server lives and what to do when the stream ends."""
    host: str
    port: int
    reconnect: bool = True
    reconnect_delay: float = 2.0   # seconds between failed reconnect attempts


@dataclass
class DispatchSettings:
    """Outbound pacing."""
    default_delay_ms: int = 500


@dataclass
class RecoverySettings:
    """Ghost -> embodied polling budget."""
    poll_interval: float = 2.0
    max_attempts: int = 5
    settle_delay: float = 6.0


@dataclass
class SessionSettings:
    """Who the bot is and where it goes after connecting."""
    username: Optional[str] = None
    context: Optional[str] = None


@dataclass
class LoggingSettings:
    level: str = "INFO"
    show_session: bool = False     # render the session table on region entry


@dataclass
class ClientProfile:
    """Resolved configuration for one active profile."""
    name: str
    connection: ConnectionConfig
    dispatch: DispatchSettings = field(default_factory=DispatchSettings)
    recovery: RecoverySettings = field(default_factory=RecoverySettings)
    session: SessionSettings = field(default_factory=SessionSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
