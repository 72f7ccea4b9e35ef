from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

from elko_client.errors import ConfigError

from .schema import (
    ClientProfile,
    ConnectionConfig,
    DispatchSettings,
    LoggingSettings,
    RecoverySettings,
    SessionSettings,
)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

PROJECT_ROOT = Path(__file__).resolve().parents[2]
CONFIG_ROOT = PROJECT_ROOT / "config"

# Overrides the `profile:` key in env.yaml when set.
PROFILE_ENV_VAR = "ELKO_PROFILE"

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def _load_yaml(path: Path) -> Dict[str, Any]:
    """Load a YAML config file, requiring a mapping at the top."""
    if not path.exists():
        raise FileNotFoundError(f"Missing config file: {path}")
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected mapping at top of {path}, got {type(data)}")
    return data


def _select_profile(env_cfg: Dict[str, Any], override: Optional[str]) -> Tuple[str, Dict[str, Any]]:
    """Return (active_profile_name, active_profile_mapping)."""
    profile_name = override or os.getenv(PROFILE_ENV_VAR) or env_cfg.get("profile")
    if not profile_name:
        raise ConfigError("env.yaml must define a 'profile' key.")
    profiles = env_cfg.get("profiles")
    if not isinstance(profiles, dict):
        raise ConfigError("env.yaml must define a 'profiles' mapping.")
    if profile_name not in profiles:
        raise ConfigError(f"Profile '{profile_name}' not found in env.yaml profiles.", profile=profile_name)
    raw = profiles[profile_name] or {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Profile '{profile_name}' must be a mapping.", profile=profile_name)
    return profile_name, raw


def _section(raw: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = raw.get(key) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"Section '{key}' must be a mapping.", section=key)
    return value


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_environment(
    config_root: Optional[Path] = None,
    profile: Optional[str] = None,
) -> ClientProfile:
    """Main entry point: returns a fully resolved ClientProfile."""
    root = config_root or CONFIG_ROOT
    env_cfg = _load_yaml(root / "env.yaml")

    profile_name, raw = _select_profile(env_cfg, profile)

    conn_raw = _section(raw, "connection")
    if "host" not in conn_raw or "port" not in conn_raw:
        raise ConfigError(f"Profile '{profile_name}' connection must provide host and port.")
    try:
        connection = ConnectionConfig(
            host=str(conn_raw["host"]),
            port=int(conn_raw["port"]),
            reconnect=bool(conn_raw.get("reconnect", True)),
            reconnect_delay=float(conn_raw.get("reconnect_delay", 2.0)),
        )
        dispatch_raw = _section(raw, "dispatch")
        dispatch = DispatchSettings(
            default_delay_ms=int(dispatch_raw.get("default_delay_ms", 500)),
        )
        recovery_raw = _section(raw, "recovery")
        recovery = RecoverySettings(
            poll_interval=float(recovery_raw.get("poll_interval", 2.0)),
            max_attempts=int(recovery_raw.get("max_attempts", 5)),
            settle_delay=float(recovery_raw.get("settle_delay", 6.0)),
        )
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid value in profile '{profile_name}': {exc}") from exc

    session_raw = _section(raw, "session")
    session = SessionSettings(
        username=session_raw.get("username"),
        context=session_raw.get("context"),
    )
    logging_raw = _section(raw, "logging")
    log_settings = LoggingSettings(
        level=str(logging_raw.get("level", "INFO")).upper(),
        show_session=bool(logging_raw.get("show_session", False)),
    )

    profile_obj = ClientProfile(
        name=profile_name,
        connection=connection,
        dispatch=dispatch,
        recovery=recovery,
        session=session,
        logging=log_settings,
    )
    _validate_profile(profile_obj)
    return profile_obj


def _validate_profile(profile: ClientProfile) -> None:
    """Minimal sanity checks for the profile."""
    if not 0 < profile.connection.port < 65536:
        raise ConfigError(f"Port out of range: {profile.connection.port}")
    if profile.connection.reconnect_delay < 0:
        raise ConfigError("reconnect_delay must be >= 0")
    if profile.dispatch.default_delay_ms < 0:
        raise ConfigError("default_delay_ms must be >= 0")
    if profile.recovery.max_attempts < 1:
        raise ConfigError("recovery.max_attempts must be >= 1")
    if profile.recovery.poll_interval < 0 or profile.recovery.settle_delay < 0:
        raise ConfigError("recovery delays must be >= 0")
    if profile.logging.level not in LOG_LEVELS:
        raise ConfigError(f"Unknown log level: {profile.logging.level}")


def log_level(profile: ClientProfile) -> int:
    """The profile's log level as a logging module constant."""
    return getattr(logging, profile.logging.level)
