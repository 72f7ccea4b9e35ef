# src/elko_env/__init__.py
"""YAML environment profiles (config/env.yaml) for the Elko client."""

from .loader import load_environment, log_level
from .schema import ClientProfile

__all__ = ["load_environment", "log_level", "ClientProfile"]
