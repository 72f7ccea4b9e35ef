# src/elko_runtime/__init__.py
"""
Application entrypoints for the Elko client.

Exposes:
- create_client: ElkoClient from an env.yaml profile, standard listeners attached
- run: connect and keep the session alive
- main: load the active profile, configure logging, run
"""

from __future__ import annotations

from .runtime import create_client, main, run

__all__ = [
    "create_client",
    "run",
    "main",
]
