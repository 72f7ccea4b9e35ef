# src/elko_runtime/logging_config.py
"""
Logging setup for Elko client runtimes.

At DEBUG every inbound ("<-host:port: ...") and outbound
("host:port->: ...") frame is logged, which is very chatty on a busy
region; INFO keeps connection lifecycle and recovery only.
"""

from __future__ import annotations

import logging
import sys
from typing import Union

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: Union[int, str] = logging.INFO) -> None:
    """
    Attach a stdout handler to the root logger unless one exists already.

    `level` may be a logging constant or a level name from env.yaml
    ("DEBUG", "info", ...).
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    if root.handlers:
        root.setLevel(level)
        return

    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT))
    root.addHandler(handler)
    root.setLevel(level)

    # asyncio's own debug output drowns out frame logs.
    logging.getLogger("asyncio").setLevel(max(level, logging.INFO))
