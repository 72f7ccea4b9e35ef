# rich rendering of session state
# src/elko_client/session_view.py
"""
Terminal view of a SessionState, built with `rich`.

Shows the well-known aliases, the embodiment state and one row per known
object (reference, noid, first modifier type, name). Used by the runtime
when logging.show_session is enabled and by tools/smoke_client.py.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .names import WELL_KNOWN_ALIASES
from .session import SessionState


def _first_mod(obj: Mapping[str, Any]) -> Mapping[str, Any]:
    mods = obj.get("mods")
    if isinstance(mods, list) and mods and isinstance(mods[0], Mapping):
        return mods[0]
    return {}


def build_alias_table(session: SessionState) -> Table:
    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column()
    for alias in WELL_KNOWN_ALIASES:
        table.add_row(alias, session.names.get(alias) or "-")
    return table


def build_objects_table(session: SessionState) -> Table:
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("ref")
    table.add_column("noid", justify="right")
    table.add_column("type")
    table.add_column("name")

    for ref, message in session.history.items():
        obj = message.get("obj")
        if not isinstance(obj, Mapping):
            continue
        mod = _first_mod(obj)
        style = "bold green" if ref == session.me_ref else None
        table.add_row(
            Text(ref, style=style or ""),
            str(mod.get("noid", "")),
            str(mod.get("type", "")),
            str(obj.get("name", "")),
        )
    return table


def render_session(session: SessionState, embodiment: Optional[str] = None) -> Panel:
    header = build_alias_table(session)
    if embodiment is not None:
        header.add_row("state", embodiment)
    body = Group(header, build_objects_table(session))
    title = f"session: {len(session.history)} objects, {len(session.noids)} noids"
    return Panel(body, title=title)


def print_session(
    session: SessionState,
    console: Optional[Console] = None,
    embodiment: Optional[str] = None,
) -> None:
    (console or Console()).print(render_session(session, embodiment))


__all__ = ["render_session", "print_session", "build_objects_table", "build_alias_table"]
