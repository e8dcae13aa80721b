"""
Shared CLI plumbing — open the session for a command.

Each command runs in its own process, so the session is opened from
disk on entry and written back on exit (``with open_session(ctx) as s``).
"""

from __future__ import annotations

import sys

import click

from src.core.config.loader import ConfigError
from src.core.context import SessionContext


def open_session(ctx: click.Context) -> SessionContext:
    """Open the workspace named by ``--config`` (or found from cwd)."""
    try:
        return SessionContext.open(config_path=ctx.obj.get("config_path"))
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)
