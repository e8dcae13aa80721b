"""
AI Tools Directory — CLI entrypoint.

Usage:
    python -m src.main --help
    python -m src.main status
    python -m src.main catalog list --group online
    python -m src.main remote sync
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from src import __version__
from src.core.observability.logging_config import setup_logging
from src.ui.cli.session import open_session


@click.group()
@click.version_option(version=__version__, prog_name="toolsdir")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to directory.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """AI Tools Directory — edit the catalog and publish it to GitHub."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    # ── Logging setup (once, at process start) ──────────────────
    if debug:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    elif quiet:
        level = "ERROR"
    else:
        level = os.environ.get("TOOLSDIR_LOG_LEVEL", "WARNING")

    setup_logging(
        level=level,
        log_file=os.environ.get("TOOLSDIR_LOG_FILE"),
        log_file_level=os.environ.get("TOOLSDIR_LOG_FILE_LEVEL"),
        quiet_third_party=not debug,
    )


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def status(ctx: click.Context, as_json: bool) -> None:
    """Show repository, sync and catalog status."""
    from src.core.use_cases.status import get_status

    with open_session(ctx) as session:
        result = get_status(session)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        return

    if not ctx.obj.get("quiet", False):
        click.secho(f"\n📋 {result.name}", fg="cyan", bold=True)
        click.echo(f"   {result.root}")
        click.echo()

    remote = result.remote
    if result.connected:
        click.secho("   GitHub: ", fg="white", bold=True, nl=False)
        click.secho(f"{remote['owner']}/{remote['repo']}", fg="green", nl=False)
        click.echo(f"  ({remote['branch']}:{remote['path']})")
    else:
        click.secho("   GitHub: not configured", fg="yellow")

    if result.dirty:
        click.secho(f"   ✏️  {len(result.pending)} unsynced change(s)", fg="yellow")
        for message in result.pending:
            click.echo(f"     • {message}")
    else:
        click.secho("   ✓ In sync", fg="green")
    if result.last_synced_at:
        click.echo(f"   Last sync: {result.last_synced_at}")
    if result.last_push:
        click.echo(f"   Last push: {result.last_push['commit']} ({result.last_push['at']})")

    click.echo()
    click.secho(f"   Tools: {result.counts.get('total', 0)}", fg="white", bold=True)
    for group, count in result.counts.items():
        if group != "total":
            click.echo(f"     • {group}: {count}")
    click.echo()


@cli.command()
@click.argument("language", required=False, type=click.Choice(["en", "ar"]))
@click.pass_context
def lang(ctx: click.Context, language: str | None) -> None:
    """Show or set the display language (en / ar)."""
    with open_session(ctx) as session:
        if language:
            session.set_language(language)
            click.secho(f"✅ Language set to {session.language}", fg="green")
        else:
            click.echo(session.language)


@cli.command()
@click.option("-n", "limit", default=20, type=int, help="Number of entries.")
@click.option(
    "--operation", "operation", default=None,
    type=click.Choice(["load", "pull", "sync", "import", "export", "detect"]),
    help="Only show one kind of operation.",
)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def history(ctx: click.Context, limit: int, operation: str | None, as_json: bool) -> None:
    """Show recent sync / import / export operations."""
    with open_session(ctx) as session:
        entries = session.audit.read_recent(limit, operation=operation)

    if as_json:
        click.echo(json.dumps([e.model_dump(mode="json") for e in entries], indent=2, ensure_ascii=False))
        return

    if not entries:
        click.secho("No operations recorded yet.", fg="yellow")
        return

    for entry in entries:
        color = "green" if entry.status == "ok" else "red"
        click.secho(f"{entry.timestamp}  {entry.operation:<8}", nl=False)
        click.secho(f" {entry.status:<6}", fg=color, nl=False)
        detail = entry.error or entry.message
        click.echo(f" {entry.repository or '-'}  {detail}")


@cli.command()
@click.option(
    "--output", "-o", "output",
    type=click.Path(file_okay=False), default=None,
    help="Output directory (default: site_dir from directory.yml).",
)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def build(ctx: click.Context, output: str | None, as_json: bool) -> None:
    """Render the public directory as a static site."""
    from src.core.use_cases.sync import load_catalog
    from src.ui.web.site_builder import build_site

    with open_session(ctx) as session:
        load_catalog(session)
        target = Path(output) if output else session.root / session.config.site_dir
        result = build_site(
            session.store.catalog,
            target,
            session.config,
            protected=(session.root, session.state_path.parent),
        )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        if not result.ok:
            sys.exit(1)
        return

    if not result.ok:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    click.secho(f"✅ Built {len(result.files)} files into {result.output_dir}", fg="green")
    for name in result.files:
        click.echo(f"   • {name}")


@cli.command()
@click.option("--host", default="127.0.0.1", help="Bind address.")
@click.option("--port", "-p", default=8000, type=int, help="Port number.")
@click.option("--no-load", is_flag=True, help="Do not fetch the catalog at startup.")
@click.pass_context
def web(ctx: click.Context, host: str, port: int, no_load: bool) -> None:
    """Start the directory site and admin panel."""
    from src.core.config.loader import ConfigError
    from src.ui.web.server import create_app, run_server

    config_path: Path | None = ctx.obj.get("config_path")
    try:
        app = create_app(config_path=config_path, load=not no_load)
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)

    debug = ctx.obj.get("debug", False)

    click.echo()
    click.secho("⚡ AI Tools Directory — Web", bold=True)
    click.echo(f"   Site:      http://{host}:{port}/")
    click.echo(f"   Admin:     http://{host}:{port}/admin/")
    click.echo(f"   Workspace: {app.config['WORKSPACE_ROOT']}")
    if debug:
        click.secho("   Logging: DEBUG (all output)", fg="yellow")
    click.echo()

    run_server(app, host=host, port=port, debug=debug)


# ── Register sub-command groups from src/ui/cli/ ──────────────────

from src.ui.cli.catalog import catalog  # noqa: E402
from src.ui.cli.remote import remote  # noqa: E402

cli.add_command(catalog)
cli.add_command(remote)


if __name__ == "__main__":
    cli()
