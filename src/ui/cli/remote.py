"""
CLI commands for the GitHub remote — settings, detection and sync.

Usage::

    toolsdir remote configure --owner me --repo ai-tools-hub --token ghp_...
    toolsdir remote detect
    toolsdir remote pull
    toolsdir remote sync -m "Add new tools"
    toolsdir remote disconnect
"""

from __future__ import annotations

import json
import sys

import click

from src.ui.cli.session import open_session


@click.group()
def remote() -> None:
    """Remote — the GitHub repository that holds the catalog."""


def _report(result, as_json: bool) -> None:  # type: ignore[no-untyped-def]
    """Print a SyncResult and exit non-zero on failure."""
    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        if not result.ok:
            sys.exit(1)
        return

    if result.ok:
        click.secho(f"✅ {result.message}", fg="green")
        if result.version_token:
            click.echo(f"   version: {result.version_token}")
        return

    color = "yellow" if result.conflict else "red"
    icon = "⚠️ " if result.conflict else "❌"
    click.secho(f"{icon} {result.error}", fg=color)
    sys.exit(1)


@remote.command()
@click.option("--owner", required=True, help="Repository owner (user or organization).")
@click.option("--repo", required=True, help="Repository name.")
@click.option(
    "--token", envvar="GITHUB_TOKEN", prompt=True, hide_input=True,
    help="GitHub token with contents access (or GITHUB_TOKEN).",
)
@click.option("--branch", default=None, help="Branch (default: from directory.yml).")
@click.option("--path", "path", default=None, help="Catalog file path in the repository.")
@click.option("--remember/--no-remember", default=True, help="Persist the settings in the workspace.")
@click.option("--no-load", is_flag=True, help="Do not load the catalog after saving.")
@click.pass_context
def configure(
    ctx: click.Context,
    owner: str,
    repo: str,
    token: str,
    branch: str | None,
    path: str | None,
    remember: bool,
    no_load: bool,
) -> None:
    """Save the repository settings."""
    from src.core.use_cases.sync import configure_remote

    with open_session(ctx) as session:
        result = configure_remote(
            session, owner, repo, token,
            branch=branch, path=path, remember=remember, load=not no_load,
        )

    if not result.ok:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    for warning in result.warnings:
        click.secho(f"⚠️  {warning}", fg="yellow")
    click.secho(f"✅ Settings saved: {owner}/{repo}", fg="green")
    if not remember:
        click.secho("   Not remembered: the settings will not be written to disk.", fg="yellow")
    if result.loaded is not None:
        color = "green" if result.loaded.ok else "red"
        click.secho(f"   {result.loaded.message or result.loaded.error}", fg=color)


@remote.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def show(ctx: click.Context, as_json: bool) -> None:
    """Show the repository settings (never the token)."""
    with open_session(ctx) as session:
        info = session.remote.public_dict()
        info["remember"] = session.state.remember

    if as_json:
        click.echo(json.dumps(info, indent=2))
        return

    if not info["configured"]:
        click.secho("GitHub not configured.", fg="yellow")
    for key in ("owner", "repo", "branch", "path", "has_token", "remember"):
        click.echo(f"   {key}: {info[key]}")


@remote.command()
@click.option("--token", envvar="GITHUB_TOKEN", default=None, help="Token to detect with.")
@click.option("--yes", "-y", is_flag=True, help="Save the detected repository without asking.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def detect(ctx: click.Context, token: str | None, yes: bool, as_json: bool) -> None:
    """Guess the repository from the token's account."""
    from src.core.use_cases.sync import configure_remote, detect_repository

    with open_session(ctx) as session:
        result = detect_repository(session, token=token)

        if as_json:
            click.echo(json.dumps(result.to_dict(), indent=2))
            if not result.ok:
                sys.exit(1)
            return

        if not result.ok or result.guess is None:
            click.secho(f"❌ {result.error}", fg="red")
            sys.exit(1)

        guess = result.guess
        click.secho(f"🔍 {guess.owner}/{guess.repo}", fg="cyan", bold=True, nl=False)
        click.echo(f"  ({guess.reason})")
        if len(guess.candidates) > 1:
            click.echo(f"   other repositories: {', '.join(guess.candidates[:10])}")

        if not yes and not click.confirm("Use this repository?"):
            click.echo("Not saved.")
            return

        configured = configure_remote(
            session, guess.owner, guess.repo, token or session.remote.token,
        )

    if not configured.ok:
        click.secho(f"❌ {configured.error}", fg="red")
        sys.exit(1)
    click.secho(f"✅ Settings saved: {guess.owner}/{guess.repo}", fg="green")


@remote.command()
@click.option("--force", is_flag=True, help="Discard unsynced local changes.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def pull(ctx: click.Context, force: bool, as_json: bool) -> None:
    """Replace the local catalog with the one on GitHub."""
    from src.core.use_cases.sync import pull as pull_catalog

    with open_session(ctx) as session:
        result = pull_catalog(session, force=force)
    _report(result, as_json)


@remote.command()
@click.option("--force", is_flag=True, help="Overwrite the remote file even if it changed.")
@click.option("--message", "-m", default=None, help="Commit message.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def sync(ctx: click.Context, force: bool, message: str | None, as_json: bool) -> None:
    """Push staged changes to GitHub."""
    from src.core.use_cases.sync import sync as sync_catalog

    with open_session(ctx) as session:
        result = sync_catalog(session, force=force, message=message)
    _report(result, as_json)


@remote.command()
@click.pass_context
def disconnect(ctx: click.Context) -> None:
    """Forget the repository settings (the local catalog is kept)."""
    with open_session(ctx) as session:
        session.clear_remote()
    click.secho("✅ GitHub settings removed", fg="green")
