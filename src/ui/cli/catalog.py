"""
CLI commands for the catalog — list, search and staged edits.

Edits are staged in the workspace (.state/current.json) and published
with ``toolsdir remote sync``.

Usage::

    toolsdir catalog list --group online
    toolsdir catalog search chat --lang ar
    toolsdir catalog add --name ChatGPT --url https://chat.openai.com --pricing freemium ...
    toolsdir catalog edit <id> --badge Popular
    toolsdir catalog delete <id>
    toolsdir catalog import backup.json
    toolsdir catalog export
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from src.core.models.catalog import CatalogError
from src.core.models.tool import GROUPS, PRICING_TIERS
from src.core.services.renderer import ALL_CATEGORIES, ToolCard, render_cards
from src.core.services.tool_form import ToolForm
from src.ui.cli.session import open_session


@click.group()
def catalog() -> None:
    """Catalog — list, search and edit tools."""


def _print_cards(cards: list[ToolCard], show_group: bool = False) -> None:
    for card in cards:
        prefix = f"[{card.group}] " if show_group else ""
        badge = f"  ⭐ {card.badge_label}" if card.badge else ""
        click.secho(f"  {prefix}{card.name}", bold=True, nl=False)
        click.echo(f"  ({card.pricing_label}){badge}")
        click.echo(f"     id: {card.id}  {card.url}")
        if card.description:
            click.echo(f"     {card.description}")
        if card.features:
            click.echo(f"     {', '.join(card.features)}")


def _form_errors(errors: dict[str, str]) -> None:
    for field_name, message in errors.items():
        click.secho(f"   • {field_name}: {message}", fg="red")


# ── Read ────────────────────────────────────────────────────────────


@catalog.command("list")
@click.option("--group", "-g", type=click.Choice(GROUPS), default=None, help="Only one section.")
@click.option("--lang", "language", type=click.Choice(["en", "ar"]), default=None, help="Display language.")
@click.option("--category", default=ALL_CATEGORIES, help="Category filter (online tools).")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def list_tools(
    ctx: click.Context,
    group: str | None,
    language: str | None,
    category: str,
    as_json: bool,
) -> None:
    """List the tools of every section (or one)."""
    with open_session(ctx) as session:
        lang = language or session.language
        groups = [group] if group else list(GROUPS)
        result = {
            name: render_cards(session.store.catalog, name, lang, category=category)
            for name in groups
        }

    if as_json:
        click.echo(json.dumps(
            {name: [c.to_dict() for c in cards] for name, cards in result.items()},
            indent=2, ensure_ascii=False,
        ))
        return

    for name, cards in result.items():
        click.secho(f"\n📂 {name} ({len(cards)})", fg="cyan", bold=True)
        if not cards:
            click.echo("   (empty)")
        _print_cards(cards)
    click.echo()


@catalog.command()
@click.argument("query")
@click.option("--group", "-g", type=click.Choice(GROUPS), default=None, help="Only one section.")
@click.option("--lang", "language", type=click.Choice(["en", "ar"]), default=None, help="Display language.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def search(ctx: click.Context, query: str, group: str | None, language: str | None, as_json: bool) -> None:
    """Search names, descriptions and features."""
    with open_session(ctx) as session:
        lang = language or session.language
        cards: list[ToolCard] = []
        for name in [group] if group else GROUPS:
            cards.extend(render_cards(session.store.catalog, name, lang, query=query))

    if as_json:
        click.echo(json.dumps([c.to_dict() for c in cards], indent=2, ensure_ascii=False))
        return

    if not cards:
        click.secho(f'No tools found matching "{query}"', fg="yellow")
        return
    click.secho(f'\n🔍 {len(cards)} match(es) for "{query}"', fg="cyan", bold=True)
    _print_cards(cards, show_group=True)
    click.echo()


# ── Edit ────────────────────────────────────────────────────────────


def _tool_options(func):  # type: ignore[no-untyped-def]
    """Options shared by ``add`` and ``edit``."""
    options = [
        click.option("--name", default=None, help="Tool name."),
        click.option("--url", default=None, help="Website URL."),
        click.option("--description-en", default=None, help="English description."),
        click.option("--description-ar", default=None, help="Arabic description."),
        click.option("--category", default=None, help="Category (online tools only)."),
        click.option("--pricing", type=click.Choice(PRICING_TIERS), default=None, help="Pricing tier."),
        click.option("--badge", default=None, help="Badge (Popular, New, Premium, Trending)."),
        click.option("--icon-class", default=None, help="Font Awesome class."),
        click.option("--icon-gradient", default=None, help="CSS gradient for the icon."),
        click.option("--features-en", default=None, help="Comma-separated English features."),
        click.option("--features-ar", default=None, help="Comma-separated Arabic features."),
        click.option("--platform", "platforms", multiple=True, help="Platform (desktop/mobile), repeatable."),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _apply(form: ToolForm, values: dict) -> ToolForm:
    for key, value in values.items():
        if key == "platforms":
            if value:
                form.platforms = list(value)
        elif value is not None:
            setattr(form, key, value)
    return form


@catalog.command()
@click.option("--group", "-g", type=click.Choice(GROUPS), default="online", help="Section.")
@_tool_options
@click.pass_context
def add(ctx: click.Context, group: str, **values: object) -> None:
    """Add a tool (staged until the next sync)."""
    from src.core.use_cases.edit import save_tool

    form = _apply(ToolForm(group=group), values)
    with open_session(ctx) as session:
        result = save_tool(session, form)

    if not result.ok:
        click.secho(f"❌ {result.error}", fg="red")
        _form_errors(result.field_errors)
        sys.exit(1)

    assert result.record is not None
    click.secho(f"✅ {result.message}", fg="green")
    click.echo(f"   id: {result.record.id}  ({result.group})")


@catalog.command()
@click.argument("tool_id")
@click.option("--group", "-g", "target_group", type=click.Choice(GROUPS), default=None, help="Move to section.")
@_tool_options
@click.pass_context
def edit(ctx: click.Context, tool_id: str, target_group: str | None, **values: object) -> None:
    """Edit a tool; options left out keep their current value."""
    from src.core.use_cases.edit import save_tool

    with open_session(ctx) as session:
        try:
            group, record = session.store.find(tool_id)
        except CatalogError as e:
            click.secho(f"❌ {e}", fg="red")
            sys.exit(1)

        form = _apply(ToolForm.from_record(record, target_group or group), values)
        result = save_tool(session, form, group=group, tool_id=tool_id)

    if not result.ok:
        click.secho(f"❌ {result.error}", fg="red")
        _form_errors(result.field_errors)
        sys.exit(1)

    click.secho(f"✅ {result.message}", fg="green")
    if result.group != group:
        click.echo(f"   moved: {group} → {result.group}")


@catalog.command()
@click.argument("tool_id")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation.")
@click.pass_context
def delete(ctx: click.Context, tool_id: str, yes: bool) -> None:
    """Delete a tool (staged until the next sync)."""
    from src.core.use_cases.edit import delete_tool, request_delete

    with open_session(ctx) as session:
        try:
            group, _ = session.store.find(tool_id)
        except CatalogError as e:
            click.secho(f"❌ {e}", fg="red")
            sys.exit(1)

        pending = request_delete(session, group, tool_id)
        assert pending is not None
        if not yes and not click.confirm(f'Are you sure you want to delete "{pending.name}"?'):
            click.echo("Cancelled.")
            return

        result = delete_tool(session, pending)

    if not result.ok:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)
    click.secho(f"✅ {result.message}", fg="green")


# ── Import / export ─────────────────────────────────────────────────


@catalog.command("import")
@click.argument("source", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation.")
@click.pass_context
def import_cmd(ctx: click.Context, source: Path, yes: bool) -> None:
    """Replace the whole catalog with a JSON file."""
    from src.core.use_cases.sync import import_catalog

    if not yes and not click.confirm("This will replace all current data. Continue?"):
        click.echo("Cancelled.")
        return

    with open_session(ctx) as session:
        result = import_catalog(session, source)

    if not result.ok:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)
    click.secho(f"✅ {result.message}", fg="green")
    click.echo("   Run 'toolsdir remote sync' to publish it.")


@catalog.command()
@click.argument("destination", required=False, type=click.Path(path_type=Path))
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def export(ctx: click.Context, destination: Path | None, as_json: bool) -> None:
    """Write the catalog to a dated JSON file (or DESTINATION)."""
    from src.core.use_cases.sync import export_catalog

    with open_session(ctx) as session:
        result = export_catalog(session, destination)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return
    if not result.ok:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)
    click.secho(f"✅ Exported {result.tool_count} tools to {result.path}", fg="green")
