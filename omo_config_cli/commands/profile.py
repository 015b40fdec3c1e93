"""Profile management commands for omo-config."""

from __future__ import annotations

import json
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any
from typing import NoReturn

import click
from rich.table import Table

from ..apply import apply_profile
from ..apply import import_local_config
from ..apply import write_applied_config
from ..catalog import Dimension
from ..catalog import get_definition
from ..composer import BatchReplaceSpec
from ..composer import EditSession
from ..console import console
from ..errors import ConfigError
from ..paths import create_model_catalog
from ..paths import create_profile_store
from ..paths import create_settings
from ..paths import get_target_config_path
from ..profiles import ConfigDocument
from ..storage import ProfileStore
from ..utils.error_format import escape_markup
from ..utils.error_format import format_error_message

category_option = click.option(
    "--category", "is_category", is_flag=True, help="Target a category instead of an agent"
)


def _dimension(is_category: bool) -> Dimension:
    return Dimension.CATEGORIES if is_category else Dimension.AGENTS


def _fail(exc: BaseException) -> NoReturn:
    console.print(f"[red]Error:[/red] {escape_markup(format_error_message(exc, include_type=False))}")
    sys.exit(1)


def _open_session(store: ProfileStore, ref: str) -> EditSession:
    """Open an edit session on a stored profile, warning about merged keys."""
    document = store.find(ref)
    session = EditSession(create_model_catalog())
    session.open(document)
    for collision in session.collisions:
        console.print(
            f"[yellow]Warning:[/yellow] agent keys '{escape_markup(collision.kept)}' and "
            f"'{escape_markup(collision.dropped)}' both normalize to "
            f"'{escape_markup(collision.normalized)}'; keeping '{escape_markup(collision.kept)}'"
        )
    return session


def _submit(store: ProfileStore, session: EditSession) -> ConfigDocument:
    """Save the session; an applied profile is written through to the live config."""
    saved = session.submit(store.save)
    if saved.is_applied:
        write_applied_config(store, saved, get_target_config_path())
    return saved


def _edit(ref: str, operation: Callable[[EditSession], Any]) -> tuple[ConfigDocument, Any]:
    """Run one edit operation on a profile and save it.

    Exits with status 1 on any configuration error; nothing is saved then.
    """
    store = create_profile_store()
    try:
        session = _open_session(store, ref)
        outcome = operation(session)
        saved = _submit(store, session)
    except ConfigError as exc:
        _fail(exc)
    return saved, outcome


def _status(document: ConfigDocument) -> str:
    parts: list[str] = []
    if document.is_applied:
        parts.append("[bold green]applied[/bold green]")
    if document.is_disabled:
        parts.append("[dim]disabled[/dim]")
    return ", ".join(parts)


@click.group(invoke_without_command=True)
@click.pass_context
def profile(ctx: click.Context):
    """Manage oh-my-opencode profiles."""
    if ctx.invoked_subcommand is None:
        click.echo("\n" + ctx.get_help())
        ctx.exit()


@profile.command(name="list")
def profile_list():
    """List all stored profiles."""
    store = create_profile_store()
    documents = store.list()

    if not documents:
        console.print("[yellow]No profiles found.[/yellow]")
        console.print("Create one with [cyan]omo-config profile create NAME[/cyan]")
        return

    table = Table(title="Profiles", show_header=True, header_style="bold cyan")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="green")
    table.add_column("Agents", justify="right")
    table.add_column("Categories", justify="right")
    table.add_column("Status")

    for document in documents:
        table.add_row(
            document.id,
            escape_markup(document.name),
            str(len(document.agents)),
            str(len(document.categories)),
            _status(document),
        )

    console.print(table)


@profile.command(name="show")
@click.argument("profile_ref")
@click.option("--json", "as_json", is_flag=True, help="Print the stored record as JSON")
def profile_show(profile_ref: str, as_json: bool):
    """Show the model bindings of a profile."""
    store = create_profile_store()
    try:
        document = store.find(profile_ref)
    except ConfigError as exc:
        _fail(exc)

    if as_json:
        click.echo(json.dumps(document.to_record(), indent=2, ensure_ascii=False))
        return

    session = EditSession(create_model_catalog())
    session.open(document)

    console.print(f"[bold]Profile:[/bold] {escape_markup(document.name)} [dim]({document.id})[/dim]")
    status = _status(document)
    if status:
        console.print(f"[bold]Status:[/bold] {status}")

    for dimension in Dimension:
        table = Table(title=dimension.value.capitalize(), show_header=True, header_style="bold cyan")
        table.add_column("Key", style="green")
        table.add_column("Model")
        table.add_column("Variant")
        table.add_column("Advanced", style="dim")

        for key in session.keys(dimension):
            binding = session.get_binding(dimension, key)
            label = escape_markup(key) if get_definition(dimension, key) else f"{escape_markup(key)} [dim](custom)[/dim]"
            advanced = session.advanced_text(dimension, key)
            table.add_row(
                label,
                escape_markup(binding.model or "-"),
                escape_markup(binding.variant or "-"),
                escape_markup(" ".join(advanced.split())) if advanced else "",
            )
        console.print(table)

    if document.other_fields:
        console.print("[bold]Other fields:[/bold]")
        console.print_json(json.dumps(document.other_fields))
    session.close()


@profile.command(name="create")
@click.argument("name")
def profile_create(name: str):
    """Create an empty profile."""
    store = create_profile_store()
    session = EditSession(create_model_catalog())
    try:
        session.open(name=name)
        saved = session.submit(store.save)
    except ConfigError as exc:
        _fail(exc)
    console.print(f"[green]✓[/green] Created profile '{escape_markup(saved.name)}' ({saved.id})")


@profile.command(name="rename")
@click.argument("profile_ref")
@click.argument("name")
def profile_rename(profile_ref: str, name: str):
    """Rename a profile."""

    def rename(session: EditSession) -> None:
        session.name = name

    saved, _ = _edit(profile_ref, rename)
    console.print(f"[green]✓[/green] Renamed profile {saved.id} to '{escape_markup(saved.name)}'")


@profile.command(name="delete")
@click.argument("profile_ref")
@click.option("--force", "-f", is_flag=True, help="Skip confirmation")
def profile_delete(profile_ref: str, force: bool):
    """Delete a stored profile."""
    store = create_profile_store()
    try:
        document = store.find(profile_ref)
    except ConfigError as exc:
        _fail(exc)

    if not force and not click.confirm(f"Delete profile '{document.name}'?", default=False):
        console.print("[yellow]Cancelled[/yellow]")
        return

    try:
        store.delete(document.id)
    except ConfigError as exc:
        _fail(exc)
    console.print(f"[green]✓[/green] Deleted profile '{escape_markup(document.name)}'")


@profile.command(name="apply")
@click.argument("profile_ref")
@click.option("--target", type=click.Path(dir_okay=False, path_type=Path), help="Config file to write")
def profile_apply(profile_ref: str, target: Path | None):
    """Write a profile (merged with the global config) to oh-my-opencode.json."""
    store = create_profile_store()
    target = target or get_target_config_path()
    try:
        document = store.find(profile_ref)
        if document.is_disabled:
            raise ConfigError(f"Profile '{document.name}' is disabled")
        applied = apply_profile(store, document.id, target)
    except ConfigError as exc:
        _fail(exc)
    console.print(f"[green]✓[/green] Applied '{escape_markup(applied.name)}' to [cyan]{escape_markup(target)}[/cyan]")


@profile.command(name="reorder")
@click.argument("profile_refs", nargs=-1, required=True)
def profile_reorder(profile_refs: tuple[str, ...]):
    """Set the listing order of profiles."""
    store = create_profile_store()
    try:
        ids = [store.find(ref).id for ref in profile_refs]
        store.reorder(ids)
    except ConfigError as exc:
        _fail(exc)
    console.print(f"[green]✓[/green] Reordered {len(ids)} profiles")


def _set_disabled(profile_ref: str, disabled: bool) -> ConfigDocument:
    store = create_profile_store()
    try:
        return store.set_disabled(store.find(profile_ref).id, disabled)
    except ConfigError as exc:
        _fail(exc)


@profile.command(name="disable")
@click.argument("profile_ref")
def profile_disable(profile_ref: str):
    """Hide a profile from apply."""
    document = _set_disabled(profile_ref, True)
    console.print(f"[green]✓[/green] Disabled '{escape_markup(document.name)}'")


@profile.command(name="enable")
@click.argument("profile_ref")
def profile_enable(profile_ref: str):
    """Re-enable a disabled profile."""
    document = _set_disabled(profile_ref, False)
    console.print(f"[green]✓[/green] Enabled '{escape_markup(document.name)}'")


# ===== EDITING =====


@profile.command(name="set-model")
@click.argument("profile_ref")
@click.argument("key")
@click.argument("model")
@click.option("--variant", help="Model variant (must be offered by the model)")
@category_option
def profile_set_model(profile_ref: str, key: str, model: str, variant: str | None, is_category: bool):
    """Bind an agent (or category) to a model."""
    dimension = _dimension(is_category)

    def bind(session: EditSession) -> tuple[str, bool]:
        cleaned = session.registry.clean_key(dimension, key)
        cleared = session.set_model(dimension, cleaned, model)
        if variant:
            session.set_variant(dimension, cleaned, variant)
        return cleaned, cleared

    _, (cleaned, cleared) = _edit(profile_ref, bind)
    if cleared and not variant:
        console.print(f"[yellow]Variant cleared:[/yellow] '{escape_markup(model)}' does not offer it")
    suffix = f" ({escape_markup(variant)})" if variant else ""
    console.print(f"[green]✓[/green] {dimension.label} '{escape_markup(cleaned)}' -> {escape_markup(model)}{suffix}")


@profile.command(name="clear")
@click.argument("profile_ref")
@click.argument("key")
@category_option
def profile_clear(profile_ref: str, key: str, is_category: bool):
    """Remove the model, variant and advanced settings of a key."""
    dimension = _dimension(is_category)

    def clear(session: EditSession) -> str:
        cleaned = session.registry.clean_key(dimension, key)
        session.clear(dimension, cleaned)
        return cleaned

    _, cleaned = _edit(profile_ref, clear)
    console.print(f"[green]✓[/green] Cleared {dimension.label} '{escape_markup(cleaned)}'")


@profile.command(name="set-advanced")
@click.argument("profile_ref")
@click.argument("key")
@click.argument("settings_json")
@category_option
def profile_set_advanced(profile_ref: str, key: str, settings_json: str, is_category: bool):
    """Replace the advanced settings (a JSON object) of a key.

    Pass an empty string to remove them.
    """
    dimension = _dimension(is_category)

    def set_advanced(session: EditSession) -> str:
        cleaned = session.registry.clean_key(dimension, key)
        session.set_advanced_raw(dimension, cleaned, settings_json)
        return cleaned

    _, cleaned = _edit(profile_ref, set_advanced)
    console.print(f"[green]✓[/green] Updated advanced settings of {dimension.label} '{escape_markup(cleaned)}'")


@profile.command(name="set-other")
@click.argument("profile_ref")
@click.argument("fields_json")
def profile_set_other(profile_ref: str, fields_json: str):
    """Replace the profile's other top-level fields (a JSON object)."""
    _edit(profile_ref, lambda session: session.set_other_fields_raw(fields_json))
    console.print("[green]✓[/green] Updated other fields")


@profile.command(name="add-key")
@click.argument("profile_ref")
@click.argument("key")
@click.argument("model")
@click.option("--variant", help="Model variant (must be offered by the model)")
@category_option
def profile_add_key(profile_ref: str, key: str, model: str, variant: str | None, is_category: bool):
    """Add a custom agent (or category) key bound to MODEL.

    Only bound keys are stored, so the key gets its model right away.
    """
    dimension = _dimension(is_category)

    def add(session: EditSession) -> str:
        cleaned = session.add_custom_key(dimension, key)
        session.set_model(dimension, cleaned, model)
        if variant:
            session.set_variant(dimension, cleaned, variant)
        return cleaned

    _, cleaned = _edit(profile_ref, add)
    suffix = f" ({escape_markup(variant)})" if variant else ""
    console.print(
        f"[green]✓[/green] Added custom {dimension.label} '{escape_markup(cleaned)}' -> {escape_markup(model)}{suffix}"
    )


@profile.command(name="remove-key")
@click.argument("profile_ref")
@click.argument("key")
@category_option
def profile_remove_key(profile_ref: str, key: str, is_category: bool):
    """Remove a custom key together with its settings."""
    dimension = _dimension(is_category)

    def remove(session: EditSession) -> str:
        cleaned = session.registry.clean_key(dimension, key)
        session.remove_custom_key(dimension, cleaned)
        return cleaned

    _, cleaned = _edit(profile_ref, remove)
    console.print(f"[green]✓[/green] Removed custom {dimension.label} '{escape_markup(cleaned)}'")


@profile.command(name="replace-model")
@click.argument("profile_ref")
@click.option("--from", "from_model", required=True, help="Model to replace")
@click.option("--from-variant", help="Only replace bindings with this variant")
@click.option("--to", "to_model", required=True, help="Replacement model")
@click.option("--to-variant", help="Variant to set on replaced bindings")
def profile_replace_model(
    profile_ref: str, from_model: str, from_variant: str | None, to_model: str, to_variant: str | None
):
    """Replace one model with another across all agents and categories."""
    spec = BatchReplaceSpec(from_model, to_model, from_variant, to_variant)
    store = create_profile_store()
    try:
        session = _open_session(store, profile_ref)
        result = session.batch_replace(spec)
        if not result.matched:
            session.close()
            source = f"'{escape_markup(from_model)}'"
            if from_variant:
                source += f" with variant '{escape_markup(from_variant)}'"
            console.print(f"[yellow]No bindings use {source}. Nothing changed.[/yellow]")
            return
        _submit(store, session)
    except ConfigError as exc:
        _fail(exc)

    console.print(f"[green]✓[/green] Replaced {result.replaced} binding(s)")
    if result.cleared_variants:
        console.print(f"[yellow]{result.cleared_variants} variant(s) cleared[/yellow] (not offered by the new model)")


@profile.command(name="import")
@click.argument("profile_ref")
@click.argument("file", type=click.File("r", encoding="utf-8"))
@click.option(
    "--mode",
    type=click.Choice(["core", "full"]),
    default="full",
    show_default=True,
    help="core: agents and categories only; full: other top-level fields too",
)
def profile_import(profile_ref: str, file, mode: str):
    """Merge a JSON/JSONC config file (or - for stdin) into a profile."""
    text = file.read()
    _, result = _edit(profile_ref, lambda session: session.import_text(text, mode))

    console.print(
        f"[green]✓[/green] Imported {result.agent_count} agent(s) and {result.category_count} category(ies)"
    )
    new_keys = result.new_custom_agents + result.new_custom_categories
    if new_keys:
        console.print(f"New custom keys: {escape_markup(', '.join(new_keys))}")
    if result.other_fields_replaced:
        console.print("Other fields replaced")


@profile.command(name="import-local")
def profile_import_local():
    """Create a profile from the current oh-my-opencode config (empty store only)."""
    settings = create_settings()
    store = create_profile_store(settings)
    source = get_target_config_path(settings)
    try:
        document = import_local_config(store, source)
    except ConfigError as exc:
        _fail(exc)

    if document is None:
        console.print("[yellow]Nothing imported:[/yellow] profiles already exist or no local config was found")
        return
    console.print(f"[green]✓[/green] Imported {escape_markup(source)} as '{document.name}' ({document.id})")
