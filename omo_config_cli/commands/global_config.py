"""Global config commands: settings shared by every applied profile."""

from __future__ import annotations

import json
import sys

import click
from pydantic import ValidationError as SchemaError
from rich.table import Table

from ..apply import refresh_applied_config
from ..console import console
from ..errors import ConfigError
from ..paths import create_profile_store
from ..paths import get_target_config_path
from ..profiles import DEFAULT_SCHEMA_URL
from ..profiles import GLOBAL_FIELDS
from ..profiles import GlobalConfig
from ..utils.error_format import escape_markup
from ..utils.error_format import format_error_message


@click.group(name="global", invoke_without_command=True)
@click.pass_context
def global_config(ctx: click.Context):
    """Manage the global oh-my-opencode settings."""
    if ctx.invoked_subcommand is None:
        click.echo("\n" + ctx.get_help())
        ctx.exit()


@global_config.command(name="show")
@click.option("--json", "as_json", is_flag=True, help="Print the stored record as JSON")
def global_show(as_json: bool):
    """Show the global config."""
    store = create_profile_store()
    try:
        config = store.get_global()
    except ConfigError as exc:
        console.print(f"[red]Error:[/red] {escape_markup(format_error_message(exc, include_type=False))}")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(config.to_record(), indent=2, ensure_ascii=False))
        return

    table = Table(title="Global Config", show_header=True, header_style="bold cyan")
    table.add_column("Field", style="green")
    table.add_column("Value")

    values = config.model_dump()
    for field in GLOBAL_FIELDS:
        value = values.get(field)
        if field == "schema_url" and value is None:
            table.add_row(field, f"[dim]{escape_markup(DEFAULT_SCHEMA_URL)} (default)[/dim]")
        elif value is None:
            table.add_row(field, "[dim]-[/dim]")
        else:
            table.add_row(field, escape_markup(json.dumps(value, ensure_ascii=False)))

    console.print(table)


@global_config.command(name="set")
@click.argument("field", type=click.Choice(GLOBAL_FIELDS))
@click.argument("value_json")
def global_set(field: str, value_json: str):
    """Set one global field to a JSON value (null clears it).

    Examples:

      omo-config global set disabled_hooks '["comment-checker"]'

      omo-config global set schema_url '"https://example.com/schema.json"'
    """
    try:
        value = json.loads(value_json)
    except json.JSONDecodeError as exc:
        console.print(f"[red]Error:[/red] Invalid JSON for {field}: {escape_markup(exc.msg)}")
        sys.exit(1)

    store = create_profile_store()
    try:
        current = store.get_global()
        record = current.model_dump()
        record[field] = value
        updated = GlobalConfig.model_validate(record)
        store.save_global(updated)
        refresh_applied_config(store, get_target_config_path())
    except SchemaError as exc:
        message = "; ".join(error["msg"] for error in exc.errors())
        console.print(f"[red]Error:[/red] Invalid value for {field}: {escape_markup(message)}")
        sys.exit(1)
    except ConfigError as exc:
        console.print(f"[red]Error:[/red] {escape_markup(format_error_message(exc, include_type=False))}")
        sys.exit(1)

    console.print(f"[green]✓[/green] {'Cleared' if value is None else 'Set'} {field}")
