"""Model catalog commands."""

from __future__ import annotations

import click
from rich.table import Table

from ..console import console
from ..paths import create_model_catalog
from ..paths import create_settings
from ..utils.error_format import escape_markup


@click.group(invoke_without_command=True)
@click.pass_context
def models(ctx: click.Context):
    """Show or extend the selectable models and their variants."""
    if ctx.invoked_subcommand is None:
        ctx.invoke(models_list)


@models.command(name="list")
def models_list():
    """List known models (OpenCode config plus settings.yaml)."""
    catalog = create_model_catalog()

    if not len(catalog):
        console.print("[yellow]No models configured.[/yellow]")
        console.print("Add one with [cyan]omo-config models add PROVIDER/MODEL [VARIANT...][/cyan]")
        return

    table = Table(title="Models", show_header=True, header_style="bold cyan")
    table.add_column("Model", style="green")
    table.add_column("Variants")

    for model_id in sorted(catalog.models):
        variants = catalog.variants(model_id)
        table.add_row(escape_markup(model_id), escape_markup(", ".join(variants)) if variants else "[dim]-[/dim]")

    console.print(table)


@models.command(name="add")
@click.argument("model_id")
@click.argument("variants", nargs=-1)
@click.option("--local", "scope_flag", flag_value="local", help="Save locally (just you)")
@click.option("--project", "scope_flag", flag_value="project", help="Save for project (team)")
@click.option("--user", "scope_flag", flag_value="user", default=True, help="Save for all projects (default)")
def models_add(model_id: str, variants: tuple[str, ...], scope_flag: str):
    """Declare a model and its variants in settings.yaml."""
    settings = create_settings()
    settings.set_model_variants(model_id, list(variants), scope=scope_flag)
    suffix = f" with variants {', '.join(variants)}" if variants else ""
    console.print(f"[green]✓[/green] Added {escape_markup(model_id)}{escape_markup(suffix)} ({scope_flag} settings)")
