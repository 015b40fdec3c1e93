"""omo-config - compose and apply oh-my-opencode profiles."""

import logging

import click

from . import __version__
from .commands.global_config import global_config
from .commands.models import models
from .commands.profile import profile
from .logging_setup import init_json_logging

logger = logging.getLogger(__name__)


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="omo-config")
@click.pass_context
def cli(ctx: click.Context):
    """omo-config - manage oh-my-opencode agent and category profiles."""
    init_json_logging()
    logger.debug(f"omo-config {__version__} invoked with {ctx.invoked_subcommand}")
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


cli.add_command(profile)
cli.add_command(global_config)
cli.add_command(models)


def main():
    """Entry point for the omo-config command."""
    cli()


if __name__ == "__main__":
    main()
