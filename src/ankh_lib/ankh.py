# Released under MIT License.
# Copyright (c) 2025 The ankh developers

import sys

import click
from click_help_colors import HelpColorsGroup

from ankh_lib.apps.cli import apps
from ankh_lib.create.cli import create
from ankh_lib.explain.cli import explain
from ankh_lib.ip.cli import ip
from ankh_lib.settings.cli import settings
from ankh_lib.update.cli import update

__version__ = "0.1.0"

# support both --help and -h
_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


@click.group(
    cls=HelpColorsGroup,
    help_options_color="bright_blue",
    invoke_without_command=True,
    context_settings=_CONTEXT_SETTINGS,
)
@click.option(
    "--version",
    is_flag=True,
    help="Print the current version of ankh and exit.",
)
@click.pass_context
def cli(ctx: click.Context, version: bool):
    """
    Run any ankh command.

    ankh provisions self-hosted applications into LXC containers and virtual machines on Proxmox VE.
    """
    if version:
        print(__version__)
        sys.exit(0)

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        sys.exit(0)


cli.add_command(create)
cli.add_command(update)
cli.add_command(settings)
cli.add_command(apps)
cli.add_command(ip)
cli.add_command(explain)
