# Released under MIT License.
# Copyright (c) 2025 The ankh developers

import sys
from typing import NoReturn

import click
from click_help_colors import HelpColorsCommand
from click_option_group import optgroup
from rich.console import Console

from ankh_lib.core.common import yes_or_no_prompt
from ankh_lib.core.config import CFG
from ankh_lib.core.logger import get_logger
from ankh_lib.core.trap import ErrorTrap
from ankh_lib.settings.defaults import Scope

from .creator import Creator

logger = get_logger(__name__)
console = Console()


@click.command(
    short_help="Provision an application.",
    help=f"""Create a new LXC container or virtual machine running an application.

{click.style("APP", fg="green")}   Name of the application to provision. See `{CFG.binary_name} apps`.

Every setting of the guest is resolved from, in order of precedence: environment variables,
the per-app defaults file, the global defaults file and the built-in defaults of the application.
With `--advanced`, you are asked for every setting before anything is created.

On failure, `{CFG.binary_name} create` exits with a code describing the failure.
Use `{CFG.binary_name} explain CODE` to get its meaning.""",
    cls=HelpColorsCommand,
    help_options_color="bright_blue",
)
@click.argument("app", type=str, metavar=click.style("APP", fg="green"))
@optgroup.group(f"{click.style('Settings', fg='yellow')}")
@optgroup.option(
    "--advanced", is_flag=True, help="Review and edit every setting before provisioning."
)
@optgroup.option(
    "--save",
    type=click.Choice(["app", "global"], case_sensitive=False),
    default=None,
    help="Save the final settings as per-app or global defaults.",
)
@optgroup.group(f"{click.style('Execution', fg='yellow')}")
@optgroup.option("-y", "--yes", is_flag=True, help="Provision without confirmation.")
@optgroup.option(
    "--dry-run",
    is_flag=True,
    help="Only print the commands that would modify the host.",
)
def create(
    app: str,
    advanced: bool = False,
    save: str | None = None,
    yes: bool = False,
    dry_run: bool = False,
) -> NoReturn:
    trap = ErrorTrap().arm()
    try:
        creator = Creator.fromName(app, dry_run)
        trap.watch(creator.proxmox)
        creator.ensureHost()

        settings = creator.configure(
            console, advanced, Scope.fromStr(save) if save else None
        )

        if not (
            yes
            or yes_or_no_prompt(
                f"Create a {creator.app.kind} for {creator.app.name}?", default=True
            )
        ):
            logger.info("Operation aborted.")
            trap.disarm()
            sys.exit(0)

        result = creator.create(settings)
        console.print(creator.createSummaryPanel(result))
        logger.info(f"Successfully created {creator.app.name} (ID {result.guest_id}).")
        trap.disarm()
        sys.exit(0)
    except Exception as e:
        trap.fire(e)
