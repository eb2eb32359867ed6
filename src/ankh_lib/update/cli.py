# Released under MIT License.
# Copyright (c) 2025 The ankh developers

import sys
from typing import NoReturn

import click
from click_help_colors import HelpColorsCommand

from ankh_lib.core.common import yes_or_no_prompt
from ankh_lib.core.config import CFG
from ankh_lib.core.logger import get_logger
from ankh_lib.core.trap import ErrorTrap

from .updater import Updater

logger = get_logger(__name__)


@click.command(
    short_help="Update an application.",
    help=f"""Update an application inside its existing guest.

{click.style("APP", fg="green")}   Name of the application to update.

Without `--id`, `{CFG.binary_name} update` looks for a guest whose name contains the application name.
Containers are updated with `pct exec`, virtual machines over SSH as root.""",
    cls=HelpColorsCommand,
    help_options_color="bright_blue",
)
@click.argument("app", type=str, metavar=click.style("APP", fg="green"))
@click.option("--id", "guest_id", type=int, default=None, help="ID of the guest to update.")
@click.option("-y", "--yes", is_flag=True, help="Update without confirmation.")
@click.option(
    "--dry-run", is_flag=True, help="Only print the commands that would be run."
)
def update(
    app: str, guest_id: int | None = None, yes: bool = False, dry_run: bool = False
) -> NoReturn:
    trap = ErrorTrap().arm()
    try:
        updater = Updater.fromName(app, dry_run)
        trap.watch(updater.proxmox)
        guest_id = updater.findGuest(guest_id)

        if not (
            yes
            or yes_or_no_prompt(
                f"Update {updater.app.name} in guest {guest_id}?", default=True
            )
        ):
            logger.info("Operation aborted.")
            trap.disarm()
            sys.exit(0)

        if version := updater.update(guest_id):
            logger.info(f"{updater.app.name} updated to version {version}.")
        else:
            logger.info(f"{updater.app.name} updated.")
        trap.disarm()
        sys.exit(0)
    except Exception as e:
        trap.fire(e)
