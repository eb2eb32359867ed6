# Released under MIT License.
# Copyright (c) 2025 The ankh developers

import sys
from typing import NoReturn

import click
from click_help_colors import HelpColorsCommand
from rich.console import Console

from ankh_lib.apps.registry import get_app
from ankh_lib.core.config import CFG
from ankh_lib.core.logger import get_logger
from ankh_lib.core.trap import ErrorTrap

from .defaults import DefaultsStore, Scope
from .resolver import ConfigResolver
from .wizard import Wizard

logger = get_logger(__name__)


@click.command(
    short_help="Show or edit the settings of an application.",
    help=f"""Show the settings an application would be provisioned with and where each value comes from.

{click.style("APP", fg="green")}   Name of the application.

With `--advanced`, you are asked for every setting. With `--save`, the final settings are
written into the per-app or the global defaults file (by default in '{CFG.paths.defaults_dir}').
Nothing is provisioned.""",
    cls=HelpColorsCommand,
    help_options_color="bright_blue",
)
@click.argument("app", type=str, metavar=click.style("APP", fg="green"))
@click.option("--advanced", is_flag=True, help="Review and edit every setting.")
@click.option(
    "--save",
    type=click.Choice(["app", "global"], case_sensitive=False),
    default=None,
    help="Save the settings as per-app or global defaults.",
)
def settings(app: str, advanced: bool = False, save: str | None = None) -> NoReturn:
    trap = ErrorTrap().arm()
    try:
        definition = get_app(app)
        resolver = ConfigResolver(DefaultsStore.fromConfig(), definition.slug)
        Wizard(resolver, definition, Console()).run(
            advanced, Scope.fromStr(save) if save else None
        )
        trap.disarm()
        sys.exit(0)
    except Exception as e:
        trap.fire(e)
