# Released under MIT License.
# Copyright (c) 2025 The ankh developers

import sys
from typing import NoReturn

import click
from click_help_colors import HelpColorsCommand
from rich.console import Console

from ankh_lib.core.config import CFG
from ankh_lib.core.error import AnkhError
from ankh_lib.core.logger import get_logger

from .presenter import AppsPresenter
from .registry import APPS

logger = get_logger(__name__)


@click.command(
    short_help="List the available applications.",
    help=f"""List the applications that `{CFG.binary_name} create` can provision,
together with their built-in resources.""",
    cls=HelpColorsCommand,
    help_options_color="bright_blue",
)
def apps() -> NoReturn:
    try:
        console = Console(markup=False)
        console.print(AppsPresenter(list(APPS.values())).createAppsPanel(console))
        sys.exit(0)
    except AnkhError as e:
        logger.error(e)
        sys.exit(CFG.exit_codes.default)
    except Exception as e:
        logger.critical(e, exc_info=True, stack_info=True)
        sys.exit(CFG.exit_codes.unexpected_error)
