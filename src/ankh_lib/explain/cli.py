# Released under MIT License.
# Copyright (c) 2025 The ankh developers

import sys
from typing import NoReturn

import click
from click_help_colors import HelpColorsCommand
from rich.console import Console

from ankh_lib.core.config import CFG
from ankh_lib.core.error import AnkhError
from ankh_lib.core.exit_codes import EXIT_CODES, describe
from ankh_lib.core.logger import get_logger

from .presenter import ExitCodePresenter

logger = get_logger(__name__)


@click.command(
    short_help="Explain exit codes.",
    help=f"""Print the meaning of exit codes returned by ankh.

{click.style("CODE", fg="green")}   One or more exit codes to explain.

Codes 1-99 are generic errors, 100-199 package manager and database errors
and 200-299 Proxmox errors. Without any code, `{CFG.binary_name} explain --all` lists every known code.""",
    cls=HelpColorsCommand,
    help_options_color="bright_blue",
)
@click.argument(
    "codes", type=int, nargs=-1, metavar=click.style("CODE...", fg="green")
)
@click.option("-a", "--all", "show_all", is_flag=True, help="List all known exit codes.")
def explain(codes: tuple[int, ...], show_all: bool = False) -> NoReturn:
    try:
        console = Console(markup=False)
        if show_all:
            presenter = ExitCodePresenter(sorted(EXIT_CODES.values(), key=lambda e: e.code))
            console.print(presenter.createTablePanel(console))
            sys.exit(0)

        if not codes:
            raise AnkhError("No exit code specified.")

        console.print(ExitCodePresenter([describe(code) for code in codes]).createExplanation())
        sys.exit(0)
    except AnkhError as e:
        logger.error(e)
        sys.exit(CFG.exit_codes.default)
    except Exception as e:
        logger.critical(e, exc_info=True, stack_info=True)
        sys.exit(CFG.exit_codes.unexpected_error)
