# Released under MIT License.
# Copyright (c) 2025 The ankh developers

"""
General utility functions for the ankh library.

This module provides helpers for interactive prompts, YAML output,
panel sizing and string normalization.
"""

import sys
from functools import lru_cache

import readchar
import yaml
from rich.console import Console
from rich.live import Live
from rich.text import Text

from .logger import get_logger

logger = get_logger(__name__)


@lru_cache(maxsize=1)
def load_yaml_dumper() -> type[yaml.SafeDumper]:
    """Return the fastest available safe YAML dumper (CSafeDumper if possible)."""
    try:
        from yaml import CSafeDumper as SafeDumper  # type: ignore[attr-defined]

        logger.debug("Loaded YAML CSafeDumper.")
    except ImportError:
        from yaml import SafeDumper

        logger.debug("Loaded default YAML safe dumper.")
    return SafeDumper


def is_interactive() -> bool:
    """Return True if standard input is attached to a terminal."""
    return sys.stdin.isatty()


def yes_or_no_prompt(prompt: str, default: bool = False) -> bool:
    """
    Display an interactive yes/no prompt to the user and return the selection.

    The pressed key is highlighted ('y' in green for yes, 'n' in red for no).
    Any other key selects the default. If standard input is not a terminal,
    the default is returned without prompting.

    Args:
        prompt (str): The text to display as the question.
        default (bool): Answer used for keys other than 'y'/'n' and for non-interactive runs.

    Returns:
        bool: True if the user answered 'yes', False otherwise.
    """
    if not is_interactive():
        logger.debug(f"Non-interactive run, answering '{prompt}' with the default.")
        return default

    prompt = f"   {prompt} "
    options = "[Y/n]" if default else "[y/N]"
    text = (
        Text("PROMPT", style="magenta")
        + Text(prompt, style="default")
        + Text(options, style="bold default")
    )

    with Live(text, refresh_per_second=1) as live:
        key = readchar.readkey().lower()
        answer = {"y": True, "n": False}.get(key, default)

        # highlight the selected answer
        yes = "y" if not answer else "Y"
        no = "n" if answer else "N"
        choice = (
            Text("[", style="bold default")
            + Text(yes, style="bold green" if answer else "bold default")
            + Text("/", style="bold default")
            + Text(no, style="bold default" if answer else "bold red")
            + Text("]", style="bold default")
        )

        live.update(
            Text("PROMPT", style="magenta") + Text(prompt, style="default") + choice
        )

    return answer


def get_panel_width(
    console: Console, factor: int, min_width: int | None, max_width: int | None
) -> int:
    """
    Calculate the width of a panel relative to the console width, constrained by
    optional minimum and maximum width values.

    Args:
        console (Console): A rich Console-like object that provides terminal size.
        factor (int): A divisor used to scale down the terminal width.
        min_width (int | None): The minimum allowable panel width.
        max_width (int | None): The maximum allowable panel width.

    Returns:
        int: The computed panel width after applying scaling and bounds.
    """
    panel_width = console.size.width // factor
    if min_width is not None:
        panel_width = max(panel_width, min_width)
    if max_width is not None:
        panel_width = min(panel_width, max_width)

    return panel_width


def normalize(s: str) -> str:
    """
    Normalize an application name for lookups.

    The string is lowercased, surrounding whitespace is removed and
    spaces and underscores are replaced with hyphens.
    """
    return s.strip().lower().replace(" ", "-").replace("_", "-")
