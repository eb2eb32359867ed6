# Released under MIT License.
# Copyright (c) 2025 The ankh developers

from pathlib import Path

import click

from ankh_lib.core.common import is_interactive
from ankh_lib.core.error import AnkhProvisionError
from ankh_lib.core.logger import get_logger
from ankh_lib.settings.schema import parse_ssh_key

logger = get_logger(__name__)

# public keys probed in the home directory, in order
KEY_FILES = ("id_ed25519.pub", "id_rsa.pub")


def collect_ssh_key(configured: str | None, home: Path | None = None) -> str:
    """
    Obtain the SSH public key granting root access to a new VM.

    Sources, in order:
        1. The resolved `var_ssh_key` setting
        2. `~/.ssh/id_ed25519.pub`, then `~/.ssh/id_rsa.pub`
        3. An interactive prompt, if running in a terminal

    Args:
        configured (str | None): Value of the `var_ssh_key` setting.
        home (Path | None): Home directory to probe. Defaults to the current user's.

    Returns:
        str: The public key.

    Raises:
        AnkhProvisionError: With code 241 if no valid key can be obtained.
    """
    if configured:
        logger.info("Using the configured SSH public key.")
        return configured

    ssh_dir = (home or Path.home()) / ".ssh"
    for name in KEY_FILES:
        key_file = ssh_dir / name
        if not key_file.is_file():
            continue
        try:
            key = parse_ssh_key(key_file.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring SSH key '{key_file}': {e}.")
            continue
        logger.info(f"Auto-detected SSH key: '{key_file}'.")
        return key

    if not is_interactive():
        raise AnkhProvisionError(
            "No SSH public key found and running non-interactively. "
            "Set var_ssh_key (or SSH_KEY) before running.",
            241,
        )

    answer = click.prompt(
        "No SSH public key found. Paste your public key (required for VM access)",
        default="",
        show_default=False,
    )
    try:
        return parse_ssh_key(answer)
    except ValueError as e:
        raise AnkhProvisionError(f"Invalid SSH public key: {e}.", 241) from e
