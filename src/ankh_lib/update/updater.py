# Released under MIT License.
# Copyright (c) 2025 The ankh developers

"""
Updating applications inside existing guests.

Containers are updated through `pct exec`. Virtual machines have no such
channel, so their IP address is obtained from Proxmox and the update
commands are run over SSH as root.
"""

import shlex
from typing import Self

from ankh_lib.apps.definition import AppDefinition, GuestKind
from ankh_lib.apps.registry import get_app
from ankh_lib.core.config import CFG
from ankh_lib.core.error import AnkhCommandError, AnkhError
from ankh_lib.core.logger import get_logger
from ankh_lib.provision import Proxmox, get_guest_ip

logger = get_logger(__name__)


class Updater:
    """
    Runs the update procedure of an application inside its guest.
    """

    def __init__(self, app: AppDefinition, proxmox: Proxmox):
        self._app = app
        self._proxmox = proxmox
        self._vm = app.kind == GuestKind.VM

    @classmethod
    def fromName(cls, name: str, dry_run: bool = False) -> Self:
        return cls(get_app(name), Proxmox(dry_run))

    @property
    def app(self) -> AppDefinition:
        return self._app

    @property
    def proxmox(self) -> Proxmox:
        return self._proxmox

    def findGuest(self, guest_id: int | None) -> int:
        """
        Return the ID of the guest to update.

        If no ID is given, the guest is looked up by the application name.

        Raises:
            AnkhError: If the application has no update procedure, or no
                running guest of the application can be found.
        """
        if not self._app.update_commands:
            raise AnkhError(f"Application '{self._app.name}' has no update procedure.")

        if guest_id is None:
            guest_id = self._proxmox.findGuestByName(self._app.slug, self._vm)
            if guest_id is None:
                raise AnkhError(
                    f"No {self._app.kind} running {self._app.name} found. Use --id to select it."
                )

        if not self._proxmox.isRunning(guest_id, self._vm):
            raise AnkhError(f"Guest {guest_id} is not running.")

        return guest_id

    def updateScript(self) -> str:
        """Shell script running the update commands in the install directory."""
        commands = list(self._app.update_commands)
        if self._app.install_dir:
            commands.insert(0, f"cd {shlex.quote(self._app.install_dir)}")
        # a failed download in a pipeline must fail the update
        return " && ".join(["set -o pipefail", *commands])

    def update(self, guest_id: int) -> str | None:
        """
        Update the application inside the guest.

        Returns:
            str | None: The installed version after the update, if the application reports one.

        Raises:
            AnkhCommandError: If the update commands fail; the exit code of the guest is preserved.
        """
        logger.info(f"Updating {self._app.name} in guest {guest_id}.")
        self._proxmox.run(self._guestCommand(guest_id, self.updateScript()), stream=True)

        if not self._app.version_command or self._proxmox.dry_run:
            return None

        try:
            return self._proxmox.run(
                self._guestCommand(guest_id, self._app.version_command), modifies=False
            ) or None
        except AnkhCommandError as e:
            logger.warning(f"Could not determine the installed version: {e}")
            return None

    def _guestCommand(self, guest_id: int, script: str) -> list[str]:
        """Command executing a shell script inside the guest."""
        if not self._vm:
            return ["pct", "exec", str(guest_id), "--", "bash", "-c", script]

        ip = get_guest_ip(self._proxmox, guest_id)
        return [
            "ssh",
            "-o",
            "StrictHostKeyChecking=no",
            "-o",
            f"ConnectTimeout={CFG.timeouts.ssh_connect}",
            f"root@{ip}",
            script,
        ]
