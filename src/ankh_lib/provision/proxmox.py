# Released under MIT License.
# Copyright (c) 2025 The ankh developers

"""
Thin wrapper around the Proxmox VE command-line tools.

`Proxmox` runs `qm`, `pct`, `pvesh` and `pveam` as subprocesses. It does not
reimplement any of their logic; it only records the last executed command,
turns non-zero exit codes into `AnkhCommandError` (preserving the code) and
performs the guest-ID checks that have their own codes in the exit-code
taxonomy.
"""

import json
import shlex
import shutil
import subprocess
from dataclasses import dataclass

from ankh_lib.core.error import AnkhCommandError, AnkhError, AnkhProvisionError
from ankh_lib.core.logger import get_logger

logger = get_logger(__name__)

# lowest guest ID accepted by Proxmox VE
MIN_GUEST_ID = 100


@dataclass(frozen=True)
class GuestListEntry:
    """
    A single guest as listed by `qm list` or `pct list`.
    """

    vmid: int
    name: str
    status: str


class Proxmox:
    """
    Interface to the Proxmox VE command-line tools of the local host.
    """

    def __init__(self, dry_run: bool = False):
        """
        Args:
            dry_run (bool): Only log the commands that modify the host instead of running them.
                Read-only queries are still executed.
        """
        self._dry_run = dry_run
        self.last_command: list[str] | None = None

    @staticmethod
    def isAvailable() -> bool:
        """Whether the Proxmox VE tools are installed on this machine."""
        return shutil.which("qm") is not None and shutil.which("pct") is not None

    @property
    def dry_run(self) -> bool:
        return self._dry_run

    def run(self, command: list[str], modifies: bool = True, stream: bool = False) -> str:
        """
        Run an external command and return its standard output.

        Args:
            command (list[str]): The command and its arguments.
            modifies (bool): Whether the command changes the state of the host.
                Such commands are skipped in dry-run mode.
            stream (bool): Connect the command to the terminal instead of capturing
                its output. Used for long-running commands the user should watch.

        Returns:
            str: Standard output of the command with surrounding whitespace removed.
                Empty if the output was streamed.

        Raises:
            AnkhCommandError: If the command exits with a non-zero code or cannot be executed.
        """
        self.last_command = command
        if self._dry_run and modifies:
            logger.info(f"[dry-run] {shlex.join(command)}")
            return ""

        logger.debug(shlex.join(command))
        try:
            result = subprocess.run(
                command,
                text=True,
                check=False,
                capture_output=not stream,
                errors="replace",
            )
        except FileNotFoundError as e:
            # mirror the shell: command not found
            raise AnkhCommandError(command, 127, str(e)) from e

        stdout = (result.stdout or "").strip()
        if stdout:
            logger.debug(stdout)

        if result.returncode != 0:
            # killed by a signal: report it the way the shell does
            code = result.returncode if result.returncode > 0 else 128 - result.returncode
            raise AnkhCommandError(command, code, result.stderr or "")

        return stdout

    def qm(self, *args: str, modifies: bool = True) -> str:
        """Run `qm` with the given arguments."""
        return self.run(["qm", *args], modifies)

    def pct(self, *args: str, modifies: bool = True) -> str:
        """Run `pct` with the given arguments."""
        return self.run(["pct", *args], modifies)

    def pvesh(self, *args: str) -> str:
        """Run a read-only `pvesh` query."""
        return self.run(["pvesh", *args], modifies=False)

    def pveam(self, *args: str, modifies: bool = False) -> str:
        """Run `pveam` with the given arguments."""
        return self.run(["pveam", *args], modifies)

    def nextId(self) -> int:
        """
        Return the next free guest ID of the cluster.

        Raises:
            AnkhProvisionError: If the answer of Proxmox is not a number.
        """
        output = self.pvesh("get", "/cluster/nextid")
        try:
            return int(output.strip().strip('"'))
        except ValueError as e:
            raise AnkhProvisionError(
                f"Could not determine the next free guest ID: unexpected answer '{output}'.",
                203,
            ) from e

    def usedIds(self) -> set[int]:
        """
        Return the IDs of all guests (VMs and containers) in the cluster.
        """
        output = self.pvesh(
            "get", "/cluster/resources", "--type", "vm", "--output-format", "json"
        )
        try:
            resources = json.loads(output or "[]")
        except json.JSONDecodeError as e:
            raise AnkhError(f"Could not parse the list of cluster resources: {e}.") from e

        return {int(r["vmid"]) for r in resources if "vmid" in r}

    def ensureIdAvailable(self, guest_id: int | None) -> int:
        """
        Validate a guest ID before creating a guest.

        Args:
            guest_id (int | None): The requested ID. If None, the next free ID is used.

        Returns:
            int: The validated guest ID.

        Raises:
            AnkhProvisionError: With code 205 if the ID is lower than 100
                and with code 206 if the ID is already used.
        """
        if guest_id is None:
            guest_id = self.nextId()
            logger.info(f"Using the next free guest ID: {guest_id}.")

        if guest_id < MIN_GUEST_ID:
            raise AnkhProvisionError(
                f"Invalid guest ID '{guest_id}': IDs lower than {MIN_GUEST_ID} are reserved.",
                205,
            )

        if guest_id in self.usedIds():
            raise AnkhProvisionError(f"Guest ID '{guest_id}' is already in use.", 206)

        return guest_id

    def listVms(self) -> list[GuestListEntry]:
        """
        Return the virtual machines of this node as reported by `qm list`.
        """
        output = self.qm("list", modifies=False)
        entries = []
        # skip the header line
        for line in output.splitlines()[1:]:
            parts = line.split()
            if len(parts) < 3 or not parts[0].isdigit():
                continue
            entries.append(GuestListEntry(int(parts[0]), parts[1], parts[2]))

        return entries

    def listContainers(self) -> list[GuestListEntry]:
        """
        Return the containers of this node as reported by `pct list`.
        """
        output = self.pct("list", modifies=False)
        entries = []
        for line in output.splitlines()[1:]:
            parts = line.split()
            # the Lock column is usually empty, the name is always last
            if len(parts) < 3 or not parts[0].isdigit():
                continue
            entries.append(GuestListEntry(int(parts[0]), parts[-1], parts[1]))

        return entries

    def findGuestByName(self, name: str, vm: bool) -> int | None:
        """
        Return the ID of the first guest whose name contains `name` (case-insensitive).

        Args:
            name (str): Part of the guest name to look for.
            vm (bool): Search virtual machines if True, containers otherwise.
        """
        for entry in self.listVms() if vm else self.listContainers():
            if name.lower() in entry.name.lower():
                logger.debug(f"Found guest '{entry.name}' with ID {entry.vmid}.")
                return entry.vmid
        return None

    def setDescription(self, guest_id: int, description: str, vm: bool) -> None:
        """
        Set the description shown in the Proxmox web UI for a guest.
        """
        tool = self.qm if vm else self.pct
        tool("set", str(guest_id), "--description", description)

    def isRunning(self, guest_id: int, vm: bool) -> bool:
        """Whether the guest is running according to `qm status` or `pct status`."""
        tool = self.qm if vm else self.pct
        return tool("status", str(guest_id), modifies=False).split()[-1:] == ["running"]
