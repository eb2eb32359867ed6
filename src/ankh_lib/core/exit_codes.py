# Released under MIT License.
# Copyright (c) 2025 The ankh developers

"""
Exit-code taxonomy of ankh.

Exit codes are partitioned into three disjoint ranges, each belonging to one
layer of the provisioning stack:

    1-99      generic Unix / network errors
    100-199   package-manager and database errors
    200-299   Proxmox VE errors

Shell-reserved codes (126-143) are listed explicitly and belong to the generic
layer even though they numerically fall into the 100-199 range. Codes that are
not listed in the table are reported using the fallback category of the range
they belong to.

The table is immutable and is defined once at import time.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Self


class Layer(Enum):
    """
    Layer of the provisioning stack an exit code belongs to.
    """

    GENERIC = 1
    PACKAGE = 2
    PROXMOX = 3
    UNKNOWN = 4

    def __str__(self) -> str:
        """
        Return the human-readable name of the layer.
        """
        return {
            Layer.GENERIC: "generic",
            Layer.PACKAGE: "package/database-layer",
            Layer.PROXMOX: "Proxmox-layer",
            Layer.UNKNOWN: "unknown",
        }[self]

    @classmethod
    def fromCode(cls, code: int) -> Self:
        """
        Determine the layer of an exit code based purely on its range.

        Args:
            code (int): The exit code.

        Returns:
            Layer: The layer of the range, or UNKNOWN for codes outside 1-299.
        """
        if 1 <= code <= 99:
            return cls.GENERIC
        if 100 <= code <= 199:
            return cls.PACKAGE
        if 200 <= code <= 299:
            return cls.PROXMOX
        return cls.UNKNOWN


@dataclass(frozen=True)
class ExitCodeEntry:
    """
    Description of a single exit code.
    """

    # The exit code.
    code: int

    # Layer the exit code belongs to.
    layer: Layer

    # Human-readable category.
    description: str

    # Suggested remediation.
    hint: str

    @property
    def known(self) -> bool:
        """Whether the entry comes from the table (as opposed to a range fallback)."""
        return EXIT_CODES.get(self.code) is self


def _entries(layer: Layer, *rows: tuple[int, str, str]) -> dict[int, ExitCodeEntry]:
    return {code: ExitCodeEntry(code, layer, desc, hint) for code, desc, hint in rows}


_CHECK_NETWORK = "Check the network connectivity and DNS of the Proxmox host."
_CHECK_STORAGE = "Check the storage configuration in the Proxmox web UI (Datacenter > Storage)."
_CHECK_TEMPLATE = (
    "Run 'pveam update' and retry; remove the cached template if it is corrupted."
)

EXIT_CODES: MappingProxyType[int, ExitCodeEntry] = MappingProxyType(
    _entries(
        Layer.GENERIC,
        (1, "General error", "Re-run with ANKH_DEBUG=1 to see the failing command."),
        (2, "Misuse of shell builtins", "Check the syntax of the executed command."),
        (6, "DNS resolution failed", _CHECK_NETWORK),
        (7, "Failed to connect", _CHECK_NETWORK),
        (18, "Partial file transfer", "Retry the download; the remote end closed early."),
        (22, "HTTP error returned", "Check that the requested URL exists and is reachable."),
        (28, "Operation timed out", _CHECK_NETWORK),
        (35, "SSL/TLS handshake failed", "Check the system clock and CA certificates."),
        (99, "Unexpected internal error", "This is a bug. Re-run with ANKH_DEBUG=1 and report it."),
        (126, "Command cannot execute", "Check permissions of the executed file."),
        (127, "Command not found", "Install the missing tool or fix PATH."),
        (128, "Invalid argument to exit", "The failing script exited with an invalid code."),
        (130, "Terminated by Ctrl+C (SIGINT)", "Re-run the command when ready."),
        (137, "Killed (SIGKILL / out of memory)", "Increase RAM or check the host's OOM killer log."),
        (139, "Segmentation fault", "The executed program crashed; check its logs."),
        (143, "Terminated (SIGTERM)", "Re-run the command; something stopped it."),
    )
    | _entries(
        Layer.PACKAGE,
        (100, "APT: package manager error", "Run 'apt --fix-broken install' in the guest and retry."),
        (101, "APT: configuration error", "Check /etc/apt/sources.list and sources.list.d in the guest."),
        (170, "PostgreSQL: connection failed", "Check that PostgreSQL is running and listening."),
        (171, "PostgreSQL: authentication failed", "Check the database user and password."),
        (172, "PostgreSQL: database does not exist", "Create the database or fix its name."),
        (173, "PostgreSQL: fatal error in query", "Check the PostgreSQL logs in the guest."),
        (180, "MySQL/MariaDB: connection failed", "Check that the MySQL/MariaDB service is running."),
        (181, "MySQL/MariaDB: authentication failed", "Check the database user and password."),
        (182, "MySQL/MariaDB: database does not exist", "Create the database or fix its name."),
        (183, "MySQL/MariaDB: fatal error in query", "Check the MySQL/MariaDB logs in the guest."),
        (190, "MongoDB: connection failed", "Check that mongod is running and listening."),
        (191, "MongoDB: authentication failed", "Check the database user and password."),
        (192, "MongoDB: database not found", "Create the database or fix its name."),
        (193, "MongoDB: fatal query error", "Check the MongoDB logs in the guest."),
    )
    | _entries(
        Layer.PROXMOX,
        (203, "Missing CTID variable", "Set var_id (or CTID/VMID) or let ankh pick the next free ID."),
        (204, "Missing PCT_OSTYPE variable", "Set var_os for the application."),
        (205, "Invalid CTID (<100)", "Use a guest ID of 100 or higher."),
        (206, "CTID already in use", "Pick another ID or remove the existing guest ('pct list' / 'qm list')."),
        (207, "Password contains unescaped special characters", "Quote or escape the password."),
        (208, "Invalid configuration (DNS/MAC/network format)", "Check var_ip, var_gateway and var_bridge."),
        (209, "Container creation failed", "Check the output of 'pct create' above and the storage."),
        (210, "Cluster not quorate", "Restore cluster quorum ('pvecm status') and retry."),
        (211, "Timeout waiting for template lock", "Another download of the template is running; wait and retry."),
        (212, "Storage type 'iscsidirect' does not support containers", "Choose another storage (var_storage)."),
        (213, "Storage does not support 'rootdir' content", "Enable 'Container' content on the storage or choose another one."),
        (214, "Not enough storage space", "Free space on the storage or reduce var_disk."),
        (215, "Container created but not listed (ghost state)", "Check 'pct list' and /etc/pve/lxc for leftovers."),
        (216, "RootFS entry missing in config", "Remove the broken container and retry."),
        (217, "Storage not accessible", _CHECK_STORAGE),
        (218, "Template file corrupted or incomplete", _CHECK_TEMPLATE),
        (219, "CephFS does not support containers", "Use an RBD storage for containers."),
        (220, "Unable to resolve template path", _CHECK_TEMPLATE),
        (221, "Template file not readable", _CHECK_TEMPLATE),
        (222, "Template download failed", _CHECK_TEMPLATE),
        (223, "Template not available after download", _CHECK_TEMPLATE),
        (224, "PBS storage is for backups only", "Choose another storage (var_storage)."),
        (225, "No template available for OS/version", "Check var_os and var_version against 'pveam available'."),
        (231, "LXC stack upgrade failed", "Run 'apt update && apt full-upgrade' on the host."),
        (240, "Cloud image download failed", "Check the network and the cloud image URL."),
        (241, "SSH public key missing", "Set var_ssh_key (or SSH_KEY) or create ~/.ssh/id_ed25519.pub."),
        (242, "VM creation failed", "Check the output of 'qm create' above and the storage."),
        (243, "Guest IP could not be determined", "Check that the QEMU guest agent runs in the VM."),
    )
)


def describe(code: int) -> ExitCodeEntry:
    """
    Look up an exit code in the taxonomy.

    Args:
        code (int): The exit code to look up.

    Returns:
        ExitCodeEntry: The entry from the table. For unlisted codes, a fallback
            entry describing an unknown error of the code's layer.
    """
    if entry := EXIT_CODES.get(code):
        return entry

    layer = Layer.fromCode(code)
    if layer == Layer.UNKNOWN:
        description = "unknown error"
    else:
        description = f"unknown {layer} error"

    return ExitCodeEntry(
        code,
        layer,
        description,
        "Re-run with ANKH_DEBUG=1 and inspect the output of the failing command.",
    )
