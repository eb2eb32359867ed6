# Released under MIT License.
# Copyright (c) 2025 The ankh developers

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

from ankh_lib.core.config import CFG
from ankh_lib.core.error import AnkhSchemaError
from ankh_lib.settings.schema import validate_builtins


class GuestKind(Enum):
    """
    Kind of guest an application is provisioned into.
    """

    CONTAINER = 1
    VM = 2

    def __str__(self) -> str:
        return "LXC container" if self == GuestKind.CONTAINER else "virtual machine"


@dataclass(frozen=True)
class AppDefinition:
    """
    Static description of an application that ankh can provision.

    Definitions are validated when they are created, so that authoring
    mistakes surface when ankh starts rather than halfway through provisioning.
    """

    # Display name of the application.
    name: str

    # Identifier used on the command line and for the per-app defaults file.
    slug: str

    # Whether the application runs in an LXC container or a VM.
    kind: GuestKind

    # Built-in defaults overriding the base defaults of the settings catalog.
    defaults: dict[str, Any] = field(default_factory=dict)

    # Port of the web interface.
    port: int | None = None

    # Upstream project URL.
    source: str | None = None

    # Directory inside the guest where the application is installed.
    install_dir: str | None = None

    # Name of the guest-side install script (containers only).
    install_script: str | None = None

    # Commands run inside the guest to update the application.
    update_commands: tuple[str, ...] = ()

    # Command printing the installed version inside the guest.
    version_command: str | None = None

    # Notes printed after successful provisioning.
    notes: tuple[str, ...] = ()

    # Cloud image the VM is created from (VMs only).
    cloud_image_url: str | None = None

    # Extra packages installed by cloud-init (VMs only).
    packages: tuple[str, ...] = ()

    # Commands run by cloud-init on first boot (VMs only).
    runcmd: tuple[str, ...] = ()

    # TCP ports opened in the guest firewall with a comment (VMs only).
    firewall_ports: tuple[tuple[int, str], ...] = ()

    def __post_init__(self):
        validate_builtins(self.name, self.defaults)

        if self.kind == GuestKind.VM and not self.cloud_image_url:
            raise AnkhSchemaError(f"VM application '{self.name}' has no cloud image.")

        if self.kind == GuestKind.CONTAINER and not self.install_script:
            raise AnkhSchemaError(
                f"Container application '{self.name}' has no install script."
            )

    def builtins(self) -> dict[str, Any]:
        """
        Built-in defaults of the application, including the hostname.
        """
        return {"var_hostname": self.slug, **self.defaults}

    def url(self, ip: str) -> str | None:
        """
        URL of the web interface for a guest with the given IP address.
        """
        if self.port is None:
            return None
        return f"http://{ip}:{self.port}"

    def cloudImageFile(self) -> Path:
        """
        Path on the Proxmox host where the cloud image is cached.
        """
        if not self.cloud_image_url:
            raise AnkhSchemaError(f"Application '{self.name}' has no cloud image.")
        return Path(CFG.paths.cloud_image_dir) / Path(urlparse(self.cloud_image_url).path).name
