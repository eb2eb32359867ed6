# Released under MIT License.
# Copyright (c) 2025 The ankh developers

"""
Creation and inspection of Proxmox VE guests.

This package wraps the Proxmox command-line tools (`Proxmox`) and builds
application guests on top of them: `ContainerBuilder` for LXC containers
and `VirtualMachineBuilder` for cloud-image based virtual machines.
"""

from ankh_lib.apps.definition import AppDefinition, GuestKind
from ankh_lib.settings.value import ResolvedSettings

from .builder import Builder, BuildResult
from .container import ContainerBuilder
from .guest import get_container_ip, get_guest_ip
from .proxmox import Proxmox
from .vm import VirtualMachineBuilder


def get_builder(
    proxmox: Proxmox, app: AppDefinition, settings: ResolvedSettings
) -> Builder:
    """Return the builder matching the guest kind of the application."""
    if app.kind == GuestKind.VM:
        return VirtualMachineBuilder(proxmox, app, settings)
    return ContainerBuilder(proxmox, app, settings)


__all__ = [
    "Builder",
    "BuildResult",
    "ContainerBuilder",
    "Proxmox",
    "VirtualMachineBuilder",
    "get_builder",
    "get_container_ip",
    "get_guest_ip",
]
