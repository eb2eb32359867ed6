# Released under MIT License.
# Copyright (c) 2025 The ankh developers

"""
Base functionality for provisioning guests.

This module defines the `Builder` class shared by the container and the
virtual machine builders. It holds the application definition, the resolved
settings and the interface to the Proxmox tools.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from ankh_lib.apps.definition import AppDefinition
from ankh_lib.core.logger import get_logger
from ankh_lib.settings.value import ResolvedSettings

from .proxmox import Proxmox

logger = get_logger(__name__)


@dataclass(frozen=True)
class BuildResult:
    """
    Outcome of a successful build.
    """

    # ID of the created guest.
    guest_id: int

    # IPv4 address of the guest, if it could be determined.
    ip: str | None = None


class Builder(ABC):
    """
    Base class for creating a guest running an application.

    Attributes:
        _proxmox (Proxmox): Interface to the Proxmox tools.
        _app (AppDefinition): The application to provision.
        _settings (ResolvedSettings): Resolved settings of the guest.
    """

    def __init__(
        self, proxmox: Proxmox, app: AppDefinition, settings: ResolvedSettings
    ):
        self._proxmox = proxmox
        self._app = app
        self._settings = settings

    @abstractmethod
    def build(self) -> BuildResult:
        """
        Create and start the guest.

        Returns:
            BuildResult: ID and (if known) IP address of the new guest.

        Raises:
            AnkhError: If any step of the provisioning fails.
        """

    def _hostname(self) -> str:
        return self._settings.get("var_hostname") or self._app.slug

    def _tags(self, separator: str) -> str:
        """Tags of the guest joined by the given separator; always includes 'ankh'."""
        tags = [t for t in (self._settings.get("var_tags") or "").split(";") if t]
        if "ankh" not in tags:
            tags.insert(0, "ankh")
        return separator.join(tags)

    def _description(self) -> str:
        lines = [f"{self._app.name}", "Provisioned by ankh."]
        if self._app.source:
            lines.append(f"Source: {self._app.source}")
        return "\n".join(lines)
