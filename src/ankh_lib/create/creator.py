# Released under MIT License.
# Copyright (c) 2025 The ankh developers

import os
from typing import Self

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from ankh_lib.apps.definition import AppDefinition, GuestKind
from ankh_lib.apps.registry import get_app
from ankh_lib.core.error import AnkhError
from ankh_lib.core.logger import get_logger
from ankh_lib.provision import BuildResult, Proxmox, get_builder
from ankh_lib.settings.defaults import DefaultsStore, Scope
from ankh_lib.settings.resolver import ConfigResolver
from ankh_lib.settings.value import ResolvedSettings
from ankh_lib.settings.wizard import Wizard

logger = get_logger(__name__)


class Creator:
    """
    Provisions a new guest running an application.
    """

    def __init__(self, app: AppDefinition, resolver: ConfigResolver, proxmox: Proxmox):
        self._app = app
        self._resolver = resolver
        self._proxmox = proxmox

    @classmethod
    def fromName(cls, name: str, dry_run: bool = False) -> Self:
        """
        Create a Creator for a registered application.

        Raises:
            AnkhError: If the application is not registered.
        """
        app = get_app(name)
        return cls(app, ConfigResolver(DefaultsStore.fromConfig(), app.slug), Proxmox(dry_run))

    @property
    def app(self) -> AppDefinition:
        return self._app

    @property
    def proxmox(self) -> Proxmox:
        return self._proxmox

    def ensureHost(self) -> None:
        """
        Make sure that ankh runs as root on a Proxmox VE host.

        Skipped in dry-run mode.

        Raises:
            AnkhError: If the Proxmox tools are missing or the user is not root.
        """
        if self._proxmox.dry_run:
            logger.debug("Dry run, skipping the host checks.")
            return

        if not Proxmox.isAvailable():
            raise AnkhError(
                "This command must run on a Proxmox VE host ('qm' and 'pct' not found)."
            )

        if os.geteuid() != 0:
            raise AnkhError("This command must run as root.")

    def configure(
        self, console: Console, advanced: bool = False, save: Scope | None = None
    ) -> ResolvedSettings:
        """
        Resolve (and in advanced mode edit) the settings of the new guest.
        """
        return Wizard(self._resolver, self._app, console).run(advanced, save)

    def create(self, settings: ResolvedSettings) -> BuildResult:
        """
        Build the guest.

        Raises:
            AnkhError: If provisioning fails. The error carries the exit code of the failure.
        """
        return get_builder(self._proxmox, self._app, settings).build()

    def createSummaryPanel(self, result: BuildResult) -> Group:
        """
        Create a Rich panel with the address of the new guest and the application notes.
        """
        lines = [Text(f"Guest ID: {result.guest_id} ({self._app.kind})")]

        if result.ip and (url := self._app.url(result.ip)):
            lines.append(Text(f"Access it at: {url}", style="bright_green bold"))
        else:
            lines.append(
                Text(
                    f"Once the guest has booted, run 'ankh ip {result.guest_id}"
                    f"{'' if self._app.kind == GuestKind.VM else ' --container'}' to get its address.",
                )
            )

        if self._app.notes:
            lines.append(Text(""))
            lines.extend(Text(note, style="grey70") for note in self._app.notes)

        panel = Panel(
            Group(*lines),
            title=Text(f"{self._app.name.upper()} CREATED", style="white bold"),
            border_style="bright_green",
            padding=(1, 1),
            expand=False,
        )
        return Group(Text(""), panel, Text(""))
