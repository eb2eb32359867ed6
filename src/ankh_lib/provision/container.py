# Released under MIT License.
# Copyright (c) 2025 The ankh developers

"""
Provisioning of applications into LXC containers.

The container is created from the newest matching OS template (downloaded
with `pveam` if it is not present in the template storage), started, and
the application's guest-side install script is run inside it.
"""

import shlex

from ankh_lib.core.config import CFG
from ankh_lib.core.error import AnkhCommandError, AnkhProvisionError
from ankh_lib.core.logger import get_logger

from .builder import Builder, BuildResult
from .guest import get_container_ip
from .network import container_net

logger = get_logger(__name__)


class ContainerBuilder(Builder):
    """
    Creates an LXC container running an application.
    """

    def build(self) -> BuildResult:
        ctid = self._proxmox.ensureIdAvailable(self._settings.get("var_id"))
        logger.info(f"Creating {self._app.kind} {ctid} for {self._app.name}.")

        # fail before touching the host if the network settings are unusable
        net = container_net(self._settings)

        template = self._ensureTemplate()
        self._create(ctid, template, net)

        logger.info(f"Starting container {ctid}.")
        self._proxmox.pct("start", str(ctid))

        self._install(ctid)
        self._proxmox.setDescription(ctid, self._description(), vm=False)

        ip = None
        if not self._proxmox.dry_run:
            try:
                ip = get_container_ip(self._proxmox, ctid)
            except AnkhProvisionError as e:
                logger.warning(str(e))

        return BuildResult(ctid, ip)

    def templatePrefix(self) -> str:
        """Prefix of the template names matching the configured OS and version."""
        return f"{self._settings.require('var_os')}-{self._settings.require('var_version')}"

    def _ensureTemplate(self) -> str:
        """
        Return the volume ID of the OS template, downloading it if necessary.

        Raises:
            AnkhProvisionError: With code 225 if no template matches the OS
                and with code 222 if the download fails.
        """
        storage = CFG.paths.template_storage
        prefix = self.templatePrefix()

        if local := self.findLocalTemplate(
            self._proxmox.pveam("list", storage), prefix
        ):
            logger.info(f"Using template '{local}'.")
            return local

        available = self.findAvailableTemplate(
            self._proxmox.pveam("available", "--section", "system"), prefix
        )
        if not available:
            raise AnkhProvisionError(
                f"No container template available for '{prefix}'.", 225
            )

        logger.info(f"Downloading template '{available}' into storage '{storage}'.")
        try:
            self._proxmox.pveam("download", storage, available, modifies=True)
        except AnkhCommandError as e:
            raise AnkhProvisionError(
                f"Failed to download template '{available}': {e.stderr or e}", 222
            ) from e

        return f"{storage}:vztmpl/{available}"

    @staticmethod
    def findLocalTemplate(output: str, prefix: str) -> str | None:
        """
        Find the newest template in the output of `pveam list` whose name starts with `prefix`.

        Returns:
            str | None: Volume ID of the template, e.g. 'local:vztmpl/debian-12-standard_12.7-1_amd64.tar.zst'.
        """
        matches = []
        for line in output.splitlines():
            parts = line.split()
            if not parts or ":vztmpl/" not in parts[0]:
                continue
            if parts[0].split(":vztmpl/", 1)[1].startswith(prefix):
                matches.append(parts[0])

        return sorted(matches)[-1] if matches else None

    @staticmethod
    def findAvailableTemplate(output: str, prefix: str) -> str | None:
        """
        Find the newest template in the output of `pveam available` whose name starts with `prefix`.
        """
        matches = [
            parts[1]
            for line in output.splitlines()
            if len(parts := line.split()) >= 2 and parts[1].startswith(prefix)
        ]
        return sorted(matches)[-1] if matches else None

    def _create(self, ctid: int, template: str, net: str) -> None:
        settings = self._settings
        command = [
            "create",
            str(ctid),
            template,
            "--hostname",
            self._hostname(),
            "--cores",
            str(settings.require("var_cpu")),
            "--memory",
            str(settings.require("var_ram")),
            "--rootfs",
            f"{settings.require('var_storage')}:{settings.require('var_disk')}",
            "--net0",
            net,
            "--unprivileged",
            "1" if settings.get("var_unprivileged") else "0",
            "--features",
            CFG.container.features,
            "--tags",
            self._tags(";"),
            "--onboot",
            "1",
        ]

        try:
            self._proxmox.pct(*command)
        except AnkhCommandError as e:
            raise AnkhProvisionError(
                f"Failed to create container {ctid}: {e.stderr or e}", 209
            ) from e

    def installScript(self) -> str:
        """
        Shell script downloading and running the guest-side install script.

        The shared install functions are exported as `FUNCTIONS_FILE_PATH` for the
        script to source. Any failed download aborts the script with curl's exit code.
        """
        base_url = CFG.baseUrl()
        functions_url = f"{base_url}/{CFG.sources.functions_file}"
        script_url = f"{base_url}/{CFG.sources.install_dir}/{self._app.install_script}"
        return "\n".join(
            [
                "set -euo pipefail",
                f"FUNCTIONS_FILE_PATH=\"$(curl -fsSL {shlex.quote(functions_url)})\"",
                "export FUNCTIONS_FILE_PATH",
                f"install_script=\"$(curl -fsSL {shlex.quote(script_url)})\"",
                'bash -c "$install_script"',
            ]
        )

    def _install(self, ctid: int) -> None:
        """Run the guest-side install script inside the container."""
        logger.info(f"Installing {self._app.name} inside container {ctid}.")
        self._proxmox.run(
            ["pct", "exec", str(ctid), "--", "bash", "-c", self.installScript()],
            stream=True,
        )
