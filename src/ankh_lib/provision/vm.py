# Released under MIT License.
# Copyright (c) 2025 The ankh developers

"""
Provisioning of applications into virtual machines.

A VM is built from a cloud image: the image is downloaded once and cached on
the host, a cloud-init user-data snippet is generated, and the VM is created,
configured through `qm set`, resized and started. The application itself is
installed by cloud-init on first boot.
"""

import re
from pathlib import Path

from ankh_lib.core.config import CFG
from ankh_lib.core.error import AnkhCommandError, AnkhProvisionError
from ankh_lib.core.logger import get_logger

from .builder import Builder, BuildResult
from .cloud_init import build_user_data, render_user_data, snippet_volume, write_snippet
from .network import ip_config, vm_net
from .ssh_key import collect_ssh_key

logger = get_logger(__name__)


class VirtualMachineBuilder(Builder):
    """
    Creates a virtual machine running an application.
    """

    def build(self) -> BuildResult:
        vmid = self._proxmox.ensureIdAvailable(self._settings.get("var_id"))
        logger.info(f"Creating {self._app.kind} {vmid} for {self._app.name}.")

        # fail before touching the host if the network settings are unusable
        ipconfig = ip_config(self._settings)

        image = self._downloadCloudImage()
        ssh_key = collect_ssh_key(self._settings.get("var_ssh_key"))
        self._writeUserData(vmid, ssh_key)

        self._create(vmid)
        volume = self._importDisk(vmid, image)
        self._configure(vmid, volume, ipconfig)

        disk = f"{self._settings.require('var_disk')}G"
        logger.info(f"Resizing the disk of VM {vmid} to {disk}.")
        self._proxmox.qm("resize", str(vmid), "scsi0", disk)

        logger.info(f"Starting VM {vmid}.")
        self._proxmox.qm("start", str(vmid))
        self._proxmox.setDescription(vmid, self._description(), vm=True)

        ip = self._settings.get("var_ip")
        return BuildResult(vmid, ip.split("/")[0] if ip and ip != "dhcp" else None)

    def _downloadCloudImage(self) -> Path:
        """
        Download the cloud image unless it is already cached on the host.

        Raises:
            AnkhProvisionError: With code 240 if the download fails.
        """
        image = self._app.cloudImageFile()
        if image.is_file():
            logger.info(f"Using cached cloud image '{image}'.")
            return image

        if self._proxmox.dry_run:
            logger.info(f"[dry-run] download '{self._app.cloud_image_url}' to '{image}'")
            return image

        logger.info(f"Downloading cloud image '{self._app.cloud_image_url}'.")
        try:
            image.parent.mkdir(parents=True, exist_ok=True)
            self._proxmox.run(
                ["curl", "-fSL", "-o", str(image), str(self._app.cloud_image_url)]
            )
        except (AnkhCommandError, OSError) as e:
            # remove the partial image
            image.unlink(missing_ok=True)
            raise AnkhProvisionError(f"Failed to download the cloud image: {e}", 240) from e

        return image

    def _writeUserData(self, vmid: int, ssh_key: str) -> None:
        user_data = build_user_data(self._app, self._hostname(), ssh_key)
        content = render_user_data(user_data)

        if self._proxmox.dry_run:
            logger.info(f"[dry-run] write cloud-init snippet '{snippet_volume(self._app, vmid)}'")
            logger.debug(content)
            return

        write_snippet(self._app, vmid, content)

    def _create(self, vmid: int) -> None:
        settings = self._settings
        storage = settings.require("var_storage")
        command = [
            "create",
            str(vmid),
            "--name",
            self._hostname(),
            "--cores",
            str(settings.require("var_cpu")),
            "--memory",
            str(settings.require("var_ram")),
            "--net0",
            vm_net(settings),
            "--ostype",
            CFG.vm.ostype,
            "--machine",
            CFG.vm.machine,
            "--bios",
            CFG.vm.bios,
            "--efidisk0",
            f"{storage}:0,efitype=4m,pre-enrolled-keys=0",
            "--agent",
            "enabled=1",
            "--onboot",
            "1",
            "--tags",
            self._tags(","),
        ]

        try:
            self._proxmox.qm(*command)
        except AnkhCommandError as e:
            raise AnkhProvisionError(
                f"Failed to create VM {vmid}: {e.stderr or e}", 242
            ) from e

    def _importDisk(self, vmid: int, image: Path) -> str:
        """
        Import the cloud image as a disk of the VM.

        Returns:
            str: Volume ID of the imported disk.
        """
        storage = self._settings.require("var_storage")
        logger.info(f"Importing the cloud image into storage '{storage}'.")
        output = self._proxmox.qm(
            "importdisk", str(vmid), str(image), storage, "--format", CFG.vm.disk_format
        )
        return self.parseImportedVolume(output) or f"{storage}:vm-{vmid}-disk-1"

    @staticmethod
    def parseImportedVolume(output: str) -> str | None:
        """
        Extract the volume ID from the output of `qm importdisk`.

        The relevant line looks like `Successfully imported disk as 'unused0:local-lvm:vm-100-disk-1'`.
        """
        if match := re.search(r"'unused\d+:([^']+)'", output):
            return match.group(1)
        return None

    def _configure(self, vmid: int, volume: str, ipconfig: str) -> None:
        storage = self._settings.require("var_storage")
        self._proxmox.qm(
            "set",
            str(vmid),
            "--scsihw",
            CFG.vm.scsihw,
            "--scsi0",
            f"{volume},discard=on,ssd=1",
            "--boot",
            "order=scsi0",
            "--ide2",
            f"{storage}:cloudinit",
            "--serial0",
            "socket",
            "--vga",
            "serial0",
            "--ipconfig0",
            ipconfig,
            "--cicustom",
            f"user={snippet_volume(self._app, vmid)}",
        )
