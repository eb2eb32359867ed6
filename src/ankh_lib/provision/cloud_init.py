# Released under MIT License.
# Copyright (c) 2025 The ankh developers

from pathlib import Path

import yaml

from ankh_lib.apps.definition import AppDefinition
from ankh_lib.core.common import load_yaml_dumper
from ankh_lib.core.config import CFG
from ankh_lib.core.error import AnkhProvisionError
from ankh_lib.core.logger import get_logger

logger = get_logger(__name__)

Dumper: type[yaml.SafeDumper] = load_yaml_dumper()

SSH_HARDENING = (
    "PermitRootLogin prohibit-password\n"
    "PasswordAuthentication no\n"
    "PubkeyAuthentication yes\n"
)


def build_user_data(app: AppDefinition, hostname: str, ssh_key: str) -> dict:
    """
    Build the cloud-init user-data of a VM as a dictionary.

    Root login is restricted to the provided SSH key, the firewall only
    opens the ports listed by the application, and the application's
    first-boot commands run last.
    """
    runcmd = ["ufw default deny incoming", "ufw default allow outgoing"]
    runcmd += [f"ufw allow {port}/tcp comment '{comment}'" for port, comment in app.firewall_ports]
    runcmd.append("ufw --force enable")
    runcmd += list(app.runcmd)

    user_data = {
        "hostname": hostname,
        "fqdn": f"{hostname}.local",
        "timezone": "UTC",
        "package_update": True,
        "package_upgrade": True,
        "packages": sorted({"qemu-guest-agent", *app.packages}),
        "users": [{"name": "root", "ssh_authorized_keys": [ssh_key]}],
        "write_files": [
            {
                "path": "/etc/ssh/sshd_config.d/99-harden.conf",
                "content": SSH_HARDENING,
            }
        ],
        "runcmd": ["systemctl enable --now qemu-guest-agent", *runcmd],
    }
    if app.port is not None:
        user_data["final_message"] = (
            f"{app.name} VM is ready. Access it at http://$INSTANCE_IP:{app.port}"
        )

    return user_data


def render_user_data(user_data: dict) -> str:
    """Render user-data as a `#cloud-config` document."""
    body = yaml.dump(user_data, Dumper=Dumper, sort_keys=False, default_flow_style=False)
    return f"#cloud-config\n{body}"


def snippet_name(app: AppDefinition, vmid: int) -> str:
    """File name of the user-data snippet of a VM."""
    return f"{app.slug}-{vmid}-userdata.yaml"


def write_snippet(app: AppDefinition, vmid: int, content: str) -> Path:
    """
    Write the user-data snippet into the snippets directory.

    Returns:
        Path: Path to the written snippet.

    Raises:
        AnkhProvisionError: With code 217 if the snippets directory is not writable.
    """
    snippets_dir = Path(CFG.paths.snippets_dir)
    path = snippets_dir / snippet_name(app, vmid)
    try:
        snippets_dir.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise AnkhProvisionError(
            f"Could not write cloud-init snippet '{path}': {e}. "
            f"Is 'snippets' content enabled on storage '{CFG.paths.snippets_storage}'?",
            217,
        ) from e

    logger.debug(f"Wrote cloud-init user-data into '{path}'.")
    return path


def snippet_volume(app: AppDefinition, vmid: int) -> str:
    """Volume identifier of the snippet as passed to `qm set --cicustom`."""
    return f"{CFG.paths.snippets_storage}:snippets/{snippet_name(app, vmid)}"
