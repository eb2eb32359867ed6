# Released under MIT License.
# Copyright (c) 2025 The ankh developers

"""
Registry of the applications ankh knows how to provision.
"""

from ankh_lib.core.common import normalize
from ankh_lib.core.error import AnkhError

from .definition import AppDefinition, GuestKind

INBOX_ZERO = AppDefinition(
    name="Inbox Zero",
    slug="inbox-zero",
    kind=GuestKind.CONTAINER,
    defaults={
        "var_cpu": 4,
        "var_ram": 4096,
        "var_disk": 10,
        "var_os": "debian",
        "var_version": "12",
        "var_unprivileged": True,
        "var_tags": "email;ai;productivity",
    },
    port=3000,
    source="https://github.com/elie222/inbox-zero",
    install_dir="/opt/inbox-zero",
    install_script="inbox-zero-install.sh",
    update_commands=(
        "docker compose pull",
        "docker compose up -d --remove-orphans",
    ),
    notes=(
        "IMPORTANT: You must configure /opt/inbox-zero/.env before the app will work.",
        "See /opt/inbox-zero/README.txt for setup instructions.",
    ),
)

COOLIFY = AppDefinition(
    name="Coolify",
    slug="coolify",
    kind=GuestKind.VM,
    defaults={
        "var_cpu": 4,
        "var_ram": 8192,
        "var_disk": 200,
        "var_os": "ubuntu",
        "var_version": "24.04",
        "var_tags": "selfhosted;paas",
    },
    port=8000,
    source="https://coolify.io",
    update_commands=("curl -fsSL https://cdn.coollabs.io/coolify/upgrade.sh | bash",),
    version_command="docker inspect coolify --format '{{.Config.Image}}'",
    notes=(
        "Cloud-init will run the Coolify installer on first boot (~3-5 min).",
        "Monitor boot progress with 'qm terminal <ID>'.",
    ),
    cloud_image_url="https://cloud-images.ubuntu.com/noble/current/noble-server-cloudimg-amd64.img",
    packages=("curl", "ca-certificates", "ufw"),
    runcmd=(
        "curl -fsSL https://cdn.coollabs.io/coolify/install.sh | bash",
        "systemctl restart ssh",
    ),
    firewall_ports=(
        (22, "SSH"),
        (80, "HTTP (Coolify Traefik)"),
        (443, "HTTPS (Coolify Traefik)"),
        (8000, "Coolify Dashboard"),
    ),
)

# all registered applications by slug
APPS: dict[str, AppDefinition] = {app.slug: app for app in (INBOX_ZERO, COOLIFY)}


def get_app(name: str) -> AppDefinition:
    """
    Return the application registered under the given name.

    The lookup ignores case and treats spaces and underscores as hyphens.

    Raises:
        AnkhError: If no such application is registered.
    """
    try:
        return APPS[normalize(name)]
    except KeyError as e:
        raise AnkhError(
            f"Unknown application '{name}'. Known applications: {', '.join(sorted(APPS))}."
        ) from e
