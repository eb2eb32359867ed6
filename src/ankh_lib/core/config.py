# Released under MIT License.
# Copyright (c) 2025 The ankh developers

"""
Configuration system for ankh.

This module defines dataclasses representing the configurable aspects of ankh
itself: environment variable names, filesystem locations used on the Proxmox
host, exit codes of ankh's own failures, VM hardware defaults, source URLs
of the guest install scripts, and presentation settings.

These settings configure the *tool*. The per-application settings of the guests
being provisioned (CPU, RAM, disk, ...) are resolved by `ankh_lib.settings`.

The `Config` class loads user configuration from a TOML file (if available)
and provides a globally accessible `CFG` instance.
"""

import os
import tomllib
from dataclasses import dataclass, field, fields, is_dataclass
from pathlib import Path
from typing import Any, Self


@dataclass
class EnvironmentVariables:
    """Environment variable names used by ankh itself."""

    # Enables ankh debug mode.
    debug_mode: str = "ANKH_DEBUG"
    # Path of a file receiving a plain-text transcript of all log records.
    log_file: str = "ANKH_LOG_FILE"
    # Explicit path to the ankh TOML configuration.
    config: str = "ANKH_CONFIG"
    # Overrides the directory holding the defaults files.
    defaults_dir: str = "ANKH_DEFAULTS_DIR"
    # Overrides the base URL from which guest install scripts are fetched.
    base_url: str = "BASE_URL"


@dataclass
class PathSettings:
    """Filesystem locations on the Proxmox host."""

    # Directory holding the global defaults file and the per-app directory.
    defaults_dir: Path = Path("/usr/local/community-scripts")
    # Name of the global defaults file inside `defaults_dir`.
    global_defaults: str = "default.vars"
    # Name of the subdirectory of `defaults_dir` holding per-app defaults files.
    app_defaults_dir: str = "defaults"
    # Suffix of the per-app defaults files.
    defaults_suffix: str = ".vars"
    # Directory into which VM cloud images are downloaded.
    cloud_image_dir: Path = Path("/var/lib/vz/template/iso")
    # Directory holding cloud-init snippets.
    snippets_dir: Path = Path("/var/lib/vz/snippets")
    # Proxmox storage exposing `snippets_dir`.
    snippets_storage: str = "local"
    # Proxmox storage holding LXC templates.
    template_storage: str = "local"


@dataclass
class SourceSettings:
    """Locations of the external guest-side install scripts."""

    # Base URL of the script repository.
    base_url: str = (
        "https://raw.githubusercontent.com/Brandon-Anubis/Ankh-Prox-Scripts/main"
    )
    # Subdirectory containing guest-side install scripts.
    install_dir: str = "install"
    # Shared shell functions sourced by the install scripts as $FUNCTIONS_FILE_PATH.
    functions_file: str = "misc/install.func"


@dataclass
class VMSettings:
    """Hardware defaults applied to every provisioned virtual machine."""

    # Machine type.
    machine: str = "q35"
    # Firmware.
    bios: str = "ovmf"
    # Guest OS type.
    ostype: str = "l26"
    # SCSI controller.
    scsihw: str = "virtio-scsi-pci"
    # Format of the imported cloud image.
    disk_format: str = "qcow2"
    # Network card model.
    net_model: str = "virtio"


@dataclass
class ContainerSettings:
    """Defaults applied to every provisioned LXC container."""

    # Features enabled for every container.
    features: str = "nesting=1,keyctl=1"
    # Name of the first network interface inside the container.
    interface: str = "eth0"


@dataclass
class TimeoutSettings:
    """Timeout settings in seconds."""

    # Connection timeout for SSH when updating applications inside VMs.
    ssh_connect: int = 10


@dataclass
class ExitCodes:
    """Exit codes used for ankh's own failures."""

    # Default error code for failures without a more specific code.
    default: int = 1
    # Returned on an unexpected or unhandled error.
    unexpected_error: int = 99


@dataclass
class SettingsPresenterSettings:
    """Settings for SettingsPresenter."""

    # Maximal width of the settings panel.
    max_width: int | None = None
    # Minimal width of the settings panel.
    min_width: int | None = 60
    # Style of the border lines.
    border_style: str = "white"
    # Style of the title.
    title_style: str = "white bold"
    # Style used for table headers.
    headers_style: str = "default"
    # Style used for setting keys.
    key_style: str = "default bold"
    # Style used for setting values.
    value_style: str = "white"
    # Style used for unset values.
    unset_style: str = "grey50"


@dataclass
class TierColors:
    """Color scheme for the source tier of a resolved setting."""

    # Style used for values typed in by the operator.
    prompt: str = "bright_magenta"
    # Style used for values taken from the environment.
    environment: str = "bright_cyan"
    # Style used for values taken from the per-app defaults file.
    app_defaults: str = "bright_green"
    # Style used for values taken from the global defaults file.
    global_defaults: str = "bright_blue"
    # Style used for built-in defaults.
    builtin: str = "grey70"


@dataclass
class ExitCodePresenterSettings:
    """Settings for presenting exit codes."""

    # Style used for the code itself.
    code_style: str = "bright_red bold"
    # Style used for the category.
    category_style: str = "white"
    # Style used for the remediation hint.
    hint_style: str = "grey70"


@dataclass
class DateFormats:
    """Date and time format strings."""

    # Standard date format used by ankh.
    standard: str = "%Y-%m-%d %H:%M:%S"


@dataclass
class Config:
    """Main configuration for ankh."""

    env_vars: EnvironmentVariables = field(default_factory=EnvironmentVariables)
    paths: PathSettings = field(default_factory=PathSettings)
    sources: SourceSettings = field(default_factory=SourceSettings)
    vm: VMSettings = field(default_factory=VMSettings)
    container: ContainerSettings = field(default_factory=ContainerSettings)
    timeouts: TimeoutSettings = field(default_factory=TimeoutSettings)
    exit_codes: ExitCodes = field(default_factory=ExitCodes)
    settings_presenter: SettingsPresenterSettings = field(
        default_factory=SettingsPresenterSettings
    )
    tier_colors: TierColors = field(default_factory=TierColors)
    exit_code_presenter: ExitCodePresenterSettings = field(
        default_factory=ExitCodePresenterSettings
    )
    date_formats: DateFormats = field(default_factory=DateFormats)

    # Name of the ankh binary.
    binary_name: str = "ankh"

    @classmethod
    def load(cls, config_path: Path | None = None) -> Self:
        """
        Load configuration from TOML file or use defaults.

        Args:
            config_path: Explicit path to config file. If None, searches standard locations.

        Returns:
            Config instance with loaded or default values.
        """
        if config_path is None:
            config_path = Config._get_config_path()

        try:
            if config_path and config_path.exists():
                with config_path.open("rb") as f:
                    config_data = tomllib.load(f)
                return _dict_to_dataclass(cls, config_data)
        except Exception as e:
            raise ValueError(f"Could not read ankh config '{config_path}': {e}.")

        # no config found - use defaults
        return cls()

    def defaultsDir(self) -> Path:
        """
        Directory holding the defaults files.

        The `ANKH_DEFAULTS_DIR` environment variable takes precedence over the configured path.
        """
        if env_dir := os.environ.get(self.env_vars.defaults_dir):
            return Path(env_dir)
        return Path(self.paths.defaults_dir)

    def baseUrl(self) -> str:
        """
        Base URL of the script repository.

        The `BASE_URL` environment variable takes precedence over the configured URL.
        """
        return (os.environ.get(self.env_vars.base_url) or self.sources.base_url).rstrip(
            "/"
        )

    @staticmethod
    def _get_config_path() -> Path | None:
        """
        Search for config file in standard locations (XDG compliant).
        Returns the first existing config file, or None.
        """
        config_locations: list[Path | None] = [
            # 1. Explicit environment variable (highest priority)
            Path(env_path) if (env_path := os.getenv("ANKH_CONFIG")) else None,
            # 2. Current working directory
            Path.cwd() / "ankh_config.toml",
            # 3. XDG config home
            Path(os.getenv("XDG_CONFIG_HOME", Path.home() / ".config"))
            / "ankh"
            / "config.toml",
        ]

        for path in config_locations:
            if path and path.is_file():
                return path

        return None


def _dict_to_dataclass(cls, data: dict[str, Any]):
    """
    Recursively convert a dictionary to a dataclass instance.
    Path-typed fields are converted from strings.
    """
    if not is_dataclass(cls):
        return data

    field_values = {}
    for field_info in fields(cls):
        field_name = field_info.name
        field_type = field_info.type

        if field_name in data:
            value = data[field_name]
            if is_dataclass(field_type) and isinstance(value, dict):
                field_values[field_name] = _dict_to_dataclass(field_type, value)
            elif field_type is Path and isinstance(value, str):
                field_values[field_name] = Path(value)
            else:
                field_values[field_name] = value

    return cls(**field_values)


# Global configuration for ankh.
CFG = Config.load()
