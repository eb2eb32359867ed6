# Released under MIT License.
# Copyright (c) 2025 The ankh developers

"""
Catalog of the settings understood by ankh.

Each setting is described by a `SettingSpec`: the key used in defaults files,
the environment variables that override it, a parser converting the textual
value into a Python value, and a base default. Applications may replace the
base default with their own built-in default.
"""

import ipaddress
import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from ankh_lib.core.error import AnkhSchemaError

# valid keys of defaults files and environment variables
KEY_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

_TRUE = {"1", "yes", "y", "true", "on"}
_FALSE = {"0", "no", "n", "false", "off"}


def parse_str(value: str) -> str:
    return value.strip()


def parse_positive_int(value: str) -> int:
    """Parse a strictly positive integer."""
    number = int(value.strip())
    if number <= 0:
        raise ValueError(f"expected a positive integer, got {number}")
    return number


def parse_guest_id(value: str) -> int:
    """Parse a Proxmox guest ID. The range is checked by the provisioner."""
    return int(value.strip())


def parse_bool(value: str) -> bool:
    """Parse a boolean written as 1/0, yes/no, true/false or on/off."""
    normalized = value.strip().lower()
    if normalized in _TRUE:
        return True
    if normalized in _FALSE:
        return False
    raise ValueError(f"expected a boolean (1/0, yes/no, true/false), got '{value}'")


def parse_tags(value: str) -> str:
    """
    Parse a list of tags separated by semicolons, commas or spaces.

    Returns the tags joined by semicolons.
    """
    tags = [tag for tag in re.split(r"[;,\s]+", value.strip()) if tag]
    return ";".join(tags)


def parse_ip(value: str) -> str:
    """
    Parse the IPv4 configuration of the first network interface.

    Accepts 'dhcp', 'A.B.C.D' (assuming a /24 network) or 'A.B.C.D/M'.

    Returns:
        str: 'dhcp' or the address in 'A.B.C.D/M' notation.
    """
    stripped = value.strip()
    if stripped.lower() == "dhcp":
        return "dhcp"

    if "/" not in stripped:
        stripped = f"{stripped}/24"

    try:
        interface = ipaddress.IPv4Interface(stripped)
    except ValueError as e:
        raise ValueError(f"'{value}' is not a valid IPv4 address") from e

    return f"{interface.ip}/{interface.network.prefixlen}"


def parse_gateway(value: str) -> str:
    """Parse an IPv4 gateway address."""
    try:
        return str(ipaddress.IPv4Address(value.strip()))
    except ValueError as e:
        raise ValueError(f"'{value}' is not a valid IPv4 address") from e


def parse_ssh_key(value: str) -> str:
    """Parse an OpenSSH public key."""
    stripped = value.strip()
    if not re.match(r"^(ssh-(rsa|ed25519|dss)|ecdsa-sha2-\S+|sk-\S+)\s+\S+", stripped):
        raise ValueError("not an OpenSSH public key")
    return stripped


@dataclass(frozen=True)
class SettingSpec:
    """
    Description of a single configuration key.
    """

    # Key used in defaults files; also accepted as an environment variable.
    key: str

    # Human-readable description used by the wizard.
    description: str

    # Converts the textual value into a Python value. Raises ValueError for invalid input.
    parse: Callable[[str], Any] = parse_str

    # Base default, used when the application does not define its own built-in default.
    default: Any = None

    # Additional environment variables accepted as overrides, in order of precedence.
    env_vars: tuple[str, ...] = ()

    # Whether the setting must have a built-in default.
    required: bool = False

    # Whether the setting may be written to a defaults file.
    persist: bool = True

    def envNames(self) -> tuple[str, ...]:
        """All environment variables overriding this setting, the key itself first."""
        return (self.key, *self.env_vars)

    @staticmethod
    def format(value: Any) -> str:
        """
        Convert a value into the textual form used in defaults files.
        """
        if value is None:
            return ""
        if isinstance(value, bool):
            return "1" if value else "0"
        return str(value)


SETTINGS: tuple[SettingSpec, ...] = (
    SettingSpec("var_id", "Guest ID", parse_guest_id, env_vars=("VMID", "CTID"), persist=False),
    SettingSpec("var_hostname", "Hostname"),
    SettingSpec("var_cpu", "CPU cores", parse_positive_int, 1, required=True),
    SettingSpec("var_ram", "RAM in MiB", parse_positive_int, 1024, required=True),
    SettingSpec("var_disk", "Disk size in GiB", parse_positive_int, 4, required=True),
    SettingSpec("var_os", "Operating system", default="debian", required=True),
    SettingSpec("var_version", "OS version", default="12", required=True),
    SettingSpec("var_unprivileged", "Unprivileged container", parse_bool, True),
    SettingSpec("var_tags", "Tags", parse_tags, ""),
    SettingSpec("var_storage", "Storage pool", default="local-lvm", env_vars=("STORAGE",), required=True),
    SettingSpec("var_bridge", "Network bridge", default="vmbr0", env_vars=("BRIDGE",), required=True),
    SettingSpec("var_ip", "IPv4 address (dhcp or A.B.C.D/M)", parse_ip, "dhcp"),
    SettingSpec("var_gateway", "IPv4 gateway", parse_gateway),
    SettingSpec("var_ssh_key", "SSH public key", parse_ssh_key, env_vars=("SSH_KEY",)),
)

SETTINGS_BY_KEY: dict[str, SettingSpec] = {spec.key: spec for spec in SETTINGS}


def get_spec(key: str) -> SettingSpec:
    """
    Return the spec of a known setting.

    Raises:
        AnkhSchemaError: If no setting with this key exists.
    """
    try:
        return SETTINGS_BY_KEY[key]
    except KeyError as e:
        raise AnkhSchemaError(f"Unknown setting '{key}'.") from e


def validate_builtins(
    owner: str, builtins: Mapping[str, Any], specs: Iterable[SettingSpec] = SETTINGS
) -> None:
    """
    Check the built-in defaults of an application against the settings catalog.

    Args:
        owner (str): Name of the application, used in error messages.
        builtins (Mapping[str, Any]): Built-in defaults overriding the base defaults.
        specs (Iterable[SettingSpec]): Settings the defaults are validated against.

    Raises:
        AnkhSchemaError: If a built-in default refers to an unknown setting,
            or a required setting ends up without a built-in default.
    """
    specs = list(specs)
    known = {spec.key for spec in specs}
    if unknown := sorted(set(builtins) - known):
        raise AnkhSchemaError(
            f"Built-in defaults of '{owner}' refer to unknown settings: {', '.join(unknown)}."
        )

    for spec in specs:
        if spec.required and builtins.get(spec.key, spec.default) is None:
            raise AnkhSchemaError(
                f"Required setting '{spec.key}' of '{owner}' has no built-in default."
            )
