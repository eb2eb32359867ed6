# Released under MIT License.
# Copyright (c) 2025 The ankh developers

from ankh_lib.core.config import CFG
from ankh_lib.core.error import AnkhProvisionError
from ankh_lib.settings.value import ResolvedSettings


def ip_config(settings: ResolvedSettings) -> str:
    """
    Build the IPv4 part of a guest's network configuration.

    Returns:
        str: 'ip=dhcp' or 'ip=A.B.C.D/M,gw=G.G.G.G'.

    Raises:
        AnkhProvisionError: With code 208 if a static address is configured without a gateway.
    """
    ip = settings.get("var_ip") or "dhcp"
    if ip == "dhcp":
        return "ip=dhcp"

    if not (gateway := settings.get("var_gateway")):
        raise AnkhProvisionError(
            f"Static IP address '{ip}' requires a gateway (var_gateway).", 208
        )

    return f"ip={ip},gw={gateway}"


def container_net(settings: ResolvedSettings) -> str:
    """Value of `pct create --net0`."""
    return (
        f"name={CFG.container.interface},"
        f"bridge={settings.require('var_bridge')},{ip_config(settings)}"
    )


def vm_net(settings: ResolvedSettings) -> str:
    """Value of `qm create --net0`."""
    return f"{CFG.vm.net_model},bridge={settings.require('var_bridge')}"
