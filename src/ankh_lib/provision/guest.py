# Released under MIT License.
# Copyright (c) 2025 The ankh developers

"""
Queries about the network configuration of running guests.

For virtual machines the statically configured address is read from the
cloud-init configuration first. If the VM uses DHCP, the QEMU guest agent is
asked through the guest command channel, which works without any network
connection to the guest.
"""

import ipaddress
import json
import re

from ankh_lib.core.error import AnkhCommandError, AnkhProvisionError
from ankh_lib.core.logger import get_logger

from .proxmox import Proxmox

logger = get_logger(__name__)


def get_guest_ip(proxmox: Proxmox, vmid: int) -> str:
    """
    Return the IPv4 address of a virtual machine.

    Args:
        proxmox (Proxmox): Interface to the Proxmox tools.
        vmid (int): ID of the virtual machine.

    Returns:
        str: The first non-loopback IPv4 address of the VM.

    Raises:
        AnkhProvisionError: With code 243 if no address can be determined.
    """
    if ip := _ip_from_cloud_init(proxmox, vmid):
        logger.debug(f"IP of VM {vmid} taken from cloud-init: {ip}.")
        return ip

    if ip := _ip_from_guest_agent(proxmox, vmid):
        logger.debug(f"IP of VM {vmid} reported by the guest agent: {ip}.")
        return ip

    raise AnkhProvisionError(
        f"Cannot determine the IP address of VM {vmid}. Is the QEMU guest agent running?",
        243,
    )


def get_container_ip(proxmox: Proxmox, ctid: int) -> str:
    """
    Return the IPv4 address of a running container.

    Raises:
        AnkhProvisionError: With code 243 if the container reports no address.
    """
    output = proxmox.pct("exec", str(ctid), "--", "hostname", "-I", modifies=False)
    if ip := first_ipv4(output.split()):
        return ip

    raise AnkhProvisionError(f"Container {ctid} has no IPv4 address.", 243)


def first_ipv4(candidates: list[str]) -> str | None:
    """
    Return the first IPv4 address from the candidates that is not a loopback address.
    """
    for candidate in candidates:
        try:
            address = ipaddress.IPv4Address(candidate)
        except ValueError:
            continue
        if not address.is_loopback:
            return str(address)
    return None


def parse_network_interfaces(output: str) -> list[str]:
    """
    Extract IPv4 addresses from the JSON answer of `network-get-interfaces`.

    Raises:
        json.JSONDecodeError: If the output is not valid JSON.
    """
    addresses = []
    for interface in json.loads(output):
        for address in interface.get("ip-addresses", []):
            if address.get("ip-address-type") == "ipv4":
                addresses.append(address.get("ip-address", ""))
    return addresses


def _ip_from_cloud_init(proxmox: Proxmox, vmid: int) -> str | None:
    try:
        output = proxmox.qm("cloudinit", "dump", str(vmid), "network", modifies=False)
    except AnkhCommandError as e:
        logger.debug(f"Could not dump the cloud-init config of VM {vmid}: {e}")
        return None

    return first_ipv4(re.findall(r"(?:ip=|address:\s*'?)(\d+\.\d+\.\d+\.\d+)", output))


def _ip_from_guest_agent(proxmox: Proxmox, vmid: int) -> str | None:
    try:
        output = proxmox.qm(
            "guest", "cmd", str(vmid), "network-get-interfaces", modifies=False
        )
        return first_ipv4(parse_network_interfaces(output))
    except AnkhCommandError as e:
        logger.debug(f"Guest agent of VM {vmid} did not answer: {e}")
    except (json.JSONDecodeError, AttributeError, TypeError) as e:
        logger.debug(f"Unexpected answer from the guest agent of VM {vmid}: {e}")
    return None
