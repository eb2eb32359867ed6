# Released under MIT License.
# Copyright (c) 2025 The ankh developers

import sys
from typing import NoReturn

import click
from click_help_colors import HelpColorsCommand

from ankh_lib.core.logger import get_logger
from ankh_lib.core.trap import ErrorTrap
from ankh_lib.provision import Proxmox, get_container_ip, get_guest_ip

logger = get_logger(__name__)


@click.command(
    short_help="Print the IP address of a guest.",
    help=f"""Print the IPv4 address of a virtual machine or a container.

{click.style("ID", fg="green")}   ID of the guest.

For virtual machines, the address is taken from the cloud-init configuration
or, if the VM uses DHCP, from the QEMU guest agent.""",
    cls=HelpColorsCommand,
    help_options_color="bright_blue",
)
@click.argument("guest_id", type=int, metavar=click.style("ID", fg="green"))
@click.option(
    "-c", "--container", is_flag=True, help="The guest is an LXC container."
)
def ip(guest_id: int, container: bool = False) -> NoReturn:
    trap = ErrorTrap().arm()
    try:
        proxmox = Proxmox()
        trap.watch(proxmox)
        address = (
            get_container_ip(proxmox, guest_id)
            if container
            else get_guest_ip(proxmox, guest_id)
        )
        print(address)
        trap.disarm()
        sys.exit(0)
    except Exception as e:
        trap.fire(e)
