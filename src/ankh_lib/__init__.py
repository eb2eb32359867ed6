# Released under MIT License.
# Copyright (c) 2025 The ankh developers

"""
Core implementation of the ankh command-line tool.

ankh provisions self-hosted applications into LXC containers and virtual
machines on a Proxmox VE host. This package resolves the settings of each
guest from layered defaults, drives the Proxmox command-line tools to create
and update guests, and reports failures through a structured exit-code
taxonomy. All ankh CLI commands delegate to the functionality implemented here.
"""

from .ankh import __version__, cli

__all__ = [
    "__version__",
    "cli",
    "apps",
    "core",
    "create",
    "explain",
    "ip",
    "provision",
    "settings",
    "update",
]
