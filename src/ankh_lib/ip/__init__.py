# Released under MIT License.
# Copyright (c) 2025 The ankh developers

"""
Lookup of guest IP addresses.

The `ip` command prints the IPv4 address of a VM or container, e.g. for use in scripts.
"""
