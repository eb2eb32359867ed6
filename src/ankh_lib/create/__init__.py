# Released under MIT License.
# Copyright (c) 2025 The ankh developers

"""
Creation of new application guests.

This module defines the `Creator` class, which checks the host, resolves the
settings of the application through the settings wizard and delegates the
actual provisioning to the container or virtual machine builder.
"""

from .creator import Creator

__all__ = [
    "Creator",
]
