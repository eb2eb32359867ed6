# Released under MIT License.
# Copyright (c) 2025 The ankh developers

"""
Applications that ankh can provision.

Each application is described by an `AppDefinition`: its guest kind, its
built-in defaults and the way it is installed and updated.
"""

from .definition import AppDefinition, GuestKind
from .registry import APPS, get_app

__all__ = [
    "APPS",
    "AppDefinition",
    "GuestKind",
    "get_app",
]
