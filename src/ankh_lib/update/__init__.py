# Released under MIT License.
# Copyright (c) 2025 The ankh developers

"""
Updating applications inside existing guests.

This module defines the `Updater` class, which locates the guest of an
application and runs the application's update commands inside it.
"""

from .updater import Updater

__all__ = [
    "Updater",
]
