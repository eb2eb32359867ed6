# Released under MIT License.
# Copyright (c) 2025 The ankh developers

"""
Explanations of the exit codes returned by ankh.
"""

from .presenter import ExitCodePresenter

__all__ = [
    "ExitCodePresenter",
]
