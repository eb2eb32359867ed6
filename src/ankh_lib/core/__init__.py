# Released under MIT License.
# Copyright (c) 2025 The ankh developers

"""
Core infrastructure for ankh.

This module collects the foundational classes and helpers used across the
ankh codebase: configuration of the tool itself, structured logging, the
exception hierarchy, the exit-code taxonomy, and the top-level error trap.
"""
