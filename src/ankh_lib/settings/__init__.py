# Released under MIT License.
# Copyright (c) 2025 The ankh developers

"""
Resolution and persistence of per-application settings.

Every setting of a provisioned guest (CPU, RAM, disk, network, ...) is resolved
by `ConfigResolver` from four tiers, highest precedence first: the environment,
the per-app defaults file, the global defaults file and the built-in default.
Each resolved value remembers the tier it came from. `DefaultsStore` reads and
writes the defaults files and `SettingsPresenter` renders resolved settings.

The interactive `Wizard` lives in `ankh_lib.settings.wizard`.
"""

from .defaults import DefaultsFile, DefaultsStore, Scope
from .presenter import SettingsPresenter
from .resolver import ConfigResolver
from .schema import SETTINGS, SettingSpec, get_spec
from .value import ResolvedSettings, SettingValue, Tier

__all__ = [
    "ConfigResolver",
    "DefaultsFile",
    "DefaultsStore",
    "ResolvedSettings",
    "SETTINGS",
    "Scope",
    "SettingSpec",
    "SettingValue",
    "SettingsPresenter",
    "Tier",
    "get_spec",
]
