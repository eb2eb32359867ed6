# Released under MIT License.
# Copyright (c) 2025 The ankh developers

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Any, Self

from ankh_lib.core.config import CFG
from ankh_lib.core.error import AnkhSettingsError


class Tier(Enum):
    """
    Source a resolved setting came from.

    Precedence during resolution (highest first): ENVIRONMENT, APP_DEFAULTS,
    GLOBAL_DEFAULTS, BUILTIN. PROMPT marks values typed in by the operator
    after resolution.
    """

    PROMPT = 0
    ENVIRONMENT = 1
    APP_DEFAULTS = 2
    GLOBAL_DEFAULTS = 3
    BUILTIN = 4

    def __str__(self) -> str:
        """
        Return the lowercase string representation of the tier.
        """
        return self.name.lower().replace("_", " ")

    @classmethod
    def resolutionOrder(cls) -> list[Self]:
        """
        Tiers consulted by the resolver, from the highest precedence to the lowest.
        """
        return [cls.ENVIRONMENT, cls.APP_DEFAULTS, cls.GLOBAL_DEFAULTS, cls.BUILTIN]

    def color(self) -> str:
        """
        Style used to display values coming from this tier.
        """
        return getattr(CFG.tier_colors, self.name.lower())


@dataclass(frozen=True)
class SettingValue:
    """
    A configuration key with its resolved value and the tier it came from.
    """

    key: str
    value: Any
    tier: Tier

    def isSet(self) -> bool:
        """Whether the setting has a value."""
        return self.value is not None


class ResolvedSettings:
    """
    Ordered collection of resolved settings for one application.
    """

    def __init__(self, values: list[SettingValue] | None = None):
        self._values: dict[str, SettingValue] = {}
        for value in values or []:
            self.set(value)

    def set(self, value: SettingValue) -> None:
        """Store a resolved setting, replacing a previous value of the same key."""
        self._values[value.key] = value

    def get(self, key: str) -> Any:
        """
        Return the value of a setting.

        Raises:
            AnkhSettingsError: If the setting has not been resolved.
        """
        return self[key].value

    def require(self, key: str) -> Any:
        """
        Return the value of a setting which must be set.

        Raises:
            AnkhSettingsError: If the setting has not been resolved or has no value.
        """
        if (value := self.get(key)) is None:
            raise AnkhSettingsError(f"Setting '{key}' has no value.")
        return value

    def __getitem__(self, key: str) -> SettingValue:
        try:
            return self._values[key]
        except KeyError as e:
            raise AnkhSettingsError(f"Setting '{key}' has not been resolved.") from e

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __iter__(self) -> Iterator[SettingValue]:
        return iter(self._values.values())

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ResolvedSettings):
            return NotImplemented
        return list(self) == list(other)

    def __repr__(self) -> str:
        return f"ResolvedSettings({list(self)!r})"
