# Released under MIT License.
# Copyright (c) 2025 The ankh developers

import os
from collections.abc import Callable, Iterable, Mapping
from pathlib import Path
from typing import Any

from ankh_lib.core.error import AnkhSettingsError
from ankh_lib.core.logger import get_logger

from .defaults import DefaultsFile, DefaultsStore, Scope
from .schema import SETTINGS, SettingSpec
from .value import ResolvedSettings, SettingValue, Tier

logger = get_logger(__name__)


class ConfigResolver:
    """
    Resolve settings across the four precedence tiers.

    Priority:
        1. Environment variable
        2. Per-app defaults file
        3. Global defaults file
        4. Built-in default

    Empty values are treated as absent at every tier, so resolution falls
    through to the next tier.
    """

    def __init__(
        self,
        store: DefaultsStore,
        app: str | None = None,
        environ: Mapping[str, str] | None = None,
    ):
        """
        Initialize the resolver.

        Args:
            store (DefaultsStore): Store holding the defaults files.
            app (str | None): Application whose per-app defaults file is consulted.
                If None, only the global defaults file is used.
            environ (Mapping[str, str] | None): Environment to read overrides from.
                Defaults to `os.environ`.
        """
        self._store = store
        self._app = app
        self._environ = os.environ if environ is None else environ

    def resolve(
        self,
        key: str,
        default: Any,
        env_vars: Iterable[str] | None = None,
        parse: Callable[[str], Any] | None = None,
    ) -> SettingValue:
        """
        Return the effective value of a single key.

        Args:
            key (str): Key of the setting as used in defaults files.
            default (Any): Built-in default, used if no other tier provides a value.
            env_vars (Iterable[str] | None): Environment variables overriding the setting,
                in order of precedence. Defaults to the key itself.
            parse (Callable[[str], Any] | None): Converts textual values from the
                environment and the defaults files. Built-in defaults are not parsed.

        Returns:
            SettingValue: The value together with the tier it came from.

        Raises:
            AnkhSettingsError: If the winning textual value cannot be parsed.
        """
        for tier in Tier.resolutionOrder():
            if tier == Tier.BUILTIN:
                logger.debug(f"Setting '{key}' uses the built-in default: {default!r}.")
                return SettingValue(key, default, Tier.BUILTIN)

            source, raw = self._lookup(tier, key, env_vars)
            if raw is None or raw.strip() == "":
                continue

            logger.debug(f"Setting '{key}' taken from {tier} ({source}).")
            return SettingValue(key, self._parse(key, raw, parse, tier, source), tier)

        # should never get here
        raise AnkhSettingsError(
            "Execution got into an unexpected part of ConfigResolver.resolve. This is a bug, please report it."
        )

    def resolveSpec(self, spec: SettingSpec, builtin: Any = None) -> SettingValue:
        """
        Resolve a single setting described by a spec.

        Args:
            spec (SettingSpec): Description of the setting.
            builtin (Any): Built-in default replacing the spec's base default. None keeps the base default.
        """
        return self.resolve(
            spec.key,
            spec.default if builtin is None else builtin,
            env_vars=spec.envNames(),
            parse=spec.parse,
        )

    def resolveAll(
        self,
        builtins: Mapping[str, Any] | None = None,
        specs: Iterable[SettingSpec] = SETTINGS,
    ) -> ResolvedSettings:
        """
        Resolve every setting in the catalog.

        Args:
            builtins (Mapping[str, Any] | None): Application-specific built-in defaults.
            specs (Iterable[SettingSpec]): Settings to resolve.

        Returns:
            ResolvedSettings: The resolved values in catalog order.
        """
        builtins = builtins or {}
        return ResolvedSettings(
            [self.resolveSpec(spec, builtins.get(spec.key)) for spec in specs]
        )

    def save(
        self,
        settings: ResolvedSettings,
        scope: Scope,
        specs: Iterable[SettingSpec] = SETTINGS,
    ) -> Path:
        """
        Persist settings into the per-app or the global defaults file.

        Only settings marked as persistable and having a non-empty value are written.
        The target file is replaced as a whole.

        Args:
            settings (ResolvedSettings): Settings to persist.
            scope (Scope): Which defaults file to write.
            specs (Iterable[SettingSpec]): Catalog deciding which settings are persistable.

        Returns:
            Path: Path to the written file.
        """
        persistable = {spec.key for spec in specs if spec.persist}
        values = {
            value.key: text
            for value in settings
            if value.key in persistable and (text := SettingSpec.format(value.value))
        }

        defaults_file = self._store.file(scope, self._app)
        defaults_file.save(values)
        logger.info(f"Saved {len(values)} setting(s) as {scope} defaults into '{defaults_file.path}'.")

        return defaults_file.path

    def _lookup(
        self, tier: Tier, key: str, env_vars: Iterable[str] | None
    ) -> tuple[str, str | None]:
        """
        Return a description of the source and the raw value of a key in a single tier.
        """
        if tier == Tier.ENVIRONMENT:
            for name in env_vars or (key,):
                if self._environ.get(name, "").strip():
                    return f"${name}", self._environ[name]
            return "environment", None

        defaults_file = self._tierFile(tier)
        if defaults_file is None:
            return "", None
        return str(defaults_file.path), defaults_file.get(key)

    def _tierFile(self, tier: Tier) -> DefaultsFile | None:
        if tier == Tier.APP_DEFAULTS:
            return self._store.appFile(self._app) if self._app else None
        if tier == Tier.GLOBAL_DEFAULTS:
            return self._store.globalFile()
        return None

    @staticmethod
    def _parse(
        key: str,
        raw: str,
        parse: Callable[[str], Any] | None,
        tier: Tier,
        source: str,
    ) -> Any:
        if parse is None:
            return raw.strip()
        try:
            return parse(raw)
        except ValueError as e:
            raise AnkhSettingsError(
                f"Invalid value '{raw}' of setting '{key}' from {tier} ({source}): {e}."
            ) from e
