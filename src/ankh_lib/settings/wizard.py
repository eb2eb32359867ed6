# Released under MIT License.
# Copyright (c) 2025 The ankh developers

"""
Interactive settings wizard.

The wizard resolves the settings of an application, optionally lets the
operator edit each of them, shows the final values with their sources and
saves them as defaults when the operator asks for it.
"""

import click
from rich.console import Console

from ankh_lib.apps.definition import AppDefinition
from ankh_lib.core.common import is_interactive, yes_or_no_prompt
from ankh_lib.core.error import AnkhError
from ankh_lib.core.logger import get_logger

from .defaults import Scope
from .presenter import SettingsPresenter
from .resolver import ConfigResolver
from .schema import SETTINGS, SettingSpec
from .value import ResolvedSettings, SettingValue, Tier

logger = get_logger(__name__)


class Wizard:
    """
    Walks the operator through the settings of one application.
    """

    def __init__(self, resolver: ConfigResolver, app: AppDefinition, console: Console):
        self._resolver = resolver
        self._app = app
        self._console = console

    def run(self, advanced: bool = False, save: Scope | None = None) -> ResolvedSettings:
        """
        Resolve, optionally edit, display and optionally save the settings.

        Args:
            advanced (bool): Prompt for every setting before provisioning.
            save (Scope | None): Save the final settings into the defaults file
                of this scope without asking.

        Returns:
            ResolvedSettings: The final settings.

        Raises:
            AnkhError: If advanced mode is requested without an interactive terminal.
            AnkhSettingsError: If a setting resolves to an invalid value.
        """
        settings = self._resolver.resolveAll(self._app.builtins())

        if advanced:
            if not is_interactive():
                raise AnkhError("Advanced settings require an interactive terminal.")
            settings = self._edit(settings)

        self._console.print(
            SettingsPresenter(settings, self._app.name).createSettingsPanel(
                self._console
            )
        )

        if save:
            self._resolver.save(settings, save)
        elif advanced and yes_or_no_prompt(
            f"Save these settings as defaults for '{self._app.name}'?"
        ):
            self._resolver.save(settings, Scope.APP)

        return settings

    def _edit(self, settings: ResolvedSettings) -> ResolvedSettings:
        """
        Prompt for every setting, using the resolved value as the default answer.
        """
        edited = ResolvedSettings()
        for spec in SETTINGS:
            edited.set(Wizard._promptSetting(spec, settings[spec.key]))
        return edited

    @staticmethod
    def _promptSetting(spec: SettingSpec, current: SettingValue) -> SettingValue:
        """
        Prompt for a single setting until a valid value is entered.

        Returns:
            SettingValue: The current value if the answer did not change it,
                otherwise the new value marked as coming from the prompt.
        """
        current_text = SettingSpec.format(current.value)
        while True:
            answer = click.prompt(
                f"{spec.description} ({spec.key})",
                default=current_text,
                show_default=bool(current_text),
            ).strip()

            if answer == current_text:
                return current

            if answer == "":
                return SettingValue(spec.key, None, Tier.PROMPT)

            try:
                return SettingValue(spec.key, spec.parse(answer), Tier.PROMPT)
            except ValueError as e:
                logger.warning(f"Invalid value for '{spec.key}': {e}.")
