# Released under MIT License.
# Copyright (c) 2025 The ankh developers

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ankh_lib.core.common import get_panel_width
from ankh_lib.core.config import CFG

from .schema import SETTINGS_BY_KEY
from .value import ResolvedSettings, SettingValue


class SettingsPresenter:
    """
    Presents resolved settings together with the tier each value came from.
    """

    def __init__(self, settings: ResolvedSettings, title: str):
        """
        Args:
            settings (ResolvedSettings): Settings to present.
            title (str): Title of the panel, typically the application name.
        """
        self._settings = settings
        self._title = title

    def createSettingsPanel(self, console: Console | None = None) -> Group:
        """
        Create a Rich panel displaying the settings.

        Args:
            console (Console | None): Optional Rich Console instance.
                If None, a new Console will be created.

        Returns:
            Group: Rich Group containing the settings panel.
        """
        console = console or Console()

        panel = Panel(
            self._createSettingsTable(),
            title=Text(
                self._title.upper(),
                style=CFG.settings_presenter.title_style,
                justify="center",
            ),
            border_style=CFG.settings_presenter.border_style,
            padding=(1, 1),
            width=get_panel_width(
                console,
                2,
                CFG.settings_presenter.min_width,
                CFG.settings_presenter.max_width,
            ),
            expand=False,
        )

        return Group(Text(""), panel, Text(""))

    def _createSettingsTable(self) -> Table:
        table = Table(show_header=True, box=None, padding=(0, 1))

        for header, justify in (("Setting", "left"), ("Value", "left"), ("Source", "right")):
            table.add_column(
                header=Text(
                    header, justify="center", style=CFG.settings_presenter.headers_style
                ),
                justify=justify,
            )

        for value in self._settings:
            table.add_row(
                Text(SettingsPresenter._label(value), style=CFG.settings_presenter.key_style),
                SettingsPresenter._formatValue(value),
                Text(str(value.tier), style=value.tier.color()),
            )

        return table

    @staticmethod
    def _label(value: SettingValue) -> str:
        if spec := SETTINGS_BY_KEY.get(value.key):
            return f"{spec.description} ({value.key})"
        return value.key

    @staticmethod
    def _formatValue(value: SettingValue) -> Text:
        """
        Format a value for display. Unset values are shown as a dimmed dash,
        SSH keys are shortened.
        """
        if not value.isSet() or value.value == "":
            return Text("-", style=CFG.settings_presenter.unset_style)

        if isinstance(value.value, bool):
            shown = "yes" if value.value else "no"
        else:
            shown = str(value.value)

        if value.key == "var_ssh_key" and len(shown) > 40:
            shown = f"{shown[:24]}...{shown[-12:]}"

        return Text(shown, style=CFG.settings_presenter.value_style)
