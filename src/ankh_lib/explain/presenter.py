# Released under MIT License.
# Copyright (c) 2025 The ankh developers

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ankh_lib.core.common import get_panel_width
from ankh_lib.core.config import CFG
from ankh_lib.core.exit_codes import ExitCodeEntry, Layer


class ExitCodePresenter:
    """
    Presents entries of the exit-code taxonomy.
    """

    def __init__(self, entries: list[ExitCodeEntry]):
        self._entries = entries

    def createExplanation(self) -> Group:
        """
        Create a short explanation of each entry: the code, its description,
        its layer and the remediation hint.
        """
        lines = []
        for entry in self._entries:
            lines.append(
                Text(f"{entry.code}", style=CFG.exit_code_presenter.code_style)
                + Text(f"  {entry.description} ")
                + Text(f"[{entry.layer}]", style=CFG.exit_code_presenter.category_style)
                + Text("" if entry.known else " (not a listed exit code)")
            )
            lines.append(
                Text(f"     {entry.hint}", style=CFG.exit_code_presenter.hint_style)
            )

        return Group(Text(""), *lines, Text(""))

    def createTablePanel(self, console: Console | None = None) -> Group:
        """
        Create a Rich panel listing all entries grouped by layer.
        """
        console = console or Console()

        table = Table(show_header=True, box=None, padding=(0, 1))
        table.add_column(header=Text("Code", justify="center"), justify="right")
        table.add_column(header=Text("Layer", justify="center"), justify="left")
        table.add_column(header=Text("Description", justify="center"), justify="left")

        previous: Layer | None = None
        for entry in self._entries:
            if previous is not None and entry.layer != previous:
                table.add_section()
            previous = entry.layer
            table.add_row(
                Text(str(entry.code), style=CFG.exit_code_presenter.code_style),
                Text(str(entry.layer), style=CFG.exit_code_presenter.category_style),
                Text(entry.description),
            )

        panel = Panel(
            table,
            title=Text("EXIT CODES", style="white bold", justify="center"),
            border_style="white",
            padding=(1, 1),
            width=get_panel_width(console, 1, 60, 110),
            expand=False,
        )
        return Group(Text(""), panel, Text(""))
