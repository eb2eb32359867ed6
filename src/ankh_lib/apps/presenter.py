# Released under MIT License.
# Copyright (c) 2025 The ankh developers

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ankh_lib.core.common import get_panel_width

from .definition import AppDefinition


class AppsPresenter:
    """
    Presents the applications ankh can provision.
    """

    def __init__(self, apps: list[AppDefinition]):
        self._apps = apps

    def createAppsPanel(self, console: Console | None = None) -> Group:
        console = console or Console()

        table = Table(show_header=True, box=None, padding=(0, 1))
        for header, justify in (
            ("Name", "left"),
            ("Application", "left"),
            ("Guest", "left"),
            ("CPU", "right"),
            ("RAM", "right"),
            ("Disk", "right"),
            ("Port", "right"),
        ):
            table.add_column(header=Text(header, justify="center"), justify=justify)

        for app in self._apps:
            builtins = app.builtins()
            table.add_row(
                Text(app.slug, style="bold"),
                Text(app.name),
                Text(str(app.kind)),
                Text(str(builtins.get("var_cpu", "-"))),
                Text(f"{builtins['var_ram']} MiB" if "var_ram" in builtins else "-"),
                Text(f"{builtins['var_disk']} GiB" if "var_disk" in builtins else "-"),
                Text(str(app.port) if app.port is not None else "-"),
            )

        panel = Panel(
            table,
            title=Text("APPLICATIONS", style="white bold", justify="center"),
            border_style="white",
            padding=(1, 1),
            width=get_panel_width(console, 1, 60, 100),
            expand=False,
        )
        return Group(Text(""), panel, Text(""))
