"""Result renderer."""

from typing import List

from rich.console import Console
from rich.table import Table

from launcher.plugins.protocol import Selection

console = Console(
    legacy_windows=False,
    force_terminal=True,
    force_interactive=False,
    no_color=False,
    tab_size=4
)


class ResultRenderer:
    """Renders plugin responses in the terminal."""

    def show_selections(self, plugin_name: str, selections: List[Selection]):
        """Print a ``queried`` response as a table.

        Args:
            plugin_name: Plugin that answered
            selections: Its selections, in the order it sent them
        """
        if not selections:
            console.print(f"[yellow]{plugin_name}: no selections[/yellow]\n")
            return

        table = Table(title=plugin_name)
        table.add_column("ID", style="cyan", justify="right")
        table.add_column("Name")
        table.add_column("Description", style="dim")
        table.add_column("Type", style="dim")
        for selection in selections:
            table.add_row(
                str(selection.id),
                selection.name,
                selection.description or "",
                selection.content_type or "",
            )
        console.print(table)
        console.print()

    def show_fill(self, text: str):
        console.print(f"[green]fill:[/green] {text}\n")

    def show_closed(self, plugin_name: str):
        console.print(f"[yellow]{plugin_name} asked to close the launcher[/yellow]\n")

    def show_no_result(self, query: str):
        console.print(f"[dim]no plugin result for {query!r}[/dim]\n")

    def show_error(self, message: str):
        console.print(f"[red]✗ {message}[/red]\n")
