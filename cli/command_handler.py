"""Command handler with command pattern."""

import asyncio
from typing import Dict

from rich.panel import Panel
from rich.table import Table

from cli.renderer import ResultRenderer, console
from cli.state import REPLState
from launcher.plugins.manager import LauncherService
from launcher.plugins.protocol import FillResponse


class CommandHandler:
    """Slash-command dispatcher for the REPL."""

    def __init__(self, state: REPLState, service: LauncherService, renderer: ResultRenderer):
        """
        Args:
            state: REPL state
            service: Launcher service owning the plugins
            renderer: Output renderer
        """
        self.state = state
        self.service = service
        self.renderer = renderer
        self.commands = self._register_commands()

    def _register_commands(self) -> Dict[str, callable]:
        """Map command prefixes to handlers."""
        return {
            "/q": self._cmd_quit,
            "/quit": self._cmd_quit,
            "/exit": self._cmd_quit,
            "/complete": self._cmd_complete,
            "/submit": self._cmd_submit,
            "/plugins": self._cmd_list_plugins,
            "/help": self._cmd_help,
        }

    async def handle(self, cmd: str) -> bool:
        """Handle a command.

        Args:
            cmd: Raw user input starting with ``/``

        Returns:
            Whether the REPL loop should continue
        """
        name = cmd.split(maxsplit=1)[0]
        handler = self.commands.get(name)
        if handler:
            return await handler(cmd)

        print(f"\033[31munknown command: {cmd}\033[0m")
        print("\033[2mtype /help for help\033[0m\n")
        return True

    async def _cmd_quit(self, cmd: str) -> bool:
        print("\033[33mbye bye!\033[0m")
        return False

    async def _cmd_complete(self, cmd: str) -> bool:
        """Ask the last plugin for a fill suggestion."""
        plugin = self.state.plugin
        if plugin is None:
            self.renderer.show_error("no plugin answered the last query")
            return True

        if not await asyncio.to_thread(self.service.complete, plugin):
            self.renderer.show_error(f"{plugin.name}: channel closed")
            return True

        response = await asyncio.to_thread(self.service.listen, plugin)
        if isinstance(response, FillResponse):
            self.renderer.show_fill(response.text)
        else:
            self.renderer.show_no_result(self.state.query)
        return True

    async def _cmd_submit(self, cmd: str) -> bool:
        """Submit a selection of the last response."""
        parts = cmd.split(maxsplit=1)
        if len(parts) < 2 or not parts[1].strip().isdigit():
            print("\033[31musage: /submit <id>\033[0m\n")
            return True

        selection_id = int(parts[1])
        plugin = self.state.plugin
        if plugin is None or not self.state.has_selection(selection_id):
            self.renderer.show_error(f"no selection {selection_id} in the last response")
            return True

        if await asyncio.to_thread(self.service.submit, plugin, selection_id):
            print(f"\033[32m✓ submitted {selection_id} to {plugin.name}\033[0m\n")
        else:
            self.renderer.show_error(f"{plugin.name}: channel closed")
        return True

    async def _cmd_list_plugins(self, cmd: str) -> bool:
        """Show registered plugins in routing order."""
        plugins = self.service.list_plugins()
        if not plugins:
            print("\033[33mno plugins registered\033[0m\n")
            return True

        table = Table(title="Plugins (first match wins)")
        table.add_column("Name", style="cyan")
        table.add_column("Pattern")
        table.add_column("Source")
        table.add_column("PID", justify="right")
        table.add_column("Description", style="dim")
        for p in plugins:
            table.add_row(p["name"], p["pattern"] or "", p["source"], str(p["pid"] or ""), p["description"] or "")
        console.print(table)
        console.print()
        return True

    async def _cmd_help(self, cmd: str) -> bool:
        help_text = """[bold]Commands:[/bold]
  /q, /quit, /exit    quit (plugins are shut down)
  /complete           ask the last plugin to complete the query
  /submit <id>        choose a selection from the last response
  /plugins            list registered plugins
  /help               show this help

Anything else is dispatched as a query."""
        console.print(Panel(help_text, title="Help", border_style="blue"))
        console.print()
        return True
