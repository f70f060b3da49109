"""REPL core loop."""

import asyncio
import logging
from pathlib import Path

from prompt_toolkit import PromptSession
from prompt_toolkit.formatted_text import HTML
from prompt_toolkit.history import FileHistory
from rich.panel import Panel

from cli.command_handler import CommandHandler
from cli.renderer import ResultRenderer, console
from cli.state import REPLState
from launcher.plugins.manager import LauncherService
from launcher.plugins.protocol import CloseResponse, FillResponse, QueriedResponse

logger = logging.getLogger(__name__)

# Log directory
LOG_DIR = Path(__file__).parent.parent / "log"
LOG_DIR.mkdir(exist_ok=True)


class REPLRunner:
    """Interactive front end for a LauncherService."""

    def __init__(self, service: LauncherService):
        self.service = service
        self.state = REPLState()
        self.renderer = ResultRenderer()
        self.command_handler = CommandHandler(self.state, self.service, self.renderer)

    def _show_welcome(self):
        console.print(Panel.fit(
            "[bold cyan]Launcher plugin console[/bold cyan]\n"
            f"[green]Plugins:[/green] {self.service.registry.count()}\n"
            "type a query, /help for commands, /q to quit",
            border_style="blue"
        ))
        console.print()

    def _build_prompt(self) -> HTML:
        if self.state.plugin:
            return HTML(f'<ansicyan>[{self.state.plugin.name}]</ansicyan> <b>></b> ')
        return HTML('<b>></b> ')

    async def _process_query(self, query: str):
        """Dispatch a query off the event loop and render the answer."""
        result = await asyncio.to_thread(self.service.dispatch, query)
        if result is None:
            self.state.clear_result(query)
            self.renderer.show_no_result(query)
            return

        plugin, response = result
        if isinstance(response, QueriedResponse):
            self.state.set_result(query, plugin, response.selections)
            self.renderer.show_selections(plugin.name, response.selections)
        elif isinstance(response, FillResponse):
            self.state.set_result(query, plugin, [])
            self.renderer.show_fill(response.text)
        elif isinstance(response, CloseResponse):
            self.state.clear_result(query)
            self.renderer.show_closed(plugin.name)

    async def run(self):
        """Main loop."""
        history_file = LOG_DIR / ".launcher_history"
        session = PromptSession(history=FileHistory(str(history_file)))

        self._show_welcome()

        while True:
            try:
                user_input = await session.prompt_async(self._build_prompt())

                if not user_input.strip():
                    continue

                if user_input.startswith("/"):
                    should_continue = await self.command_handler.handle(user_input)
                    if not should_continue:
                        break
                    continue

                await self._process_query(user_input)

            except KeyboardInterrupt:
                print("\n\033[33m(use /q to quit)\033[0m\n")
                continue

            except EOFError:
                print("\n\033[33mbye bye!\033[0m")
                break

            except Exception as e:
                print(f"\033[31merror: {str(e)}\033[0m\n")
                logger.exception("REPL error")
