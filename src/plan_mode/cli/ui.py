"""UI surface used by plan-mode.

The engine and the /plan command only talk to a PlanUI. Hosts provide
their own implementation; ConsoleUI renders to a terminal with rich and
HeadlessUI is used when nobody is watching.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Literal

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.text import Text

NotifyLevel = Literal["info", "warning", "error"]


class PlanUI(ABC):
    """Interactive collaborator: selections, confirmations and status areas."""

    interactive: bool = True

    @abstractmethod
    async def select(self, title: str, options: list[str]) -> str | None:
        """Ask the user to pick one option. None means cancelled."""

    @abstractmethod
    async def confirm(self, title: str, message: str) -> bool:
        """Ask a yes/no question."""

    @abstractmethod
    async def show_document(self, title: str, markdown: str) -> None:
        """Display a scrollable markdown document."""

    @abstractmethod
    def notify(self, message: str, level: NotifyLevel = "info") -> None:
        """Post a transient notification."""

    @abstractmethod
    def set_status(self, key: str, text: str | None) -> None:
        """Set or clear (None) a persistent status indicator."""

    @abstractmethod
    def set_widget(self, key: str, lines: list[str] | None) -> None:
        """Set or clear (None) a persistent side panel."""


class HeadlessUI(PlanUI):
    """UI for non-interactive runs: prompts decline, display calls are dropped."""

    interactive = False

    async def select(self, title: str, options: list[str]) -> str | None:
        return None

    async def confirm(self, title: str, message: str) -> bool:
        return False

    async def show_document(self, title: str, markdown: str) -> None:
        return None

    def notify(self, message: str, level: NotifyLevel = "info") -> None:
        return None

    def set_status(self, key: str, text: str | None) -> None:
        return None

    def set_widget(self, key: str, lines: list[str] | None) -> None:
        return None


_LEVEL_STYLES = {"info": "cyan", "warning": "yellow", "error": "bold red"}


class ConsoleUI(PlanUI):
    """Terminal UI built on rich.

    Blocking prompts run in a worker thread so the event loop keeps going.
    Status indicators and side panels are kept in memory and printed on
    change.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()
        self.statuses: dict[str, str] = {}
        self.widgets: dict[str, list[str]] = {}

    async def select(self, title: str, options: list[str]) -> str | None:
        if not options:
            return None
        self.console.print(Text(title, style="bold"))
        for index, option in enumerate(options, start=1):
            self.console.print(Text.assemble(f"  {index}. ", option))
        choices = [str(i) for i in range(1, len(options) + 1)]
        answer = await asyncio.to_thread(
            Prompt.ask, "Select (empty to cancel)", console=self.console, default=""
        )
        answer = answer.strip()
        if answer not in choices:
            return None
        return options[int(answer) - 1]

    async def confirm(self, title: str, message: str) -> bool:
        self.console.print(Text(title, style="bold yellow"))
        return await asyncio.to_thread(Confirm.ask, message, console=self.console, default=False)

    async def show_document(self, title: str, markdown: str) -> None:
        self.console.print(Panel(Markdown(markdown), title=Text(title, style="bold"), border_style="cyan"))

    def notify(self, message: str, level: NotifyLevel = "info") -> None:
        self.console.print(message, style=_LEVEL_STYLES.get(level, "cyan"), markup=False)

    def set_status(self, key: str, text: str | None) -> None:
        if text is None:
            if self.statuses.pop(key, None) is not None:
                self.console.print(Text(f"{key} cleared", style="dim"))
            return
        if self.statuses.get(key) != text:
            self.statuses[key] = text
            self.console.print(Text.assemble((f"{key}: ", "dim"), text))

    def set_widget(self, key: str, lines: list[str] | None) -> None:
        if not lines:
            self.widgets.pop(key, None)
            return
        if self.widgets.get(key) != lines:
            self.widgets[key] = list(lines)
            self.console.print(Panel(Text("\n".join(lines)), title=key, border_style="dim"))
