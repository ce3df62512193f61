"""Slash command registry and base command class.

Example of creating a custom command:

    from plan_mode.cli.commands import Command, CommandResult

    class HelloCommand(Command):
        '''Greet the user.'''

        def __init__(self):
            super().__init__(
                name="hello",
                description="Say hello",
                usage="/hello [name]",
            )

        async def execute(self, args: str, ctx: PlanContext) -> CommandResult:
            ctx.ui.notify(f"Hello {args or 'there'}")
            return CommandResult()
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from plan_mode.workflow.context import PlanContext


class CommandCategory(Enum):
    """Categories for organizing commands."""

    GENERAL = "general"
    PLANNING = "planning"


@dataclass
class CommandCompletion:
    """One argument completion offered to the host."""

    value: str
    label: str
    description: str = ""


@dataclass
class CommandResult:
    """What a command hands back to the host.

    Attributes:
        next_prompt: Text to place in the user's editor, if any
        output: Lines to print when there is no interactive UI
    """

    next_prompt: str | None = None
    output: list[str] = field(default_factory=list)


class Command(ABC):
    """Base class for slash commands."""

    def __init__(
        self,
        name: str,
        description: str,
        aliases: list[str] | None = None,
        usage: str | None = None,
        examples: list[str] | None = None,
        category: CommandCategory = CommandCategory.GENERAL,
    ) -> None:
        self.name = name
        self.description = description
        self.aliases = aliases or []
        self.usage = usage or f"/{name}"
        self.examples = examples or []
        self.category = category

    @abstractmethod
    async def execute(self, args: str, ctx: "PlanContext") -> CommandResult:
        """Execute the command with given arguments.

        Args:
            args: Command arguments string (everything after the command name)
            ctx: Request context of the calling session
        """

    async def get_completions(self, prefix: str, ctx: "PlanContext") -> list[CommandCompletion]:
        """Argument completions for ``prefix``. None by default."""
        return []

    def get_help(self) -> str:
        """Get detailed help text for this command."""
        lines = [
            f"**/{self.name}**",
            f"  {self.description}",
            "",
            f"**Usage:** `{self.usage}`",
        ]

        if self.aliases:
            lines.append(f"**Aliases:** {', '.join(f'/{a}' for a in self.aliases)}")

        if self.examples:
            lines.append("")
            lines.append("**Examples:**")
            for example in self.examples:
                lines.append(f"  `{example}`")

        return "\n".join(lines)


class CommandRegistry:
    """Registry for managing slash commands."""

    def __init__(self) -> None:
        self._commands: dict[str, Command] = {}

    def register(self, command: Command) -> None:
        """Register a command and its aliases."""
        self._commands[command.name] = command
        for alias in command.aliases:
            self._commands[alias] = command

    def get(self, name: str) -> Command | None:
        """Get a command by name or alias."""
        return self._commands.get(name.lstrip("/"))

    def all_commands(self) -> list[Command]:
        """Get all unique commands (excluding aliases)."""
        seen: set[str] = set()
        commands: list[Command] = []
        for cmd in self._commands.values():
            if cmd.name not in seen:
                seen.add(cmd.name)
                commands.append(cmd)
        return commands

    def by_category(self, category: CommandCategory) -> list[Command]:
        return [cmd for cmd in self.all_commands() if cmd.category == category]

    async def dispatch(self, line: str, ctx: "PlanContext") -> CommandResult | None:
        """Run a ``/name args`` line. Returns None for unknown commands."""
        name, _, args = line.strip().partition(" ")
        command = self.get(name)
        if command is None:
            return None
        return await command.execute(args.strip(), ctx)
