"""Host-facing facade for plan-mode.

PlanModeExtension wires settings, logging, the lock manager, the action
engine, the mode coordinator and the /plan command together, and exposes
one method per host hook.

Example:
    extension = PlanModeExtension()
    ctx = PlanContext(cwd=Path.cwd(), session_id="abc123", ui=ConsoleUI())
    await extension.on_session_start(ctx)
    result = await extension.handle_tool_call(ctx, {"action": "list"})
"""

from pathlib import Path
from typing import Any, Callable

from rich.console import Console

from plan_mode.cli.commands import CommandCompletion, CommandRegistry, CommandResult
from plan_mode.cli.plan_command import PlanCommand
from plan_mode.config import PlanModeSettings, get_settings
from plan_mode.logging import Loggers, bind_context, configure_logging
from plan_mode.planning.engine import PlanActionEngine
from plan_mode.planning.locks import LockManager
from plan_mode.planning.models import PlanRequest
from plan_mode.tools.plan_tools import describe_plan_tool
from plan_mode.tools.registry import get_registry
from plan_mode.tools.shell import CommandPolicy
from plan_mode.workflow.context import (
    PlanContext,
    set_context_plan_context,
    set_context_plan_engine,
)
from plan_mode.workflow.events import InjectedMessage, ToolCallDecision
from plan_mode.workflow.mode import PlanModeCoordinator

logger = Loggers.mode()


class PlanModeExtension:
    """Plan storage, planning mode and the /plan command for one host process.

    Args:
        settings: Process settings; defaults to get_settings().
        lock_manager: Lease manager; built from settings when omitted.
        policy: Shell policy for planning mode.
        set_active_tools: Host callback receiving the enabled tool names.
        console: Console used for non-interactive command output.
    """

    def __init__(
        self,
        settings: PlanModeSettings | None = None,
        lock_manager: LockManager | None = None,
        policy: CommandPolicy | None = None,
        set_active_tools: Callable[[list[str]], None] | None = None,
        console: Console | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        configure_logging(self.settings)
        self.coordinator = PlanModeCoordinator(self.settings, policy, set_active_tools)
        self.engine = PlanActionEngine(self.settings, lock_manager, self.coordinator)
        self.commands = CommandRegistry()
        self.plan_command = PlanCommand(self.engine)
        self.commands.register(self.plan_command)
        self.console = console or Console()

    def tool_description(self, cwd: str | Path) -> str:
        return describe_plan_tool(cwd, self.settings.path)

    async def on_session_start(self, ctx: PlanContext) -> list[str]:
        bind_context(session_id=ctx.session_id)
        deleted = await self.coordinator.on_session_start(ctx)
        logger.debug("session_started", cwd=str(ctx.cwd), gc_deleted=len(deleted))
        return deleted

    async def on_session_switch(self, ctx: PlanContext) -> None:
        bind_context(session_id=ctx.session_id)
        await self.coordinator.on_session_switch(ctx)

    def on_tool_call(
        self, ctx: PlanContext, tool_name: str, tool_input: dict[str, Any]
    ) -> ToolCallDecision:
        return self.coordinator.check_tool_call(ctx, tool_name, tool_input)

    async def before_agent_start(self, ctx: PlanContext) -> list[InjectedMessage]:
        return await self.coordinator.before_agent_start(ctx)

    async def handle_tool_call(self, ctx: PlanContext, params: dict[str, Any]) -> dict[str, Any]:
        """Run the registered ``plan`` tool for one request."""
        known = {k: v for k, v in params.items() if k in PlanRequest.model_fields and v is not None}
        known.setdefault("action", "")
        set_context_plan_engine(self.engine)
        set_context_plan_context(ctx)
        try:
            return await get_registry().call("plan", **known)
        finally:
            set_context_plan_context(None)

    async def run_command(self, ctx: PlanContext, args: str = "") -> CommandResult:
        """Run ``/plan <args>``, printing any plain-text output."""
        result = await self.plan_command.execute(args, ctx)
        for line in result.output:
            self.console.print(line, markup=False, highlight=False)
        return result

    async def complete_command(self, ctx: PlanContext, prefix: str) -> list[CommandCompletion]:
        return await self.plan_command.get_completions(prefix, ctx)

    async def toggle_planning_mode(self, ctx: PlanContext) -> bool:
        """Keyboard-shortcut hook. Returns the new planning-mode state."""
        return await self.coordinator.toggle(ctx)
