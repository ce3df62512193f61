"""Planning mode and active-plan coordination.

The coordinator owns no state of its own: everything lives in the
SessionState carried by each PlanContext, so a fresh context with a fresh
state is all a test needs.
"""

from typing import Any, Callable

from plan_mode.config import PlanModeSettings, get_settings
from plan_mode.errors import PlanNotFoundError
from plan_mode.logging import Loggers
from plan_mode.planning.ids import format_plan_id
from plan_mode.planning.models import Plan
from plan_mode.planning.plan_store import PlanStore
from plan_mode.tools.shell import CommandPolicy, default_policy
from plan_mode.workflow.context import PlanContext
from plan_mode.workflow.events import InjectedMessage, ToolCallDecision

logger = Loggers.mode()

PLAN_MODE_TOOLS = ["read", "bash", "grep", "find", "ls"]
NORMAL_MODE_TOOLS = ["read", "bash", "edit", "write"]

STATUS_KEY = "plan-mode"
WIDGET_KEY = "plan-steps"

PLANNING_CONTEXT_TYPE = "plan-mode-context"
EXECUTION_CONTEXT_TYPE = "plan-execution-context"

PLANNING_NOTE = f"""[PLANNING MODE ACTIVE]
You are in planning mode - a read-only exploration mode for safe code analysis.

Restrictions:
- You can only use: {", ".join(PLAN_MODE_TOOLS)}
- Bash is restricted to READ-ONLY commands
- Focus on analysis, planning, and understanding

Use the "plan" tool to:
- Create a plan with steps
- List existing plans
- Get plan details

Do NOT attempt to make changes - just describe what you would do."""


def execution_note(plan: Plan) -> str:
    """Guidance for the next turn while a plan is being executed."""
    heading = f"[EXECUTING PLAN {format_plan_id(plan.id)}]"
    remaining = plan.remaining_steps()
    if not remaining:
        return f'{heading}\n\nAll steps are complete! Use the plan tool to mark the plan as "completed".'
    steps_list = "\n".join(f"{s.id}. {s.text}" for s in remaining)
    return (
        f"{heading}\n\nRemaining steps:\n{steps_list}\n\n"
        'Execute each step in order. Use the plan tool with action "complete-step" '
        "and step_id to mark steps done."
    )


def blocked_reason(command: str) -> str:
    return f"Planning mode: destructive command blocked. Use /plan off to disable.\nCommand: {command}"


class PlanModeCoordinator:
    """Tracks planning mode and the active plan for a session.

    Args:
        settings: Settings used to resolve the store root. Defaults to the
            process settings.
        policy: Shell policy consulted while planning mode is on.
        set_active_tools: Host callback receiving the enabled tool names.
    """

    def __init__(
        self,
        settings: PlanModeSettings | None = None,
        policy: CommandPolicy | None = None,
        set_active_tools: Callable[[list[str]], None] | None = None,
    ):
        self.settings = settings or get_settings()
        self.policy = policy or default_policy()
        self._set_active_tools = set_active_tools

    def store_for(self, ctx: PlanContext) -> PlanStore:
        return PlanStore.for_cwd(ctx.cwd, self.settings.path)

    def _apply_tools(self, ctx: PlanContext, tools: list[str]) -> None:
        ctx.state.active_tools = list(tools)
        if self._set_active_tools is not None:
            self._set_active_tools(list(tools))

    # Planning mode

    async def enable(self, ctx: PlanContext) -> bool:
        """Turn planning mode on. Returns False if it was already on."""
        if ctx.state.planning_mode_enabled:
            return False
        ctx.state.planning_mode_enabled = True
        self._apply_tools(ctx, PLAN_MODE_TOOLS)
        ctx.ui.notify(f"Planning mode enabled. Read-only tools: {', '.join(PLAN_MODE_TOOLS)}")
        logger.info("planning_mode_enabled", session_id=ctx.session_id)
        await self.refresh(ctx)
        return True

    async def disable(self, ctx: PlanContext) -> bool:
        """Turn planning mode off. Returns False if it was already off."""
        if not ctx.state.planning_mode_enabled:
            return False
        ctx.state.planning_mode_enabled = False
        self._apply_tools(ctx, NORMAL_MODE_TOOLS)
        ctx.ui.notify("Planning mode disabled. Full access restored.")
        logger.info("planning_mode_disabled", session_id=ctx.session_id)
        await self.refresh(ctx)
        return True

    async def toggle(self, ctx: PlanContext) -> bool:
        """Flip planning mode and return the new state."""
        if ctx.state.planning_mode_enabled:
            await self.disable(ctx)
        else:
            await self.enable(ctx)
        return ctx.state.planning_mode_enabled

    # Active plan

    def activate_plan(self, ctx: PlanContext, plan_id: str) -> None:
        """Make ``plan_id`` the active plan and restore full tool access."""
        ctx.state.planning_mode_enabled = False
        ctx.state.active_plan_id = plan_id
        self._apply_tools(ctx, NORMAL_MODE_TOOLS)
        logger.info("plan_activated", plan_id=plan_id, session_id=ctx.session_id)

    def clear_active_plan(self, ctx: PlanContext, plan_id: str | None = None) -> bool:
        """Clear the active plan, or only if it is ``plan_id`` when given."""
        current = ctx.state.active_plan_id
        if current is None or (plan_id is not None and current != plan_id):
            return False
        ctx.state.active_plan_id = None
        logger.info("plan_deactivated", plan_id=current, session_id=ctx.session_id)
        return True

    async def read_active_plan(self, ctx: PlanContext) -> Plan | None:
        plan_id = ctx.state.active_plan_id
        if plan_id is None:
            return None
        try:
            return await self.store_for(ctx).read(plan_id)
        except (PlanNotFoundError, OSError, UnicodeDecodeError):
            return None

    # Host hooks

    def check_tool_call(
        self, ctx: PlanContext, tool_name: str, tool_input: dict[str, Any]
    ) -> ToolCallDecision:
        """Block destructive shell commands while planning mode is on."""
        if not ctx.state.planning_mode_enabled or tool_name != "bash":
            return ToolCallDecision()
        command = str(tool_input.get("command") or "")
        result = self.policy.classify(command)
        if result.allowed:
            return ToolCallDecision()
        logger.warning("command_blocked", command=command, reason=result.reason)
        return ToolCallDecision(block=True, reason=blocked_reason(command))

    async def before_agent_start(self, ctx: PlanContext) -> list[InjectedMessage]:
        """Notes to inject before an automated turn, re-read from disk each time."""
        messages: list[InjectedMessage] = []
        if ctx.state.planning_mode_enabled:
            messages.append(InjectedMessage(PLANNING_CONTEXT_TYPE, PLANNING_NOTE))
        plan = await self.read_active_plan(ctx)
        if plan is not None:
            messages.append(InjectedMessage(EXECUTION_CONTEXT_TYPE, execution_note(plan)))
        return messages

    async def refresh(self, ctx: PlanContext) -> None:
        """Push the status indicator and the step side panel to the UI."""
        plan = await self.read_active_plan(ctx)

        if ctx.state.planning_mode_enabled:
            ctx.ui.set_status(STATUS_KEY, "⏸ planning")
        elif plan is not None:
            done, total = plan.progress
            ctx.ui.set_status(STATUS_KEY, f"📋 {done}/{total}")
        else:
            ctx.ui.set_status(STATUS_KEY, None)

        if plan is None or not plan.steps:
            ctx.ui.set_widget(WIDGET_KEY, None)
        else:
            ctx.ui.set_widget(
                WIDGET_KEY, [f"☑ {s.text}" if s.done else f"☐ {s.text}" for s in plan.steps]
            )

    async def on_session_start(self, ctx: PlanContext) -> list[str]:
        """Prepare the store, run the retention sweep and apply the start flag.

        Returns:
            Ids removed by the retention sweep.
        """
        store = self.store_for(ctx)
        await store.ensure_dir()
        deleted = await store.garbage_collect(await store.read_settings())
        if self.settings.start_in_planning_mode and not ctx.state.planning_mode_enabled:
            ctx.state.planning_mode_enabled = True
            self._apply_tools(ctx, PLAN_MODE_TOOLS)
        await self.refresh(ctx)
        return deleted

    async def on_session_switch(self, ctx: PlanContext) -> None:
        await self.refresh(ctx)
