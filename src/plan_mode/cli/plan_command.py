"""The /plan command: planning-mode toggle and interactive plan manager."""

from typing import TYPE_CHECKING

from plan_mode.cli.commands import Command, CommandCategory, CommandCompletion, CommandResult
from plan_mode.cli.rendering import plan_document
from plan_mode.constants import UNTITLED
from plan_mode.errors import ToolError
from plan_mode.logging import Loggers
from plan_mode.planning.models import Plan, PlanStatus
from plan_mode.planning.search import filter_plans

if TYPE_CHECKING:
    from plan_mode.planning.engine import PlanActionEngine
    from plan_mode.workflow.context import PlanContext

logger = Loggers.cli()

NO_PLANS = "No plans. Ask the agent to create one."


def plan_line(plan: Plan) -> str:
    done, total = plan.progress
    return f"{plan.display_id} {plan.title or UNTITLED} [{plan.status.value}] {done}/{total}"


def plan_label(plan: Plan) -> str:
    label = plan_line(plan)
    if plan.assigned_to_session:
        label += f" (assigned: {plan.assigned_to_session})"
    return label


def execute_prompt(plan: Plan) -> str:
    remaining = plan.remaining_steps()
    if remaining:
        return f'Execute plan {plan.display_id} "{plan.title}". Start with step: {remaining[0].text}'
    return f"Plan {plan.display_id} complete! Mark it as completed."


def edit_prompt(plan: Plan) -> str:
    return f'Edit plan {plan.display_id} "{plan.title}": '


def menu_actions(plan: Plan) -> list[str]:
    """Actions offered for a selected plan, in menu order."""
    actions = ["view", "execute", "edit", "reopen" if plan.is_completed else "complete"]
    if plan.assigned_to_session:
        actions.append("release")
    actions.append("delete")
    return actions


class PlanCommand(Command):
    """Toggle planning mode or browse and act on plans.

    ``/plan on`` and ``/plan off`` switch planning mode. Any other argument
    is a search query for the plan picker.
    """

    def __init__(self, engine: "PlanActionEngine") -> None:
        super().__init__(
            name="plan",
            description="Plan manager: /plan [on|off] or /plan to open manager",
            usage="/plan [on|off|query]",
            examples=["/plan on", "/plan off", "/plan", "/plan auth"],
            category=CommandCategory.PLANNING,
        )
        self.engine = engine

    @property
    def coordinator(self):
        return self.engine.coordinator

    async def execute(self, args: str, ctx: "PlanContext") -> CommandResult:
        query = args.strip()
        keyword = query.lower()
        if keyword == "on":
            await self.coordinator.enable(ctx)
            return CommandResult()
        if keyword == "off":
            await self.coordinator.disable(ctx)
            return CommandResult()

        if not ctx.has_ui:
            plans = await self.engine.store_for(ctx).list_plans()
            if not plans:
                return CommandResult(output=[NO_PLANS])
            return CommandResult(output=[plan_line(p) for p in plans])

        while True:
            plan = await self._pick_plan(ctx, query)
            if plan is None:
                return CommandResult()
            outcome = await self._plan_menu(ctx, plan)
            if outcome is not None:
                return outcome

    async def get_completions(self, prefix: str, ctx: "PlanContext") -> list[CommandCompletion]:
        items = [
            CommandCompletion("on", "on", "Enter planning mode (read-only)"),
            CommandCompletion("off", "off", "Exit planning mode"),
        ]
        for plan in await self.engine.store_for(ctx).list_plans():
            done, total = plan.progress
            items.append(
                CommandCompletion(
                    value=plan.title or plan.display_id,
                    label=f"{plan.display_id} {plan.title or UNTITLED}",
                    description=f"{plan.status.value} - {done}/{total} steps",
                )
            )
        needle = prefix.lower()
        return [item for item in items if needle in item.value.lower()]

    async def _pick_plan(self, ctx: "PlanContext", query: str) -> Plan | None:
        plans = await self.engine.store_for(ctx).list_plans()
        if not plans:
            ctx.ui.notify(NO_PLANS)
            return None
        matches = filter_plans(plans, query)
        if not matches:
            ctx.ui.notify(f"No plans match: {query}", "warning")
            return None
        labels = {plan_label(p): p for p in matches}
        choice = await ctx.ui.select("Plans", list(labels))
        if choice is None:
            return None
        return labels.get(choice)

    async def _plan_menu(self, ctx: "PlanContext", summary: Plan) -> CommandResult | None:
        """Show the action menu. Returns a result to finish, None to go back."""
        try:
            plan = await self.engine.store_for(ctx).read(summary.id)
        except ToolError as e:
            ctx.ui.notify(e.message, "error")
            return None

        action = await ctx.ui.select(f"{plan.display_id} {plan.title or UNTITLED}", menu_actions(plan))
        if action is None:
            return None
        logger.debug("plan_menu_action", plan_id=plan.id, action=action)

        try:
            if action == "view":
                await ctx.ui.show_document(f"{plan.display_id} {plan.title or UNTITLED}", plan_document(plan))
                if plan.is_completed or not await ctx.ui.confirm(
                    "Execute plan?", f'Execute {plan.display_id} "{plan.title}"?'
                ):
                    return None
                action = "execute"
            if action == "execute":
                executed = await self.engine.execute_plan(ctx, plan.id)
                return CommandResult(next_prompt=execute_prompt(executed))
            if action == "edit":
                return CommandResult(next_prompt=edit_prompt(plan))
            if action == "complete":
                await self._set_status(ctx, plan, PlanStatus.COMPLETED, "Completed")
            elif action == "reopen":
                await self._set_status(ctx, plan, PlanStatus.DRAFT, "Reopened")
            elif action == "release":
                await self._release(ctx, plan)
            elif action == "delete":
                await self._delete(ctx, plan)
        except ToolError as e:
            ctx.ui.notify(e.message, "error")
        return None

    async def _set_status(self, ctx: "PlanContext", plan: Plan, status: PlanStatus, verb: str) -> None:
        def apply(existing: Plan) -> bool:
            existing.status = status
            if status == PlanStatus.COMPLETED:
                existing.assigned_to_session = None
            return True

        await self.engine.mutate(ctx, plan.id, apply)
        if status == PlanStatus.COMPLETED:
            self.coordinator.clear_active_plan(ctx, plan.id)
        ctx.ui.notify(f"{verb} plan {plan.display_id}")
        await self.coordinator.refresh(ctx)

    async def _release(self, ctx: "PlanContext", plan: Plan) -> None:
        def apply(existing: Plan) -> bool:
            existing.assigned_to_session = None
            return True

        await self.engine.mutate(ctx, plan.id, apply)
        self.coordinator.clear_active_plan(ctx, plan.id)
        ctx.ui.notify(f"Released plan {plan.display_id}")
        await self.coordinator.refresh(ctx)

    async def _delete(self, ctx: "PlanContext", plan: Plan) -> None:
        if not await ctx.ui.confirm("Delete plan?", f'Delete {plan.display_id} "{plan.title}"?'):
            return
        await self.engine.delete_plan(ctx, plan.id)
        ctx.ui.notify(f"Deleted plan {plan.display_id}")
        await self.coordinator.refresh(ctx)
