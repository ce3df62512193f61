"""The ``plan`` tool exposed to the automated caller.

The workflow host sets the engine and request context before invoking
the tool:

    set_context_plan_engine(engine)
    set_context_plan_context(ctx)
    result = await plan(action="list")
"""

from pathlib import Path
from typing import Any

from plan_mode.planning.models import PLAN_ACTIONS
from plan_mode.planning.paths import plans_dir_label
from plan_mode.tools import require_context
from plan_mode.tools.registry import ToolCategory, register_tool
from plan_mode.workflow.context import get_context_plan_context, get_context_plan_engine


def describe_plan_tool(cwd: str | Path, override: str | None = None) -> str:
    """Tool description naming the plans directory for ``cwd``."""
    return (
        f"Manage file-based plans in {plans_dir_label(cwd, override)}. "
        f"Actions: {', '.join(PLAN_ACTIONS)}. "
        "Plans have steps that can be marked complete. Claim plans before working on them. "
        "Plan ids are shown as PLAN-<hex>; id parameters accept PLAN-<hex> or raw hex."
    )


@register_tool(
    category=ToolCategory.PLANNING,
    description="Manage file-based plans with ordered steps, claiming and execution",
)
@require_context("Plan engine", get_context_plan_engine)
@require_context("Plan context", get_context_plan_context)
async def plan(
    action: str,
    id: str | None = None,
    title: str | None = None,
    status: str | None = None,
    body: str | None = None,
    steps: list[str] | None = None,
    step_text: str | None = None,
    step_id: int | None = None,
    force: bool = False,
) -> dict[str, Any]:
    """Run a plan action.

    Args:
        action: One of list, get, create, update, add-step, complete-step,
            delete, claim, release, execute.
        id: Plan id (PLAN-<hex> or raw hex).
        title: Plan title (create, update).
        status: draft, active, completed or archived (create, update).
        body: Plan notes in markdown (create, update).
        steps: Step texts for a new plan (create).
        step_text: Text of the step to append (add-step).
        step_id: Step to mark done (complete-step).
        force: Override another session's assignment (claim, release, execute).

    Returns:
        A dict with ``content`` (text for the caller) and ``details``
        (structured result, or ``error`` and ``error_code``).
    """
    engine = get_context_plan_engine()
    ctx = get_context_plan_context()
    params: dict[str, Any] = {
        "action": action,
        "id": id,
        "title": title,
        "status": status,
        "body": body,
        "steps": steps,
        "step_text": step_text,
        "step_id": step_id,
        "force": force,
    }
    result = await engine.run({k: v for k, v in params.items() if v is not None}, ctx)
    return result.to_dict()
