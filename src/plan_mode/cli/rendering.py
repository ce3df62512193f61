"""Rich renderings of plan tool calls, results and plan documents."""

from typing import TYPE_CHECKING, Any

from rich.text import Text

from plan_mode.constants import UNTITLED
from plan_mode.planning.ids import format_plan_id, normalize_plan_id
from plan_mode.planning.models import Plan, PlanStatus

if TYPE_CHECKING:
    from plan_mode.planning.engine import PlanActionResult

ACTION_LABELS = {
    "create": "Created",
    "update": "Updated",
    "add-step": "Added step to",
    "complete-step": "Completed step in",
    "delete": "Deleted",
    "claim": "Claimed",
    "release": "Released",
    "execute": "Executing",
}

# (label, max shown when collapsed)
LIST_SECTIONS = (("Active", 3), ("Draft", 3), ("Completed", 2))

EXPAND_HINT = "(expand for details)"


def _status_style(status: PlanStatus) -> str:
    if status == PlanStatus.ACTIVE:
        return "green"
    if status == PlanStatus.COMPLETED:
        return "dim"
    return "yellow"


def render_plan_heading(plan: Plan, current_session_id: str | None = None) -> Text:
    """``PLAN-id title [done/total] (assigned: s, current) (status)``."""
    text = Text()
    text.append(plan.display_id, style="cyan")
    text.append(" ")
    text.append(plan.title or UNTITLED, style="dim" if plan.is_completed else "")
    done, total = plan.progress
    if total:
        text.append(f" [{done}/{total}]", style="bright_black")
    if plan.assigned_to_session:
        current = plan.assigned_to_session == current_session_id
        suffix = ", current" if current else ""
        text.append(
            f" (assigned: {plan.assigned_to_session}{suffix})", style="green" if current else "dim"
        )
    text.append(" ")
    text.append(f"({plan.status.value})", style=_status_style(plan.status))
    return text


def render_call(args: dict[str, Any]) -> Text:
    """One-line summary of a plan tool call."""
    action = args.get("action") if isinstance(args.get("action"), str) else ""
    plan_id = args.get("id") if isinstance(args.get("id"), str) else ""
    title = args.get("title") if isinstance(args.get("title"), str) else ""
    step_id = args.get("step_id")

    text = Text()
    text.append("plan ", style="bold")
    text.append(action, style="bright_black")
    normalized = normalize_plan_id(plan_id) if plan_id else ""
    if normalized:
        text.append(f" {format_plan_id(normalized)}", style="cyan")
    if title:
        text.append(f' "{title}"', style="dim")
    if isinstance(step_id, int) and not isinstance(step_id, bool):
        text.append(f" step #{step_id}", style="yellow")
    return text


def _list_sections(plans: list[Plan]) -> dict[str, list[Plan]]:
    return {
        "Active": [p for p in plans if p.status == PlanStatus.ACTIVE],
        "Draft": [p for p in plans if p.status == PlanStatus.DRAFT],
        "Completed": [p for p in plans if p.is_completed],
    }


def render_result(result: "PlanActionResult", expanded: bool = False) -> Text:
    """Render an action result for display."""
    if result.error is not None:
        return Text(f"Error: {result.error}", style="red")

    if result.plans is not None:
        if not result.plans:
            return Text("No plans", style="dim")
        sections = _list_sections(result.plans)
        lines: list[Text] = []
        for index, (label, limit) in enumerate(LIST_SECTIONS):
            section = sections[label]
            if index:
                lines.append(Text(""))
            lines.append(Text(f"{label} ({len(section)})", style="bright_black"))
            if not section:
                lines.append(Text("  none", style="dim"))
                continue
            shown = section if expanded else section[:limit]
            for plan in shown:
                lines.append(Text("  ") + render_plan_heading(plan, result.current_session_id))
            if not expanded and len(section) > limit:
                lines.append(Text(f"  ... {len(section) - limit} more", style="dim"))
        if not expanded:
            lines.append(Text(EXPAND_HINT, style="dim"))
        return Text("\n").join(lines)

    if result.plan is None:
        return Text(result.content)

    plan = result.plan
    text = Text()
    label = ACTION_LABELS.get(result.action)
    if label:
        text.append("✓ ", style="green")
        text.append(f"{label} ", style="bright_black")
    text.append_text(render_plan_heading(plan))

    if plan.steps:
        if expanded:
            text.append("\n")
            for step in plan.steps:
                text.append("\n  ")
                text.append("✓" if step.done else "○", style="green" if step.done else "dim")
                text.append(f" #{step.id}", style="cyan")
                text.append(f" {step.text}", style="dim" if step.done else "bright_black")
        else:
            text.append(f"\n{EXPAND_HINT}", style="dim")
    return text


def plan_document(plan: Plan) -> str:
    """Markdown shown by the plan detail view."""
    if plan.steps:
        steps = "\n".join(f"- [{'x' if s.done else ' '}] {s.text}" for s in plan.steps)
    else:
        steps = "_No steps defined._"
    document = f"## Steps\n\n{steps}"
    body = plan.body.strip()
    if body:
        document += f"\n\n---\n\n{body}"
    return document
