"""Interactive surface for plan-mode: UI collaborators, rendering and /plan."""

from plan_mode.cli.ui import ConsoleUI, HeadlessUI, PlanUI
from plan_mode.cli.commands import (
    Command,
    CommandCategory,
    CommandCompletion,
    CommandRegistry,
    CommandResult,
)
from plan_mode.cli.rendering import plan_document, render_call, render_plan_heading, render_result
from plan_mode.cli.plan_command import PlanCommand

__all__ = [
    "Command",
    "CommandCategory",
    "CommandCompletion",
    "CommandRegistry",
    "CommandResult",
    "ConsoleUI",
    "HeadlessUI",
    "PlanCommand",
    "PlanUI",
    "plan_document",
    "render_call",
    "render_plan_heading",
    "render_result",
]
