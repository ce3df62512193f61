"""Session state and planning-mode coordination.

Light types (SessionState, PlanContext, events, context accessors) are
available immediately; the coordinator is loaded on first access.
"""

from plan_mode.workflow.context import (
    PlanContext,
    SessionState,
    get_context_plan_context,
    get_context_plan_engine,
    set_context_plan_context,
    set_context_plan_engine,
)
from plan_mode.workflow.events import InjectedMessage, ToolCallDecision

_lazy_imports = {
    "PlanModeCoordinator": "plan_mode.workflow.mode",
    "PLAN_MODE_TOOLS": "plan_mode.workflow.mode",
    "NORMAL_MODE_TOOLS": "plan_mode.workflow.mode",
}


def __getattr__(name: str):
    """Lazy import for the coordinator."""
    if name in _lazy_imports:
        import importlib

        module = importlib.import_module(_lazy_imports[name])
        value = getattr(module, name)
        globals()[name] = value
        return value
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "InjectedMessage",
    "NORMAL_MODE_TOOLS",
    "PLAN_MODE_TOOLS",
    "PlanContext",
    "PlanModeCoordinator",
    "SessionState",
    "ToolCallDecision",
    "get_context_plan_context",
    "get_context_plan_engine",
    "set_context_plan_context",
    "set_context_plan_engine",
]
