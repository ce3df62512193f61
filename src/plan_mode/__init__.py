"""plan-mode - File-based plans and a read-only planning mode for agent hosts.

This package provides:

- A plan record format (JSON header + markdown body) stored one file per plan
- Per-plan advisory locks with stale-lock recovery
- A plan action engine (list, get, create, update, add-step, complete-step,
  delete, claim, release, execute)
- Planning mode: a restricted tool set with destructive shell commands blocked
- The /plan command for browsing and acting on plans interactively

Note: PlanModeExtension and PlanActionEngine are lazy-loaded.
"""

from plan_mode.config import (
    PlanModeSettings,
    SettingsContext,
    get_context_settings,
    get_settings,
    reload_settings,
    set_context_settings,
    set_settings,
)
from plan_mode.errors import (
    ErrorCode,
    LockSystemError,
    PlanConflictError,
    PlanIdGenerationError,
    PlanLockError,
    PlanNotFoundError,
    PlanValidationError,
    ToolError,
)
from plan_mode.planning import LockManager, Plan, PlanStatus, PlanStep, PlanStore, StoreSettings
from plan_mode.workflow import PlanContext, SessionState

_lazy_imports = {
    "PlanModeExtension": "plan_mode.extension",
    "PlanActionEngine": "plan_mode.planning.engine",
    "PlanActionResult": "plan_mode.planning.engine",
    "PlanModeCoordinator": "plan_mode.workflow.mode",
}


def __getattr__(name: str):
    """Lazy import for heavy modules."""
    if name in _lazy_imports:
        import importlib

        module = importlib.import_module(_lazy_imports[name])
        value = getattr(module, name)
        globals()[name] = value
        return value
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__version__ = "0.1.0"

__all__ = [
    "ErrorCode",
    "LockManager",
    "LockSystemError",
    "Plan",
    "PlanActionEngine",
    "PlanActionResult",
    "PlanConflictError",
    "PlanContext",
    "PlanIdGenerationError",
    "PlanLockError",
    "PlanModeCoordinator",
    "PlanModeExtension",
    "PlanModeSettings",
    "PlanNotFoundError",
    "PlanStatus",
    "PlanStep",
    "PlanStore",
    "PlanValidationError",
    "SessionState",
    "SettingsContext",
    "StoreSettings",
    "ToolError",
    "get_context_settings",
    "get_settings",
    "reload_settings",
    "set_context_settings",
    "set_settings",
]
