"""Plan storage and coordination.

Light modules (models, codec, paths, ids, locks, store, search) are
imported eagerly; the action engine depends on the workflow package and is
loaded on first access.
"""

from plan_mode.planning.codec import parse_plan, serialize_plan, find_header_end
from plan_mode.planning.ids import (
    display_plan_id,
    format_plan_id,
    generate_plan_id,
    normalize_plan_id,
    validate_plan_id,
)
from plan_mode.planning.locks import FileLeaseBackend, LeaseBackend, LeaseExistsError, LockManager
from plan_mode.planning.models import (
    PLAN_ACTIONS,
    Lease,
    Plan,
    PlanRequest,
    PlanStatus,
    PlanStep,
    StoreSettings,
    is_plan_completed,
)
from plan_mode.planning.paths import lock_path, plan_path, resolve_plans_dir, settings_path
from plan_mode.planning.plan_store import PlanStore
from plan_mode.planning.search import filter_plans, fuzzy_match, sort_plans

_lazy_imports = {
    "PlanActionEngine": "plan_mode.planning.engine",
    "PlanActionResult": "plan_mode.planning.engine",
}


def __getattr__(name: str):
    """Lazy import for the action engine."""
    if name in _lazy_imports:
        import importlib

        module = importlib.import_module(_lazy_imports[name])
        value = getattr(module, name)
        globals()[name] = value
        return value
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "PLAN_ACTIONS",
    "FileLeaseBackend",
    "Lease",
    "LeaseBackend",
    "LeaseExistsError",
    "LockManager",
    "Plan",
    "PlanActionEngine",
    "PlanActionResult",
    "PlanRequest",
    "PlanStatus",
    "PlanStep",
    "PlanStore",
    "StoreSettings",
    "display_plan_id",
    "filter_plans",
    "find_header_end",
    "format_plan_id",
    "fuzzy_match",
    "generate_plan_id",
    "is_plan_completed",
    "lock_path",
    "normalize_plan_id",
    "parse_plan",
    "plan_path",
    "resolve_plans_dir",
    "serialize_plan",
    "settings_path",
    "sort_plans",
    "validate_plan_id",
]
