"""Per-session state and request context.

SessionState is the process-local mode state (planning mode, active plan,
enabled tools). It lives for the lifetime of the host process and is
handed to every handler inside a PlanContext instead of being kept in
module globals.

The ContextVar accessors let the registered ``plan`` tool reach the
engine and the current request context without extra arguments.
"""

from contextvars import ContextVar, Token
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable

from plan_mode.cli.ui import HeadlessUI, PlanUI


@dataclass
class SessionState:
    """Mode state for one host process."""

    planning_mode_enabled: bool = False
    active_plan_id: str | None = None
    active_tools: list[str] = field(default_factory=list)


@dataclass
class PlanContext:
    """Everything a request handler needs to know about its caller.

    Attributes:
        cwd: Working directory the store root is resolved against.
        session_id: Opaque id recorded when a plan is claimed.
        session_file: Optional session file; preferred as the lock owner.
        ui: UI collaborator; HeadlessUI when there is none.
        state: Shared mode state of the host process.
    """

    cwd: Path
    session_id: str
    session_file: str | None = None
    ui: PlanUI = field(default_factory=HeadlessUI)
    state: SessionState = field(default_factory=SessionState)

    @property
    def has_ui(self) -> bool:
        return self.ui.interactive

    @property
    def lock_owner(self) -> str:
        return self.session_file or self.session_id


def _make_context_accessors(name: str) -> tuple[Callable[..., Token], Callable[..., Any]]:
    """Create a (setter, getter) pair backed by a ContextVar."""
    var: ContextVar[Any] = ContextVar(f"{name}_context", default=None)

    def setter(value: Any) -> Token:
        return var.set(value)

    def getter() -> Any:
        return var.get()

    setter.__name__ = setter.__qualname__ = f"set_context_{name}"
    getter.__name__ = getter.__qualname__ = f"get_context_{name}"
    return setter, getter


set_context_plan_engine, get_context_plan_engine = _make_context_accessors("plan_engine")
set_context_plan_context, get_context_plan_context = _make_context_accessors("plan_context")
