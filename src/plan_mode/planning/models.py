"""Data models for plans, steps, locks and store settings."""

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from plan_mode.constants import DEFAULT_GC_DAYS, DEFAULT_GC_ENABLED, PLAN_ID_PREFIX


class PlanStatus(str, Enum):
    """Lifecycle status of a plan."""

    DRAFT = "draft"
    ACTIVE = "active"
    COMPLETED = "completed"
    ARCHIVED = "archived"


TERMINAL_STATUSES = frozenset({PlanStatus.COMPLETED, PlanStatus.ARCHIVED})


def utc_now_iso() -> str:
    """Current UTC time as ISO-8601 with millisecond precision and a Z suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def is_plan_completed(status: str) -> bool:
    """Completed and archived plans form the terminal ("done") class."""
    return str(getattr(status, "value", status)).lower() in {s.value for s in TERMINAL_STATUSES}


@dataclass
class PlanStep:
    """A single ordered step within a plan."""

    id: int
    text: str
    done: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "text": self.text, "done": self.done}


@dataclass
class Plan:
    """A persisted plan record: structured header plus free-form body."""

    id: str
    title: str = ""
    status: PlanStatus = PlanStatus.DRAFT
    created_at: str = ""
    assigned_to_session: str | None = None
    steps: list[PlanStep] = field(default_factory=list)
    body: str = ""

    @property
    def display_id(self) -> str:
        return f"{PLAN_ID_PREFIX}{self.id}"

    @property
    def is_completed(self) -> bool:
        return is_plan_completed(self.status)

    @property
    def progress(self) -> tuple[int, int]:
        """Return (done, total) step counts."""
        return sum(1 for s in self.steps if s.done), len(self.steps)

    def remaining_steps(self) -> list[PlanStep]:
        return [s for s in self.steps if not s.done]

    def find_step(self, step_id: int) -> PlanStep | None:
        for step in self.steps:
            if step.id == step_id:
                return step
        return None

    def next_step_id(self) -> int:
        return max((s.id for s in self.steps), default=0) + 1

    def header_dict(self) -> dict[str, Any]:
        """Header fields in canonical order; an empty assignment is omitted."""
        header: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "status": self.status.value,
            "created_at": self.created_at,
        }
        if self.assigned_to_session:
            header["assigned_to_session"] = self.assigned_to_session
        header["steps"] = [s.to_dict() for s in self.steps]
        return header

    def to_dict(self, display_id: bool = False, include_body: bool = True) -> dict[str, Any]:
        data = self.header_dict()
        if display_id:
            data["id"] = self.display_id
        if include_body:
            data["body"] = self.body
        return data


@dataclass
class Lease:
    """Owner metadata written into a plan lock."""

    id: str
    pid: int
    session: str | None
    created_at: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "pid": self.pid,
            "session": self.session,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Lease":
        return cls(
            id=str(data.get("id", "")),
            pid=int(data.get("pid", 0) or 0),
            session=data.get("session"),
            created_at=str(data.get("created_at", "")),
        )


class StoreSettings(BaseModel):
    """Retention settings stored in the plans directory (settings.json)."""

    model_config = ConfigDict(populate_by_name=True)

    gc: bool = DEFAULT_GC_ENABLED
    gc_days: int = Field(default=DEFAULT_GC_DAYS, ge=0, alias="gcDays")

    @classmethod
    def from_raw(cls, data: Any) -> "StoreSettings":
        """Build settings from decoded JSON, falling back per field to defaults."""
        if not isinstance(data, dict):
            return cls()
        gc = data.get("gc")
        gc_days = data.get("gcDays")
        values: dict[str, Any] = {}
        if isinstance(gc, bool):
            values["gc"] = gc
        if (
            isinstance(gc_days, (int, float))
            and not isinstance(gc_days, bool)
            and math.isfinite(gc_days)
        ):
            values["gc_days"] = max(0, math.floor(gc_days))
        return cls(**values)


PlanAction = Literal[
    "list",
    "get",
    "create",
    "update",
    "add-step",
    "complete-step",
    "delete",
    "claim",
    "release",
    "execute",
]

PLAN_ACTIONS: tuple[str, ...] = (
    "list",
    "get",
    "create",
    "update",
    "add-step",
    "complete-step",
    "delete",
    "claim",
    "release",
    "execute",
)


class PlanRequest(BaseModel):
    """A structured plan action request from the automated caller."""

    model_config = ConfigDict(extra="ignore")

    action: PlanAction
    id: str | None = Field(default=None, description="Plan id (PLAN-<hex> or raw hex)")
    title: str | None = Field(default=None, description="Plan title")
    status: PlanStatus | None = None
    body: str | None = Field(default=None, description="Plan notes/details (markdown)")
    steps: list[str] | None = Field(default=None, description="Steps to add (for create)")
    step_text: str | None = Field(default=None, description="Step text (for add-step)")
    step_id: int | None = Field(default=None, description="Step ID to mark complete")
    force: bool = Field(default=False, description="Override another session's assignment")
