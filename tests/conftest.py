"""Shared test fixtures and utilities for plan-mode tests.

Provides:
- RecordingUI: a scripted UI that records notifications, statuses and panels
- MemoryLeaseBackend: an in-memory lease store for the lock manager
- Settings, store, engine and context fixtures rooted in tmp_path
"""

import os
import time
from pathlib import Path

import pytest

from plan_mode.cli.ui import PlanUI
from plan_mode.config import PlanModeSettings
from plan_mode.planning.codec import serialize_plan
from plan_mode.planning.engine import PlanActionEngine
from plan_mode.planning.locks import LeaseBackend, LeaseExistsError, LockManager
from plan_mode.planning.models import Lease, Plan, PlanStatus, PlanStep
from plan_mode.planning.paths import lock_path, plan_path
from plan_mode.planning.plan_store import PlanStore
from plan_mode.workflow.context import PlanContext, SessionState
from plan_mode.workflow.mode import PlanModeCoordinator


class RecordingUI(PlanUI):
    """UI double that answers from scripted queues and records every call.

    Usage:
        ui = RecordingUI(selections=["PLAN-..."], confirmations=[True])
    """

    def __init__(
        self,
        selections: list[str | None] | None = None,
        confirmations: list[bool] | None = None,
        interactive: bool = True,
    ):
        self.selections = list(selections or [])
        self.confirmations = list(confirmations or [])
        self.interactive = interactive
        self.select_calls: list[tuple[str, list[str]]] = []
        self.confirm_calls: list[tuple[str, str]] = []
        self.documents: list[tuple[str, str]] = []
        self.notifications: list[tuple[str, str]] = []
        self.statuses: dict[str, str | None] = {}
        self.widgets: dict[str, list[str] | None] = {}

    async def select(self, title: str, options: list[str]) -> str | None:
        self.select_calls.append((title, list(options)))
        if not self.selections:
            return None
        return self.selections.pop(0)

    async def confirm(self, title: str, message: str) -> bool:
        self.confirm_calls.append((title, message))
        if not self.confirmations:
            return False
        return self.confirmations.pop(0)

    async def show_document(self, title: str, markdown: str) -> None:
        self.documents.append((title, markdown))

    def notify(self, message: str, level: str = "info") -> None:
        self.notifications.append((message, level))

    def set_status(self, key: str, text: str | None) -> None:
        self.statuses[key] = text

    def set_widget(self, key: str, lines: list[str] | None) -> None:
        self.widgets[key] = list(lines) if lines is not None else None

    @property
    def messages(self) -> list[str]:
        return [message for message, _ in self.notifications]


class MemoryLeaseBackend(LeaseBackend):
    """Leases kept in a dict shared by every backend built from one factory."""

    def __init__(self, leases: dict[str, tuple[Lease, float]]):
        self.leases = leases

    def create(self, key: str, lease: Lease) -> None:
        if key in self.leases:
            raise LeaseExistsError(key)
        self.leases[key] = (lease, time.time())

    def age_seconds(self, key: str) -> float | None:
        entry = self.leases.get(key)
        return None if entry is None else time.time() - entry[1]

    def read(self, key: str) -> Lease | None:
        entry = self.leases.get(key)
        return None if entry is None else entry[0]

    def remove(self, key: str) -> None:
        self.leases.pop(key, None)


def _make_plan(
    plan_id: str = "deadbeef",
    title: str = "Refactor auth",
    status: PlanStatus = PlanStatus.DRAFT,
    created_at: str = "2026-01-26T08:00:00.000Z",
    assigned_to_session: str | None = None,
    steps: list[tuple[str, bool]] | None = None,
    body: str = "",
) -> Plan:
    return Plan(
        id=plan_id,
        title=title,
        status=status,
        created_at=created_at,
        assigned_to_session=assigned_to_session,
        steps=[PlanStep(id=i, text=text, done=done) for i, (text, done) in enumerate(steps or [], 1)],
        body=body,
    )


def _write_plan(root: Path, plan: Plan) -> Path:
    root.mkdir(parents=True, exist_ok=True)
    path = plan_path(root, plan.id)
    path.write_text(serialize_plan(plan), encoding="utf-8")
    return path


def _write_lock(root: Path, plan_id: str, session: str = "other.json", age_seconds: float = 0) -> Path:
    root.mkdir(parents=True, exist_ok=True)
    path = lock_path(root, plan_id)
    path.write_text(
        f'{{"id": "{plan_id}", "pid": 1, "session": "{session}", "created_at": ""}}',
        encoding="utf-8",
    )
    if age_seconds:
        then = time.time() - age_seconds
        os.utime(path, (then, then))
    return path


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the store override out of tests unless a test sets it."""
    monkeypatch.delenv("PLAN_MODE_PATH", raising=False)


@pytest.fixture
def settings() -> PlanModeSettings:
    return PlanModeSettings()


@pytest.fixture
def plans_dir(tmp_path: Path) -> Path:
    return tmp_path / ".plan_mode" / "plans"


@pytest.fixture
def store(plans_dir: Path) -> PlanStore:
    return PlanStore(plans_dir)


@pytest.fixture
def ui() -> RecordingUI:
    return RecordingUI()


@pytest.fixture
def ctx(tmp_path: Path, ui: RecordingUI) -> PlanContext:
    return PlanContext(
        cwd=tmp_path,
        session_id="session-a",
        session_file="session-a.json",
        ui=ui,
        state=SessionState(),
    )


@pytest.fixture
def headless_ctx(tmp_path: Path) -> PlanContext:
    return PlanContext(cwd=tmp_path, session_id="session-a", session_file="session-a.json")


@pytest.fixture
def coordinator(settings: PlanModeSettings) -> PlanModeCoordinator:
    return PlanModeCoordinator(settings)


@pytest.fixture
def engine(settings: PlanModeSettings, coordinator: PlanModeCoordinator) -> PlanActionEngine:
    return PlanActionEngine(settings, LockManager(settings.lock_ttl_seconds), coordinator)


@pytest.fixture
def make_plan():
    return _make_plan


@pytest.fixture
def write_plan():
    return _write_plan


@pytest.fixture
def write_lock():
    return _write_lock


@pytest.fixture
def memory_leases() -> dict[str, tuple[Lease, float]]:
    return {}


@pytest.fixture
def memory_lock_manager(memory_leases) -> LockManager:
    return LockManager(ttl_seconds=1800, backend_factory=lambda _root: MemoryLeaseBackend(memory_leases))


@pytest.fixture
def ui_factory():
    return RecordingUI
