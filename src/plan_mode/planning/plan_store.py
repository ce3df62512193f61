"""Directory-backed plan store.

Each plan is one ``<id>.md`` record under the store root; there is no
index, so every read re-parses the file. Blocking filesystem calls run in
worker threads so the event loop stays responsive.

Example:
    >>> store = PlanStore.for_cwd("/work/project")
    >>> await store.ensure_dir()
    >>> plans = await store.list_plans()
"""

import asyncio
import json
from datetime import datetime, timedelta, timezone
from pathlib import Path

from plan_mode.constants import PLAN_FILE_SUFFIX
from plan_mode.errors import PlanNotFoundError
from plan_mode.logging import Loggers
from plan_mode.persistence import atomic_write_text
from plan_mode.planning.codec import parse_front_matter, parse_plan, serialize_plan, split_front_matter
from plan_mode.planning.ids import display_plan_id, generate_plan_id, validate_plan_id
from plan_mode.planning.models import Plan, StoreSettings
from plan_mode.planning.paths import plan_path, resolve_plans_dir, settings_path
from plan_mode.planning.search import sort_plans

logger = Loggers.store()


def parse_timestamp(value: str) -> datetime | None:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    if not value:
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class PlanStore:
    """Plan records in a single directory.

    Reads never lock. Writers are expected to hold the plan's lease
    (see LockManager.hold) for the whole read-modify-write.
    """

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    @classmethod
    def for_cwd(cls, cwd: str | Path, override: str | None = None) -> "PlanStore":
        return cls(resolve_plans_dir(cwd, override))

    def path_for(self, plan_id: str) -> Path:
        return plan_path(self.root, plan_id)

    async def ensure_dir(self) -> None:
        await asyncio.to_thread(self.root.mkdir, parents=True, exist_ok=True)

    async def exists(self, plan_id: str) -> bool:
        return await asyncio.to_thread(self.path_for(plan_id).exists)

    async def read(self, plan_id: str) -> Plan:
        """Read and parse a full record.

        The file name is the plan id; an id in the header is ignored.

        Raises:
            PlanNotFoundError: If the record file does not exist.
        """
        path = self.path_for(plan_id)
        try:
            content = await asyncio.to_thread(path.read_text, encoding="utf-8")
        except FileNotFoundError as e:
            raise PlanNotFoundError(f"Plan {display_plan_id(plan_id)} not found") from e
        plan = parse_plan(content, plan_id)
        plan.id = plan_id
        return plan

    async def write(self, plan: Plan) -> None:
        plan.id = validate_plan_id(plan.id)
        await asyncio.to_thread(atomic_write_text, self.path_for(plan.id), serialize_plan(plan))

    async def delete(self, plan_id: str) -> None:
        """Remove a record.

        Raises:
            PlanNotFoundError: If the record file does not exist.
        """
        try:
            await asyncio.to_thread(self.path_for(plan_id).unlink)
        except FileNotFoundError as e:
            raise PlanNotFoundError(f"Plan {display_plan_id(plan_id)} not found") from e

    async def generate_id(self) -> str:
        return await asyncio.to_thread(generate_plan_id, self.root)

    def _record_files(self) -> list[Path]:
        try:
            entries = sorted(self.root.iterdir())
        except OSError:
            return []
        return [p for p in entries if p.name.endswith(PLAN_FILE_SUFFIX) and p.is_file()]

    def _read_header(self, path: Path) -> Plan | None:
        plan_id = path.name[: -len(PLAN_FILE_SUFFIX)]
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            return None
        header, _ = split_front_matter(content)
        plan = parse_front_matter(header, plan_id)
        plan.id = plan_id
        return plan

    def list_plans_sync(self) -> list[Plan]:
        """Header-only listing, sorted. Unreadable records are skipped."""
        plans = [p for p in (self._read_header(path) for path in self._record_files()) if p]
        return sort_plans(plans)

    async def list_plans(self) -> list[Plan]:
        return await asyncio.to_thread(self.list_plans_sync)

    async def read_settings(self) -> StoreSettings:
        """Load settings.json, silently defaulting on any problem."""

        def load() -> object:
            try:
                return json.loads(settings_path(self.root).read_text(encoding="utf-8"))
            except (OSError, ValueError):
                return None

        return StoreSettings.from_raw(await asyncio.to_thread(load))

    async def garbage_collect(
        self, settings: StoreSettings, now: datetime | None = None
    ) -> list[str]:
        """Delete terminal plans created before the retention window.

        Plans without a parseable ``created_at`` are kept. Per-file errors
        are ignored.

        Returns:
            Ids of the deleted plans.
        """
        if not settings.gc:
            return []

        cutoff = (now or datetime.now(timezone.utc)) - timedelta(days=settings.gc_days)
        paths = await asyncio.to_thread(self._record_files)

        def sweep(path: Path) -> str | None:
            plan = self._read_header(path)
            if plan is None or not plan.is_completed:
                return None
            created = parse_timestamp(plan.created_at)
            if created is None or created >= cutoff:
                return None
            path.unlink()
            return path.name[: -len(PLAN_FILE_SUFFIX)]

        async def check(path: Path) -> str | None:
            try:
                return await asyncio.to_thread(sweep, path)
            except OSError as e:
                logger.debug("gc_skipped", path=str(path), error=str(e))
                return None

        results = await asyncio.gather(*(check(p) for p in paths))
        deleted = [plan_id for plan_id in results if plan_id]
        if deleted:
            logger.info("gc_deleted", count=len(deleted), plan_ids=deleted)
        return deleted
