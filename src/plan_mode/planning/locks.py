"""Per-plan advisory locks.

A lock is a lease: owner metadata (pid, session, creation time) plus a
time-to-live. Leases are stored through a LeaseBackend; the default
FileLeaseBackend writes ``<plans_dir>/<id>.lock`` with create-exclusive
semantics so that separate processes sharing a plans directory exclude
each other.

Example:
    locks = LockManager(ttl_seconds=1800)
    async with locks.hold(plans_dir, plan_id, ctx):
        ...  # read-modify-write the record
"""

import asyncio
import json
import os
import time
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from pathlib import Path
from typing import TYPE_CHECKING, AsyncIterator, Awaitable, Callable

from plan_mode.constants import LOCK_TTL_SECONDS, MAX_LOCK_ATTEMPTS
from plan_mode.errors import LockSystemError, PlanLockError
from plan_mode.logging import Loggers
from plan_mode.planning.ids import display_plan_id
from plan_mode.planning.models import Lease, utc_now_iso
from plan_mode.planning.paths import lock_path

if TYPE_CHECKING:
    from plan_mode.workflow.context import PlanContext

logger = Loggers.locks()

ReleaseCallback = Callable[[], Awaitable[None]]


class LeaseExistsError(Exception):
    """Raised by a backend when the lease is already held."""


class LeaseBackend(ABC):
    """Storage for leases keyed by plan id.

    Methods are blocking; LockManager calls them from worker threads.
    """

    @abstractmethod
    def create(self, key: str, lease: Lease) -> None:
        """Create the lease atomically.

        Raises:
            LeaseExistsError: If a lease for ``key`` already exists.
            OSError: On any other storage failure.
        """

    @abstractmethod
    def age_seconds(self, key: str) -> float | None:
        """Age of the current lease, or None if there is none."""

    @abstractmethod
    def read(self, key: str) -> Lease | None:
        """Owner metadata of the current lease, or None if unreadable."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete the lease. Must not fail if it is already gone."""


class FileLeaseBackend(LeaseBackend):
    """Leases as ``<id>.lock`` files created with O_EXCL semantics."""

    def __init__(self, plans_dir: Path):
        self.plans_dir = plans_dir

    def create(self, key: str, lease: Lease) -> None:
        path = lock_path(self.plans_dir, key)
        try:
            handle = open(path, "x", encoding="utf-8")
        except FileExistsError as e:
            raise LeaseExistsError(key) from e
        try:
            with handle:
                handle.write(json.dumps(lease.to_dict(), indent=2))
        except Exception:
            # Never leave a partial lease behind.
            path.unlink(missing_ok=True)
            raise

    def age_seconds(self, key: str) -> float | None:
        try:
            mtime = lock_path(self.plans_dir, key).stat().st_mtime
        except OSError:
            return None
        return time.time() - mtime

    def read(self, key: str) -> Lease | None:
        try:
            raw = lock_path(self.plans_dir, key).read_text(encoding="utf-8")
            data = json.loads(raw)
        except (OSError, ValueError):
            return None
        if not isinstance(data, dict):
            return None
        return Lease.from_dict(data)

    def remove(self, key: str) -> None:
        try:
            lock_path(self.plans_dir, key).unlink()
        except OSError:
            pass


class LockManager:
    """Acquires and releases plan leases.

    A held lease younger than the TTL is a conflict. A stale lease is
    either offered for stealing (interactive contexts), discarded
    automatically (when ``auto_discard_stale`` is set), or reported.
    At most two acquisition attempts are made per call.
    """

    def __init__(
        self,
        ttl_seconds: float = LOCK_TTL_SECONDS,
        backend_factory: Callable[[Path], LeaseBackend] = FileLeaseBackend,
        auto_discard_stale: bool = False,
    ):
        self.ttl_seconds = ttl_seconds
        self.auto_discard_stale = auto_discard_stale
        self._backend_factory = backend_factory

    def backend_for(self, plans_dir: Path) -> LeaseBackend:
        return self._backend_factory(plans_dir)

    async def acquire(self, plans_dir: Path, plan_id: str, ctx: "PlanContext") -> ReleaseCallback:
        """Acquire the lease for ``plan_id``.

        Returns:
            An async callback that releases the lease. Releasing is best-effort.

        Raises:
            PlanLockError: The plan is locked, or a stale lock was not stolen.
            LockSystemError: Unexpected storage failure.
        """
        backend = self.backend_for(plans_dir)
        display = display_plan_id(plan_id)

        for _ in range(MAX_LOCK_ATTEMPTS):
            lease = Lease(
                id=plan_id,
                pid=os.getpid(),
                session=ctx.lock_owner,
                created_at=utc_now_iso(),
            )
            try:
                await asyncio.to_thread(backend.create, plan_id, lease)
            except LeaseExistsError:
                pass
            except OSError as e:
                raise LockSystemError(f"Failed to acquire lock: {e}") from e
            else:
                logger.debug("lock_acquired", plan_id=plan_id, session=lease.session)
                return self._releaser(backend, plan_id)

            age = await asyncio.to_thread(backend.age_seconds, plan_id)
            if age is None:
                # Released between our create attempt and the stat; try again.
                continue
            if age <= self.ttl_seconds:
                holder = await asyncio.to_thread(backend.read, plan_id)
                owner = f" (session {holder.session})" if holder and holder.session else ""
                logger.debug("lock_conflict", plan_id=plan_id, holder=holder and holder.session)
                raise PlanLockError(f"Plan {display} is locked{owner}. Try again later.")

            if not ctx.has_ui:
                if not self.auto_discard_stale:
                    raise PlanLockError(
                        f"Plan {display} lock is stale; rerun in interactive mode to steal it."
                    )
                logger.info("stale_lock_discarded", plan_id=plan_id, age_seconds=round(age))
            else:
                ok = await ctx.ui.confirm(
                    "Plan locked", f"Plan {display} appears locked. Steal the lock?"
                )
                if not ok:
                    raise PlanLockError(f"Plan {display} remains locked.")
                logger.warning("stale_lock_stolen", plan_id=plan_id, age_seconds=round(age))
            await asyncio.to_thread(backend.remove, plan_id)

        raise PlanLockError(f"Failed to acquire lock for plan {display}.")

    @staticmethod
    def _releaser(backend: LeaseBackend, plan_id: str) -> ReleaseCallback:
        async def release() -> None:
            await asyncio.to_thread(backend.remove, plan_id)
            logger.debug("lock_released", plan_id=plan_id)

        return release

    @asynccontextmanager
    async def hold(self, plans_dir: Path, plan_id: str, ctx: "PlanContext") -> AsyncIterator[None]:
        """Hold the plan lease for the duration of the block.

        The lease is released when the block exits, whether or not it raised.
        """
        release = await self.acquire(plans_dir, plan_id, ctx)
        try:
            yield
        finally:
            await release()
