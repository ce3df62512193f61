"""Plan action engine.

Implements the ten plan actions (list, get, create, update, add-step,
complete-step, delete, claim, release, execute). Every mutation runs
under the plan's lease; every failure comes back as a PlanActionResult
rather than an exception.

Example:
    engine = PlanActionEngine(settings, LockManager(), coordinator)
    result = await engine.run({"action": "create", "title": "Refactor auth"}, ctx)
    print(result.content)
"""

import json
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from pydantic import ValidationError

from plan_mode.config import PlanModeSettings, get_settings
from plan_mode.errors import (
    ErrorCode,
    PlanConflictError,
    PlanNotFoundError,
    PlanValidationError,
    ToolError,
)
from plan_mode.logging import Loggers
from plan_mode.planning.ids import display_plan_id, format_plan_id, validate_plan_id
from plan_mode.planning.locks import LockManager
from plan_mode.planning.models import (
    Plan,
    PlanRequest,
    PlanStatus,
    PlanStep,
    utc_now_iso,
)
from plan_mode.planning.plan_store import PlanStore
from plan_mode.workflow.context import PlanContext
from plan_mode.workflow.mode import PlanModeCoordinator

logger = Loggers.engine()

PlanMutation = Callable[[Plan], bool]


def serialize_plan_for_agent(plan: Plan) -> str:
    return json.dumps(plan.to_dict(display_id=True), indent=2, ensure_ascii=False)


def serialize_plan_list_for_agent(plans: list[Plan]) -> str:
    """Group plans into active, draft and completed (completed + archived)."""

    def bucket(predicate: Callable[[Plan], bool]) -> list[dict[str, Any]]:
        return [p.to_dict(display_id=True, include_body=False) for p in plans if predicate(p)]

    grouped = {
        "active": bucket(lambda p: p.status == PlanStatus.ACTIVE),
        "draft": bucket(lambda p: p.status == PlanStatus.DRAFT),
        "completed": bucket(lambda p: p.is_completed),
    }
    return json.dumps(grouped, indent=2, ensure_ascii=False)


def execution_summary(plan: Plan) -> str:
    remaining = plan.remaining_steps()
    steps_list = (
        "\n".join(f"{s.id}. {s.text}" for s in remaining) if remaining else "All steps complete!"
    )
    return f"Executing plan {format_plan_id(plan.id)}. Remaining steps:\n{steps_list}"


@dataclass
class PlanActionResult:
    """Outcome of one plan action.

    ``content`` is the text returned to the caller; ``details`` is the
    structured payload used for rendering.
    """

    action: str
    content: str
    plan: Plan | None = None
    plans: list[Plan] | None = None
    current_session_id: str | None = None
    error: str | None = None
    error_code: str | None = None

    @property
    def success(self) -> bool:
        return self.error is None

    @classmethod
    def failure(cls, action: str, error: ToolError) -> "PlanActionResult":
        content = error.message
        if error.error_code == ErrorCode.MISSING_REQUIRED:
            content = f"Error: {error.message}"
        return cls(action=action, content=content, error=error.message, error_code=error.error_code)

    @property
    def details(self) -> dict[str, Any]:
        details: dict[str, Any] = {"action": self.action}
        if self.error is not None:
            details["error"] = self.error
            details["error_code"] = self.error_code
            return details
        if self.plans is not None:
            details["plans"] = [p.to_dict(include_body=False) for p in self.plans]
            details["current_session_id"] = self.current_session_id
        if self.plan is not None:
            details["plan"] = self.plan.to_dict()
        return details

    def to_dict(self) -> dict[str, Any]:
        return {"content": self.content, "details": self.details}


def _required(name: str) -> PlanValidationError:
    return PlanValidationError(f"{name} required", error_code=ErrorCode.MISSING_REQUIRED)


def _validation_message(error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ())) or "request"
    return f"Invalid {location}: {first.get('msg', 'invalid value')}"


class PlanActionEngine:
    """Runs plan actions against the store for a request context.

    Args:
        settings: Process settings (store override, lock TTL).
        lock_manager: Lease manager; built from settings when omitted.
        coordinator: Mode coordinator updated by execute/release/delete.
    """

    def __init__(
        self,
        settings: PlanModeSettings | None = None,
        lock_manager: LockManager | None = None,
        coordinator: PlanModeCoordinator | None = None,
    ):
        self.settings = settings or get_settings()
        self.locks = lock_manager or LockManager(
            ttl_seconds=self.settings.lock_ttl_seconds,
            auto_discard_stale=self.settings.auto_discard_stale_locks,
        )
        self.coordinator = coordinator or PlanModeCoordinator(self.settings)
        self._handlers: dict[str, Callable[[PlanRequest, PlanContext], Awaitable[PlanActionResult]]] = {
            "list": self._list,
            "get": self._get,
            "create": self._create,
            "update": self._update,
            "add-step": self._add_step,
            "complete-step": self._complete_step,
            "delete": self._delete,
            "claim": self._claim,
            "release": self._release,
            "execute": self._execute,
        }

    def store_for(self, ctx: PlanContext) -> PlanStore:
        return PlanStore.for_cwd(ctx.cwd, self.settings.path)

    async def run(self, params: PlanRequest | dict[str, Any], ctx: PlanContext) -> PlanActionResult:
        """Validate and dispatch one action. Never raises for plan errors."""
        if isinstance(params, PlanRequest):
            request = params
        else:
            action = str(params.get("action") or "unknown")
            try:
                request = PlanRequest.model_validate(params)
            except ValidationError as e:
                error = PlanValidationError(_validation_message(e), error_code=ErrorCode.VALIDATION_FAILED)
                return PlanActionResult.failure(action, error)

        try:
            return await self._handlers[request.action](request, ctx)
        except ToolError as e:
            logger.debug("plan_action_failed", action=request.action, error=e.message, code=e.error_code)
            return PlanActionResult.failure(request.action, e)
        except Exception as e:
            logger.exception("plan_action_crashed", action=request.action)
            return PlanActionResult.failure(
                request.action, ToolError(str(e) or type(e).__name__, ErrorCode.INTERNAL_ERROR)
            )

    async def mutate(self, ctx: PlanContext, plan_id: str, fn: PlanMutation) -> Plan:
        """Read-modify-write one plan under its lease.

        ``fn`` edits the plan in place and returns whether it changed; it may
        raise a ToolError to abort without writing.

        Raises:
            PlanNotFoundError: If the record does not exist.
            PlanLockError / LockSystemError: If the lease cannot be taken.
        """
        store = self.store_for(ctx)
        if not await store.exists(plan_id):
            raise PlanNotFoundError(f"Plan {display_plan_id(plan_id)} not found")
        async with self.locks.hold(store.root, plan_id, ctx):
            plan = await store.read(plan_id)
            if fn(plan):
                await store.write(plan)
        return plan

    def _resolve_id(self, request: PlanRequest) -> str:
        if not request.id:
            raise _required("id")
        return validate_plan_id(request.id)

    async def _finish(self, ctx: PlanContext, action: str, plan: Plan, content: str | None = None) -> PlanActionResult:
        await self.coordinator.refresh(ctx)
        return PlanActionResult(
            action=action,
            content=content if content is not None else serialize_plan_for_agent(plan),
            plan=plan,
        )

    # Actions

    async def _list(self, request: PlanRequest, ctx: PlanContext) -> PlanActionResult:
        plans = await self.store_for(ctx).list_plans()
        return PlanActionResult(
            action="list",
            content=serialize_plan_list_for_agent(plans),
            plans=plans,
            current_session_id=ctx.session_id,
        )

    async def _get(self, request: PlanRequest, ctx: PlanContext) -> PlanActionResult:
        plan_id = self._resolve_id(request)
        plan = await self.store_for(ctx).read(plan_id)
        return PlanActionResult(action="get", content=serialize_plan_for_agent(plan), plan=plan)

    async def _create(self, request: PlanRequest, ctx: PlanContext) -> PlanActionResult:
        if not request.title:
            raise _required("title")
        store = self.store_for(ctx)
        await store.ensure_dir()
        plan_id = await store.generate_id()
        plan = Plan(
            id=plan_id,
            title=request.title,
            status=request.status or PlanStatus.DRAFT,
            created_at=utc_now_iso(),
            steps=[PlanStep(id=i, text=text) for i, text in enumerate(request.steps or [], start=1)],
            body=request.body or "",
        )
        async with self.locks.hold(store.root, plan_id, ctx):
            await store.write(plan)
        logger.info("plan_created", plan_id=plan_id, steps=len(plan.steps))
        return await self._finish(ctx, "create", plan)

    async def _update(self, request: PlanRequest, ctx: PlanContext) -> PlanActionResult:
        plan_id = self._resolve_id(request)

        def apply(plan: Plan) -> bool:
            if request.title is not None:
                plan.title = request.title
            if request.status is not None:
                plan.status = request.status
            if request.body is not None:
                plan.body = request.body
            return True

        plan = await self.mutate(ctx, plan_id, apply)
        if plan.is_completed:
            self.coordinator.clear_active_plan(ctx, plan_id)
        logger.info("plan_updated", plan_id=plan_id, status=plan.status.value)
        return await self._finish(ctx, "update", plan)

    async def _add_step(self, request: PlanRequest, ctx: PlanContext) -> PlanActionResult:
        if not request.id:
            raise _required("id")
        if not request.step_text:
            raise _required("step_text")
        plan_id = validate_plan_id(request.id)
        step_text = request.step_text

        def apply(plan: Plan) -> bool:
            plan.steps.append(PlanStep(id=plan.next_step_id(), text=step_text))
            return True

        plan = await self.mutate(ctx, plan_id, apply)
        return await self._finish(ctx, "add-step", plan)

    async def _complete_step(self, request: PlanRequest, ctx: PlanContext) -> PlanActionResult:
        if not request.id:
            raise _required("id")
        if request.step_id is None:
            raise _required("step_id")
        plan_id = validate_plan_id(request.id)
        step_id = request.step_id

        def apply(plan: Plan) -> bool:
            step = plan.find_step(step_id)
            if step is None:
                raise PlanNotFoundError(f"Step {step_id} not found in plan {plan.display_id}")
            step.done = True
            return True

        plan = await self.mutate(ctx, plan_id, apply)
        return await self._finish(ctx, "complete-step", plan)

    async def _delete(self, request: PlanRequest, ctx: PlanContext) -> PlanActionResult:
        plan_id = self._resolve_id(request)
        plan = await self.delete_plan(ctx, plan_id)
        return await self._finish(ctx, "delete", plan)

    async def delete_plan(self, ctx: PlanContext, plan_id: str) -> Plan:
        """Remove a plan under its lease and drop it as the active plan."""
        store = self.store_for(ctx)
        if not await store.exists(plan_id):
            raise PlanNotFoundError(f"Plan {display_plan_id(plan_id)} not found")
        async with self.locks.hold(store.root, plan_id, ctx):
            plan = await store.read(plan_id)
            await store.delete(plan_id)
        self.coordinator.clear_active_plan(ctx, plan_id)
        logger.info("plan_deleted", plan_id=plan_id)
        return plan

    async def _claim(self, request: PlanRequest, ctx: PlanContext) -> PlanActionResult:
        plan_id = self._resolve_id(request)
        session_id = ctx.session_id

        def apply(plan: Plan) -> bool:
            if plan.is_completed:
                raise PlanConflictError(f"Plan {plan.display_id} is {plan.status.value}")
            assigned = plan.assigned_to_session
            if assigned and assigned != session_id and not request.force:
                raise PlanConflictError(
                    f"Plan {plan.display_id} is already assigned to session {assigned}. "
                    "Use force to override."
                )
            plan.assigned_to_session = session_id
            return True

        plan = await self.mutate(ctx, plan_id, apply)
        logger.info("plan_claimed", plan_id=plan_id, session_id=session_id)
        return await self._finish(ctx, "claim", plan)

    async def _release(self, request: PlanRequest, ctx: PlanContext) -> PlanActionResult:
        plan_id = self._resolve_id(request)
        session_id = ctx.session_id

        def apply(plan: Plan) -> bool:
            assigned = plan.assigned_to_session
            if not assigned:
                return False
            if assigned != session_id and not request.force:
                raise PlanConflictError(
                    f"Plan {plan.display_id} is assigned to session {assigned}. Use force to release."
                )
            plan.assigned_to_session = None
            return True

        plan = await self.mutate(ctx, plan_id, apply)
        self.coordinator.clear_active_plan(ctx, plan_id)
        return await self._finish(ctx, "release", plan)

    async def _execute(self, request: PlanRequest, ctx: PlanContext) -> PlanActionResult:
        plan_id = self._resolve_id(request)
        plan = await self.execute_plan(ctx, plan_id, force=request.force)
        return PlanActionResult(action="execute", content=execution_summary(plan), plan=plan)

    async def execute_plan(self, ctx: PlanContext, plan_id: str, force: bool = False) -> Plan:
        """Claim (if unassigned) and activate a plan, then make it the active plan."""
        session_id = ctx.session_id

        def apply(plan: Plan) -> bool:
            if plan.is_completed:
                raise PlanConflictError(f"Plan {plan.display_id} is {plan.status.value}")
            assigned = plan.assigned_to_session
            if not assigned:
                plan.assigned_to_session = session_id
            elif assigned != session_id and not force:
                raise PlanConflictError(
                    f"Plan {plan.display_id} is assigned to session {assigned}. Use force to override."
                )
            plan.status = PlanStatus.ACTIVE
            return True

        plan = await self.mutate(ctx, plan_id, apply)
        self.coordinator.activate_plan(ctx, plan_id)
        await self.coordinator.refresh(ctx)
        logger.info("plan_executing", plan_id=plan_id, session_id=session_id)
        return plan
