"""Tests for planning mode and active-plan coordination."""

import pytest

from plan_mode.config import PlanModeSettings
from plan_mode.planning.models import PlanStatus, StoreSettings
from plan_mode.planning.paths import plan_path, settings_path
from plan_mode.workflow.mode import (
    EXECUTION_CONTEXT_TYPE,
    NORMAL_MODE_TOOLS,
    PLAN_MODE_TOOLS,
    PLANNING_CONTEXT_TYPE,
    PLANNING_NOTE,
    STATUS_KEY,
    WIDGET_KEY,
    PlanModeCoordinator,
    blocked_reason,
    execution_note,
)


class TestPlanningMode:
    """Tests for enabling and disabling planning mode."""

    @pytest.mark.asyncio
    async def test_enable(self, coordinator, ctx, ui):
        assert await coordinator.enable(ctx) is True
        assert ctx.state.planning_mode_enabled
        assert ctx.state.active_tools == PLAN_MODE_TOOLS
        assert ui.messages == ["Planning mode enabled. Read-only tools: read, bash, grep, find, ls"]
        assert ui.statuses[STATUS_KEY] == "⏸ planning"

    @pytest.mark.asyncio
    async def test_enable_twice_is_a_no_op(self, coordinator, ctx, ui):
        await coordinator.enable(ctx)
        assert await coordinator.enable(ctx) is False
        assert len(ui.messages) == 1

    @pytest.mark.asyncio
    async def test_disable(self, coordinator, ctx, ui):
        assert await coordinator.disable(ctx) is False
        await coordinator.enable(ctx)
        assert await coordinator.disable(ctx) is True
        assert ctx.state.active_tools == NORMAL_MODE_TOOLS
        assert ui.messages[-1] == "Planning mode disabled. Full access restored."
        assert ui.statuses[STATUS_KEY] is None

    @pytest.mark.asyncio
    async def test_toggle(self, coordinator, ctx):
        assert await coordinator.toggle(ctx) is True
        assert await coordinator.toggle(ctx) is False

    @pytest.mark.asyncio
    async def test_host_tool_callback(self, settings, ctx):
        calls = []
        coordinator = PlanModeCoordinator(settings, set_active_tools=calls.append)
        await coordinator.enable(ctx)
        await coordinator.disable(ctx)
        assert calls == [PLAN_MODE_TOOLS, NORMAL_MODE_TOOLS]


class TestActivePlan:
    """Tests for the active-plan pointer."""

    def test_activate_leaves_planning_mode(self, coordinator, ctx):
        ctx.state.planning_mode_enabled = True
        coordinator.activate_plan(ctx, "deadbeef")
        assert ctx.state.active_plan_id == "deadbeef"
        assert not ctx.state.planning_mode_enabled
        assert ctx.state.active_tools == NORMAL_MODE_TOOLS

    def test_clear_only_matching_plan(self, coordinator, ctx):
        ctx.state.active_plan_id = "deadbeef"
        assert coordinator.clear_active_plan(ctx, "cafebabe") is False
        assert ctx.state.active_plan_id == "deadbeef"
        assert coordinator.clear_active_plan(ctx, "deadbeef") is True
        assert ctx.state.active_plan_id is None
        assert coordinator.clear_active_plan(ctx) is False

    @pytest.mark.asyncio
    async def test_read_active_plan(self, coordinator, ctx, plans_dir, make_plan, write_plan):
        assert await coordinator.read_active_plan(ctx) is None
        write_plan(plans_dir, make_plan())
        ctx.state.active_plan_id = "deadbeef"
        assert (await coordinator.read_active_plan(ctx)).title == "Refactor auth"
        ctx.state.active_plan_id = "cafebabe"
        assert await coordinator.read_active_plan(ctx) is None


class TestToolGate:
    """Tests for the tool-call gate."""

    def test_allows_everything_outside_planning_mode(self, coordinator, ctx):
        assert not coordinator.check_tool_call(ctx, "bash", {"command": "rm -rf /"}).block

    def test_blocks_destructive_bash(self, coordinator, ctx):
        ctx.state.planning_mode_enabled = True
        decision = coordinator.check_tool_call(ctx, "bash", {"command": "rm -rf build"})
        assert decision.block
        assert decision.reason == blocked_reason("rm -rf build")
        assert decision.reason.startswith("Planning mode: destructive command blocked.")

    def test_allows_safe_bash(self, coordinator, ctx):
        ctx.state.planning_mode_enabled = True
        assert not coordinator.check_tool_call(ctx, "bash", {"command": "git status"}).block
        assert not coordinator.check_tool_call(ctx, "bash", {}).block

    def test_ignores_other_tools(self, coordinator, ctx):
        ctx.state.planning_mode_enabled = True
        assert not coordinator.check_tool_call(ctx, "read", {"command": "rm x"}).block


class TestInjectedNotes:
    """Tests for notes added before an automated turn."""

    @pytest.mark.asyncio
    async def test_no_notes(self, coordinator, ctx):
        assert await coordinator.before_agent_start(ctx) == []

    @pytest.mark.asyncio
    async def test_planning_note(self, coordinator, ctx):
        ctx.state.planning_mode_enabled = True
        [message] = await coordinator.before_agent_start(ctx)
        assert message.custom_type == PLANNING_CONTEXT_TYPE
        assert message.content == PLANNING_NOTE
        assert message.display is False

    @pytest.mark.asyncio
    async def test_execution_note_reads_disk(self, coordinator, ctx, plans_dir, make_plan, write_plan):
        write_plan(plans_dir, make_plan(steps=[("Read", True), ("Write", False)]))
        ctx.state.active_plan_id = "deadbeef"
        [message] = await coordinator.before_agent_start(ctx)
        assert message.custom_type == EXECUTION_CONTEXT_TYPE
        assert message.content.startswith("[EXECUTING PLAN PLAN-deadbeef]")
        assert "2. Write" in message.content
        assert "1. Read" not in message.content

        write_plan(plans_dir, make_plan(steps=[("Read", True), ("Write", True)]))
        [message] = await coordinator.before_agent_start(ctx)
        assert "All steps are complete!" in message.content

    @pytest.mark.asyncio
    async def test_both_notes(self, coordinator, ctx, plans_dir, make_plan, write_plan):
        write_plan(plans_dir, make_plan())
        ctx.state.active_plan_id = "deadbeef"
        ctx.state.planning_mode_enabled = True
        messages = await coordinator.before_agent_start(ctx)
        assert [m.custom_type for m in messages] == [PLANNING_CONTEXT_TYPE, EXECUTION_CONTEXT_TYPE]

    def test_execution_note_format(self, make_plan):
        note = execution_note(make_plan(steps=[("Read", False)]))
        assert note == (
            "[EXECUTING PLAN PLAN-deadbeef]\n\nRemaining steps:\n1. Read\n\n"
            'Execute each step in order. Use the plan tool with action "complete-step" '
            "and step_id to mark steps done."
        )


class TestRefresh:
    """Tests for the status indicator and step panel."""

    @pytest.mark.asyncio
    async def test_idle(self, coordinator, ctx, ui):
        await coordinator.refresh(ctx)
        assert ui.statuses == {STATUS_KEY: None}
        assert ui.widgets == {WIDGET_KEY: None}

    @pytest.mark.asyncio
    async def test_active_plan_progress(self, coordinator, ctx, ui, plans_dir, make_plan, write_plan):
        write_plan(plans_dir, make_plan(status=PlanStatus.ACTIVE, steps=[("Read", True), ("Write", False)]))
        ctx.state.active_plan_id = "deadbeef"
        await coordinator.refresh(ctx)
        assert ui.statuses[STATUS_KEY] == "📋 1/2"
        assert ui.widgets[WIDGET_KEY] == ["☑ Read", "☐ Write"]

    @pytest.mark.asyncio
    async def test_planning_status_wins(self, coordinator, ctx, ui, plans_dir, make_plan, write_plan):
        write_plan(plans_dir, make_plan(steps=[("Read", False)]))
        ctx.state.active_plan_id = "deadbeef"
        ctx.state.planning_mode_enabled = True
        await coordinator.refresh(ctx)
        assert ui.statuses[STATUS_KEY] == "⏸ planning"
        assert ui.widgets[WIDGET_KEY] == ["☐ Read"]

    @pytest.mark.asyncio
    async def test_plan_without_steps_hides_panel(self, coordinator, ctx, ui, plans_dir, make_plan, write_plan):
        write_plan(plans_dir, make_plan())
        ctx.state.active_plan_id = "deadbeef"
        await coordinator.refresh(ctx)
        assert ui.statuses[STATUS_KEY] == "📋 0/0"
        assert ui.widgets[WIDGET_KEY] is None

    @pytest.mark.asyncio
    async def test_missing_active_plan_clears_status(self, coordinator, ctx, ui):
        ctx.state.active_plan_id = "deadbeef"
        await coordinator.refresh(ctx)
        assert ui.statuses[STATUS_KEY] is None


class TestSessionStart:
    """Tests for session start and switch handling."""

    @pytest.mark.asyncio
    async def test_creates_store_and_collects(self, coordinator, ctx, plans_dir, make_plan, write_plan):
        write_plan(plans_dir, make_plan(status=PlanStatus.COMPLETED, created_at="2000-01-01T00:00:00.000Z"))
        write_plan(plans_dir, make_plan("cafebabe", created_at="2000-01-01T00:00:00.000Z"))
        deleted = await coordinator.on_session_start(ctx)
        assert deleted == ["deadbeef"]
        assert not plan_path(plans_dir, "deadbeef").exists()
        assert plan_path(plans_dir, "cafebabe").exists()
        assert not ctx.state.planning_mode_enabled

    @pytest.mark.asyncio
    async def test_respects_store_settings(self, coordinator, ctx, plans_dir, make_plan, write_plan):
        write_plan(plans_dir, make_plan(status=PlanStatus.COMPLETED, created_at="2000-01-01T00:00:00.000Z"))
        settings_path(plans_dir).write_text(StoreSettings(gc=False).model_dump_json(by_alias=True))
        assert await coordinator.on_session_start(ctx) == []

    @pytest.mark.asyncio
    async def test_empty_workspace(self, coordinator, ctx, plans_dir):
        assert await coordinator.on_session_start(ctx) == []
        assert plans_dir.is_dir()

    @pytest.mark.asyncio
    async def test_start_in_planning_mode(self, ctx, ui):
        coordinator = PlanModeCoordinator(PlanModeSettings(start_in_planning_mode=True))
        await coordinator.on_session_start(ctx)
        assert ctx.state.planning_mode_enabled
        assert ctx.state.active_tools == PLAN_MODE_TOOLS
        assert ui.statuses[STATUS_KEY] == "⏸ planning"

    @pytest.mark.asyncio
    async def test_switch_refreshes(self, coordinator, ctx, ui, plans_dir, make_plan, write_plan):
        write_plan(plans_dir, make_plan(steps=[("Read", False)]))
        ctx.state.active_plan_id = "deadbeef"
        await coordinator.on_session_switch(ctx)
        assert ui.statuses[STATUS_KEY] == "📋 0/1"
