"""Tests for plan renderings."""

from plan_mode.cli.rendering import EXPAND_HINT, plan_document, render_call, render_plan_heading, render_result
from plan_mode.errors import ErrorCode, ToolError
from plan_mode.planning.engine import PlanActionResult
from plan_mode.planning.models import PlanStatus


class TestRenderCall:
    def test_step_call(self):
        text = render_call({"action": "complete-step", "id": "deadbeef", "step_id": 2})
        assert text.plain == "plan complete-step PLAN-deadbeef step #2"

    def test_create_call(self):
        assert render_call({"action": "create", "title": "Refactor auth"}).plain == 'plan create "Refactor auth"'

    def test_ignores_bad_types(self):
        assert render_call({"action": 3, "id": None, "step_id": True}).plain == "plan "


class TestRenderHeading:
    def test_assigned_to_current_session(self, make_plan):
        plan = make_plan(assigned_to_session="s1", steps=[("a", True), ("b", False)])
        assert render_plan_heading(plan, "s1").plain == (
            "PLAN-deadbeef Refactor auth [1/2] (assigned: s1, current) (draft)"
        )
        assert render_plan_heading(plan, "s2").plain == "PLAN-deadbeef Refactor auth [1/2] (assigned: s1) (draft)"

    def test_untitled_without_steps(self, make_plan):
        assert render_plan_heading(make_plan(title="")).plain == "PLAN-deadbeef (untitled) (draft)"


class TestRenderResult:
    def test_error(self):
        result = PlanActionResult.failure("get", ToolError("boom", ErrorCode.NOT_FOUND))
        assert render_result(result).plain == "Error: boom"

    def test_empty_list(self):
        assert render_result(PlanActionResult("list", "{}", plans=[])).plain == "No plans"

    def test_list_sections(self, make_plan):
        plans = [make_plan(f"0000000{i}", title=f"D{i}") for i in range(1, 5)]
        plans.append(make_plan("000000a1", title="A", status=PlanStatus.ACTIVE))
        result = PlanActionResult("list", "{}", plans=plans)

        collapsed = render_result(result).plain.split("\n")
        assert collapsed[0] == "Active (1)"
        assert collapsed[1] == "  PLAN-000000a1 A (active)"
        assert "Draft (4)" in collapsed
        assert "  ... 1 more" in collapsed
        assert collapsed[-3:] == ["Completed (0)", "  none", EXPAND_HINT]

        expanded = render_result(result, expanded=True).plain
        assert "  PLAN-00000004 D4 (draft)" in expanded
        assert EXPAND_HINT not in expanded

    def test_plan_result(self, make_plan):
        plan = make_plan(steps=[("Read", True), ("Write", False)])
        result = PlanActionResult("create", "{}", plan=plan)
        assert render_result(result).plain == (
            f"✓ Created PLAN-deadbeef Refactor auth [1/2] (draft)\n{EXPAND_HINT}"
        )
        assert render_result(result, expanded=True).plain == (
            "✓ Created PLAN-deadbeef Refactor auth [1/2] (draft)\n\n  ✓ #1 Read\n  ○ #2 Write"
        )

    def test_get_has_no_label(self, make_plan):
        result = PlanActionResult("get", "{}", plan=make_plan())
        assert render_result(result).plain == "PLAN-deadbeef Refactor auth (draft)"

    def test_content_only(self):
        assert render_result(PlanActionResult("execute", "Executing")).plain == "Executing"


class TestPlanDocument:
    def test_steps_and_body(self, make_plan):
        plan = make_plan(steps=[("Read", True), ("Write", False)], body="\nNotes\n")
        assert plan_document(plan) == "## Steps\n\n- [x] Read\n- [ ] Write\n\n---\n\nNotes"
