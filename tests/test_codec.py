"""Tests for the plan record codec."""

import json

import pytest

from plan_mode.planning.codec import (
    find_header_end,
    parse_front_matter,
    parse_plan,
    serialize_plan,
    split_front_matter,
)
from plan_mode.planning.models import PlanStatus


class TestFindHeaderEnd:
    """Tests for the brace scanner."""

    def test_simple_object(self):
        assert find_header_end('{"a": 1}\nbody') == 7

    def test_nested_objects(self):
        content = '{"a": {"b": {"c": 1}}}rest'
        assert content[find_header_end(content)] == "}"
        assert content[find_header_end(content) + 1:] == "rest"

    def test_braces_inside_strings_are_ignored(self):
        content = '{"title": "use {curly} braces }}"}\nbody'
        end = find_header_end(content)
        assert content[: end + 1] == '{"title": "use {curly} braces }}"}'

    def test_escaped_quote_does_not_end_string(self):
        content = '{"title": "say \\"hi}\\" now"}tail'
        end = find_header_end(content)
        assert content[end + 1:] == "tail"
        assert json.loads(content[: end + 1])["title"] == 'say "hi}" now'

    def test_escaped_backslash_before_quote_ends_string(self):
        content = '{"path": "C:\\\\"}after'
        end = find_header_end(content)
        assert content[end + 1:] == "after"
        assert json.loads(content[: end + 1])["path"] == "C:\\"

    def test_unbalanced_returns_minus_one(self):
        assert find_header_end('{"a": {"b": 1}') == -1

    def test_unterminated_string_returns_minus_one(self):
        assert find_header_end('{"a": "}') == -1


class TestSplitFrontMatter:
    """Tests for splitting a record into header and body."""

    def test_content_without_header_is_all_body(self):
        assert split_front_matter("# Notes\nhello") == ("", "# Notes\nhello")

    def test_leading_whitespace_means_no_header(self):
        assert split_front_matter(' {"a": 1}') == ("", ' {"a": 1}')

    def test_leading_blank_lines_stripped_from_body(self):
        header, body = split_front_matter('{"a": 1}\n\n\r\nBody text\n')
        assert header == '{"a": 1}'
        assert body == "Body text\n"

    def test_unbalanced_header_is_treated_as_body(self):
        content = '{"a": 1\nbody'
        assert split_front_matter(content) == ("", content)


class TestParseFrontMatter:
    """Tests for permissive header parsing."""

    def test_invalid_json_yields_defaults(self):
        plan = parse_front_matter("{not json}", "cafebabe")
        assert plan.id == "cafebabe"
        assert plan.title == ""
        assert plan.status == PlanStatus.DRAFT
        assert plan.steps == []
        assert plan.assigned_to_session is None

    def test_non_object_yields_defaults(self):
        plan = parse_front_matter("[1, 2]", "cafebabe")
        assert plan.id == "cafebabe"
        assert plan.title == ""

    def test_empty_header_yields_defaults(self):
        assert parse_front_matter("", "cafebabe").id == "cafebabe"

    def test_fields_are_read(self):
        header = json.dumps(
            {
                "id": "deadbeef",
                "title": "Refactor auth",
                "status": "active",
                "created_at": "2026-01-26T08:00:00.000Z",
                "assigned_to_session": "s1",
                "steps": [{"id": 1, "text": "Read code", "done": True}],
            }
        )
        plan = parse_front_matter(header, "fallback")
        assert plan.id == "deadbeef"
        assert plan.title == "Refactor auth"
        assert plan.status == PlanStatus.ACTIVE
        assert plan.created_at == "2026-01-26T08:00:00.000Z"
        assert plan.assigned_to_session == "s1"
        assert [(s.id, s.text, s.done) for s in plan.steps] == [(1, "Read code", True)]

    def test_wrongly_typed_fields_fall_back(self):
        header = json.dumps({"id": 5, "title": ["x"], "created_at": 3, "assigned_to_session": ""})
        plan = parse_front_matter(header, "fallback")
        assert plan.id == "fallback"
        assert plan.title == ""
        assert plan.created_at == ""
        assert plan.assigned_to_session is None

    def test_unknown_status_is_draft(self):
        plan = parse_front_matter('{"status": "paused"}', "x")
        assert plan.status == PlanStatus.DRAFT

    def test_malformed_steps_are_dropped(self):
        steps = [
            {"id": 1, "text": "ok", "done": False},
            {"id": "2", "text": "string id", "done": False},
            {"id": 3, "text": "no done"},
            {"id": 4, "text": 7, "done": False},
            {"id": True, "text": "bool id", "done": False},
            "not an object",
            {"id": 5.0, "text": "float id", "done": True},
        ]
        plan = parse_front_matter(json.dumps({"steps": steps}), "x")
        assert [(s.id, s.text) for s in plan.steps] == [(1, "ok"), (5, "float id")]


class TestParsePlan:
    """Tests for parsing whole records."""

    def test_plain_markdown_file(self):
        plan = parse_plan("# Just notes\n", "cafebabe")
        assert plan.id == "cafebabe"
        assert plan.status == PlanStatus.DRAFT
        assert plan.body == "# Just notes\n"

    def test_corrupt_header_keeps_body(self):
        plan = parse_plan('{"title": oops}\n\nNotes', "cafebabe")
        assert plan.title == ""
        assert plan.body == "Notes"

    def test_body_braces_do_not_confuse_header(self):
        content = '{"id": "deadbeef", "title": "t {x}"}\n\nfunction f() { return "}"; }\n'
        plan = parse_plan(content, "deadbeef")
        assert plan.title == "t {x}"
        assert plan.body.startswith("function f()")


class TestSerializePlan:
    """Tests for canonical serialization."""

    def test_header_then_blank_line_then_body(self, make_plan):
        plan = make_plan(steps=[("Read code", False)], body="\n\nSome notes\n\n")
        text = serialize_plan(plan)
        header, _, body = text.partition("\n}\n\n")
        assert body == "Some notes\n"
        assert json.loads(header + "\n}")["title"] == "Refactor auth"

    def test_empty_body_is_omitted(self, make_plan):
        text = serialize_plan(make_plan(body="   \n"))
        assert text.endswith("}\n")
        assert "\n\n" not in text

    def test_empty_assignment_is_omitted(self, make_plan):
        data = json.loads(serialize_plan(make_plan()))
        assert "assigned_to_session" not in data
        assert list(data) == ["id", "title", "status", "created_at", "steps"]

    def test_assignment_is_written(self, make_plan):
        data = json.loads(serialize_plan(make_plan(assigned_to_session="s1")))
        assert data["assigned_to_session"] == "s1"

    def test_non_ascii_is_kept_readable(self, make_plan):
        assert "Überarbeiten" in serialize_plan(make_plan(title="Überarbeiten"))

    @pytest.mark.parametrize(
        "title,body",
        [
            ("Refactor auth", ""),
            ('Quotes "and" {braces}', "## Notes\n\n- item {x}\n- \"quoted\""),
            ("back\\slash", "trailing"),
        ],
    )
    def test_round_trip(self, make_plan, title, body):
        plan = make_plan(
            title=title,
            status=PlanStatus.ACTIVE,
            assigned_to_session="s1",
            steps=[("Read code", True), ("Write tests", False)],
            body=body,
        )
        parsed = parse_plan(serialize_plan(plan), plan.id)
        assert parsed.body.rstrip() == plan.body
        parsed.body = plan.body
        assert parsed == plan
