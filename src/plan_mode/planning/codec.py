"""Plan record codec.

A record file is a JSON header object followed by free-form markdown::

    {
      "id": "deadbeef",
      "title": "Refactor auth module",
      "status": "active",
      "created_at": "2026-01-26T08:00:00.000Z",
      "assigned_to_session": "session.json",
      "steps": [
        { "id": 1, "text": "Read existing code", "done": false }
      ]
    }

    Optional notes.

The header boundary is found with a brace scanner rather than a delimiter
line. Reading is permissive: a missing or corrupt header yields a draft plan
with default fields instead of an error.
"""

import json
import re
from typing import Any

from plan_mode.planning.models import Plan, PlanStatus, PlanStep

_LEADING_NEWLINES = re.compile(r"^(?:\r?\n)+")


def find_header_end(content: str) -> int:
    """Return the index of the brace closing the leading JSON object, or -1.

    Braces inside string literals are ignored; backslash escapes inside
    strings are honoured so an escaped quote does not end the string.
    """
    depth = 0
    in_string = False
    escaped = False

    for i, char in enumerate(content):
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return i
    return -1


def split_front_matter(content: str) -> tuple[str, str]:
    """Split content into (header text, body text)."""
    if not content.startswith("{"):
        return "", content
    end = find_header_end(content)
    if end == -1:
        return "", content
    header = content[: end + 1]
    body = _LEADING_NEWLINES.sub("", content[end + 1:])
    return header, body


def _parse_step(raw: Any) -> PlanStep | None:
    if not isinstance(raw, dict):
        return None
    step_id = raw.get("id")
    text = raw.get("text")
    done = raw.get("done")
    if isinstance(step_id, bool) or not isinstance(step_id, (int, float)):
        return None
    if isinstance(step_id, float):
        if not step_id.is_integer():
            return None
        step_id = int(step_id)
    if not isinstance(text, str) or not isinstance(done, bool):
        return None
    return PlanStep(id=step_id, text=text, done=done)


def _parse_status(raw: Any) -> PlanStatus:
    if isinstance(raw, str):
        try:
            return PlanStatus(raw.strip().lower())
        except ValueError:
            pass
    return PlanStatus.DRAFT


def parse_front_matter(text: str, id_fallback: str) -> Plan:
    """Parse a header; any failure falls back to a default draft plan."""
    plan = Plan(id=id_fallback)

    trimmed = text.strip()
    if not trimmed:
        return plan

    try:
        parsed = json.loads(trimmed)
    except ValueError:
        return plan
    if not isinstance(parsed, dict):
        return plan

    if isinstance(parsed.get("id"), str) and parsed["id"]:
        plan.id = parsed["id"]
    if isinstance(parsed.get("title"), str):
        plan.title = parsed["title"]
    if "status" in parsed:
        plan.status = _parse_status(parsed["status"])
    if isinstance(parsed.get("created_at"), str):
        plan.created_at = parsed["created_at"]
    assigned = parsed.get("assigned_to_session")
    if isinstance(assigned, str) and assigned.strip():
        plan.assigned_to_session = assigned
    if isinstance(parsed.get("steps"), list):
        plan.steps = [s for s in (_parse_step(raw) for raw in parsed["steps"]) if s is not None]
    return plan


def parse_plan(content: str, id_fallback: str) -> Plan:
    """Parse a full record (header and body)."""
    header, body = split_front_matter(content)
    plan = parse_front_matter(header, id_fallback)
    plan.body = body or ""
    return plan


def serialize_plan(plan: Plan) -> str:
    """Render the canonical record text: pretty header, blank line, trimmed body."""
    header = json.dumps(plan.header_dict(), indent=2, ensure_ascii=False)
    body = (plan.body or "").lstrip("\n").rstrip()
    if not body:
        return f"{header}\n"
    return f"{header}\n\n{body}\n"
