"""Ordering and fuzzy filtering of plan listings."""

import re
from dataclasses import dataclass

from plan_mode.planning.models import Plan, PlanStatus

_WORD_BOUNDARY = re.compile(r"[\s\-_./:]")


@dataclass
class FuzzyMatch:
    """Result of matching one query token against a text.

    Lower scores are tighter matches.
    """

    matches: bool
    score: float = 0.0


def fuzzy_match(query: str, text: str) -> FuzzyMatch:
    """Case-insensitive subsequence match.

    Consecutive characters and matches at word starts lower the score;
    gaps between matched characters and late matches raise it.
    """
    needle = query.lower()
    haystack = text.lower()
    if not needle:
        return FuzzyMatch(True, 0.0)

    score = 0.0
    qi = 0
    last = -1
    run = 0
    for i, char in enumerate(haystack):
        if qi >= len(needle):
            break
        if char != needle[qi]:
            continue
        if last == i - 1:
            run += 1
            score -= run * 5
        else:
            run = 0
            if last >= 0:
                score += (i - last - 1) * 2
        if i == 0 or _WORD_BOUNDARY.match(haystack[i - 1]):
            score -= 10
        score += i * 0.1
        last = i
        qi += 1

    if qi < len(needle):
        return FuzzyMatch(False)
    return FuzzyMatch(True, score)


def build_search_text(plan: Plan) -> str:
    """Compose the text a query is matched against."""
    assignment = f"assigned:{plan.assigned_to_session}" if plan.assigned_to_session else ""
    steps_text = " ".join(s.text for s in plan.steps)
    return f"{plan.display_id} {plan.id} {plan.title} {plan.status.value} {assignment} {steps_text}".strip()


def _rank(plan: Plan) -> tuple[bool, bool, bool]:
    completed = plan.is_completed
    assigned = not completed and bool(plan.assigned_to_session)
    return completed, plan.status != PlanStatus.ACTIVE, not assigned


def sort_plans(plans: list[Plan]) -> list[Plan]:
    """Incomplete first, then active, then assigned, then newest first."""
    newest_first = sorted(plans, key=lambda p: p.created_at or "", reverse=True)
    return sorted(newest_first, key=_rank)


def filter_plans(plans: list[Plan], query: str) -> list[Plan]:
    """Keep plans matching every whitespace-separated token of ``query``.

    Matches are ranked incomplete first, then by total score. Ties keep
    the input order. A blank query returns the input unchanged.
    """
    tokens = query.split()
    if not tokens:
        return plans

    scored: list[tuple[Plan, float]] = []
    for plan in plans:
        text = build_search_text(plan)
        total = 0.0
        for token in tokens:
            result = fuzzy_match(token, text)
            if not result.matches:
                break
            total += result.score
        else:
            scored.append((plan, total))

    scored.sort(key=lambda item: (item[0].is_completed, item[1]))
    return [plan for plan, _ in scored]
