"""Plan id helpers: display form, normalization, validation, generation."""

import secrets
from pathlib import Path

from plan_mode.constants import MAX_ID_ATTEMPTS, PLAN_ID_PATTERN, PLAN_ID_PREFIX
from plan_mode.errors import PlanIdGenerationError, PlanValidationError
from plan_mode.planning.paths import plan_path


def format_plan_id(plan_id: str) -> str:
    return f"{PLAN_ID_PREFIX}{plan_id}"


def normalize_plan_id(plan_id: str) -> str:
    """Strip whitespace, a leading '#', and a case-insensitive PLAN- prefix."""
    trimmed = plan_id.strip()
    if trimmed.startswith("#"):
        trimmed = trimmed[1:]
    if trimmed.upper().startswith(PLAN_ID_PREFIX):
        trimmed = trimmed[len(PLAN_ID_PREFIX):]
    return trimmed


def validate_plan_id(plan_id: str) -> str:
    """Return the lowercase raw id.

    Raises:
        PlanValidationError: If the id is not 8 hex digits after normalization.
    """
    normalized = normalize_plan_id(plan_id)
    if not normalized or not PLAN_ID_PATTERN.match(normalized):
        raise PlanValidationError(f"Invalid plan id. Expected {PLAN_ID_PREFIX}<hex>.")
    return normalized.lower()


def display_plan_id(plan_id: str) -> str:
    return format_plan_id(normalize_plan_id(plan_id))


def generate_plan_id(plans_dir: Path, attempts: int = MAX_ID_ATTEMPTS) -> str:
    """Pick a random id whose record file does not exist yet.

    Raises:
        PlanIdGenerationError: After ``attempts`` collisions.
    """
    for _ in range(attempts):
        candidate = secrets.token_hex(4)
        if not plan_path(plans_dir, candidate).exists():
            return candidate
    raise PlanIdGenerationError()
