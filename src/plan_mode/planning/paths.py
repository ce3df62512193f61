"""Path resolution for the plan store.

All functions are pure: they compute paths and never touch the filesystem.
"""

import os
from pathlib import Path

from plan_mode.constants import (
    LOCK_FILE_SUFFIX,
    PLAN_DIR_NAME,
    PLAN_FILE_SUFFIX,
    PLAN_SETTINGS_NAME,
)


def _clean_override(override: str | None) -> str | None:
    if override is None or not override.strip():
        return None
    return override.strip()


def resolve_plans_dir(cwd: str | Path, override: str | None = None) -> Path:
    """Resolve the store root for a working directory.

    Args:
        cwd: Working directory.
        override: Optional store root; relative paths resolve against ``cwd``.
            Blank values are ignored.
    """
    base = Path(cwd)
    cleaned = _clean_override(override)
    if cleaned is not None:
        return Path(os.path.normpath(base / Path(cleaned).expanduser()))
    return Path(os.path.normpath(base / PLAN_DIR_NAME))


def plans_dir_label(cwd: str | Path, override: str | None = None) -> str:
    """Human-readable store location for tool descriptions."""
    if _clean_override(override) is not None:
        return str(resolve_plans_dir(cwd, override))
    return PLAN_DIR_NAME


def plan_path(plans_dir: Path, plan_id: str) -> Path:
    return plans_dir / f"{plan_id}{PLAN_FILE_SUFFIX}"


def lock_path(plans_dir: Path, plan_id: str) -> Path:
    return plans_dir / f"{plan_id}{LOCK_FILE_SUFFIX}"


def settings_path(plans_dir: Path) -> Path:
    return plans_dir / PLAN_SETTINGS_NAME
