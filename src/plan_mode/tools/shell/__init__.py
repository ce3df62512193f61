"""Shell command policy applied while planning mode is active.

Usage:
    from plan_mode.tools.shell import CommandPolicy

    policy = CommandPolicy()
    if not policy.is_safe(command):
        ...  # block the call
"""

from plan_mode.tools.shell.classifier import (
    DESTRUCTIVE_PATTERNS,
    SAFE_PATTERNS,
    CommandPolicy,
    default_policy,
)
from plan_mode.tools.shell.models import ClassificationResult, CommandCategory

__all__ = [
    "CommandPolicy",
    "default_policy",
    "ClassificationResult",
    "CommandCategory",
    "DESTRUCTIVE_PATTERNS",
    "SAFE_PATTERNS",
]
