"""Data models for the planning-mode shell policy."""

from dataclasses import dataclass
from enum import Enum


class CommandCategory(Enum):
    """Category of a shell command under the planning-mode policy."""

    DESTRUCTIVE = "destructive"  # Modifies files, packages, processes or the repo
    SAFE = "safe"  # Known read-only command
    UNKNOWN = "unknown"  # Matches neither list


@dataclass
class ClassificationResult:
    """Result of classifying a command."""

    category: CommandCategory
    command: str
    matched_pattern: str | None = None
    reason: str | None = None

    @property
    def allowed(self) -> bool:
        return self.category != CommandCategory.DESTRUCTIVE
