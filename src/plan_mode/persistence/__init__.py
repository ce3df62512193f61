"""Persistence helpers for plan-mode."""

from plan_mode.persistence._utils import atomic_write_text

__all__ = ["atomic_write_text"]
