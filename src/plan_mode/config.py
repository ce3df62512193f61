"""Process configuration for plan-mode.

Provides PlanModeSettings, loaded from environment variables with the
``PLAN_MODE_`` prefix, plus global and context-scoped accessors.

Settings Management:
    1. Global singleton (simple cases):
        set_settings(my_settings)
        settings = get_settings()

    2. Context-based (isolated contexts, tests):
        with SettingsContext(my_settings):
            settings = get_settings()  # Returns my_settings

The per-store retention settings (``settings.json`` inside the plans
directory) are not part of this class; see plan_mode.planning.models.StoreSettings.
"""

from contextlib import contextmanager
from contextvars import ContextVar, Token
from typing import Generator, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from plan_mode.constants import LOCK_TTL_SECONDS

__all__ = [
    "PlanModeSettings",
    "SettingsContext",
    "get_settings",
    "set_settings",
    "set_context_settings",
    "get_context_settings",
    "reload_settings",
]


class PlanModeSettings(BaseSettings):
    """Settings for the plan store and planning mode.

    Loaded from (in order of precedence):
    1. Constructor arguments
    2. Environment variables (PLAN_MODE_ prefix)
    3. Default values
    """

    model_config = SettingsConfigDict(
        env_prefix="PLAN_MODE_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    path: str | None = Field(
        default=None,
        title="Plans Directory",
        description="Override for the plans directory, resolved relative to the working directory",
    )
    lock_ttl_seconds: int = Field(
        default=LOCK_TTL_SECONDS,
        ge=0,
        title="Lock TTL",
        description="Age in seconds after which a plan lock is considered stale",
    )
    auto_discard_stale_locks: bool = Field(
        default=False,
        title="Auto-discard Stale Locks",
        description="Drop stale locks without asking when no interactive UI is available",
    )
    start_in_planning_mode: bool = Field(
        default=False,
        title="Start in Planning Mode",
        description="Enable read-only planning mode when a session starts",
    )

    # Logging configuration
    log_level: Literal["debug", "info", "warning", "error"] = Field(
        default="warning",
        title="Log Level",
        description="Logging verbosity level",
    )
    log_format: Literal["console", "json"] = Field(
        default="console",
        title="Log Format",
        description="Log output format (console for dev, json for production)",
    )

    @field_validator("path", mode="before")
    @classmethod
    def blank_path_is_unset(cls, v: str | None) -> str | None:
        """Treat a blank override as no override."""
        if isinstance(v, str) and not v.strip():
            return None
        return v


# Context variable for settings (takes precedence over global singleton)
_settings_context: ContextVar[PlanModeSettings | None] = ContextVar(
    "plan_mode_settings_context", default=None
)

# Global settings instance holder (fallback when no context)
_settings_instance: PlanModeSettings | None = None


def get_settings() -> PlanModeSettings:
    """Get the current settings instance.

    Resolution order:
    1. Context variable (set via SettingsContext or set_context_settings)
    2. Global singleton (set via set_settings)
    3. Fresh PlanModeSettings instance (created on first access)
    """
    context_settings = _settings_context.get()
    if context_settings is not None:
        return context_settings

    global _settings_instance
    if _settings_instance is None:
        _settings_instance = PlanModeSettings()
    return _settings_instance


def set_settings(settings: PlanModeSettings) -> None:
    """Set the global settings instance."""
    global _settings_instance
    _settings_instance = settings


def set_context_settings(settings: PlanModeSettings | None) -> Token:
    """Set settings for the current context.

    Args:
        settings: Settings to use in current context, or None to clear

    Returns:
        Token that can be used to reset the context variable.
    """
    return _settings_context.set(settings)


def get_context_settings() -> PlanModeSettings | None:
    """Get settings from current context (if any)."""
    return _settings_context.get()


@contextmanager
def SettingsContext(settings: PlanModeSettings) -> Generator[PlanModeSettings, None, None]:
    """Context manager for isolated settings.

    Example:
        with SettingsContext(test_settings) as s:
            extension = PlanModeExtension()  # picks up test_settings
    """
    token = _settings_context.set(settings)
    try:
        yield settings
    finally:
        _settings_context.reset(token)


def reload_settings() -> PlanModeSettings:
    """Reload settings (clears global singleton and context cache)."""
    global _settings_instance
    _settings_instance = None
    _settings_context.set(None)
    return get_settings()
