"""Tools module for plan-mode.

Tool System:
    - ToolDefinition / ToolRegistry: tool definitions and dispatch by name
    - register_tool: Decorator for easy tool registration
    - require_context: Guard decorator for tools that need a context value

Framework Tools:
    - plan_tools.plan: the plan action tool (list, get, create, update,
      add-step, complete-step, delete, claim, release, execute)
"""

import asyncio
import functools
from typing import Any, Callable, TypeVar

F = TypeVar("F", bound=Callable)


def require_context(
    context_name: str,
    getter: Callable[..., Any],
    error_message: str | None = None,
) -> Callable[[F], F]:
    """Guard decorator: returns error dict if getter() is None.

    Apply below @register_tool so it runs first (innermost).

    Args:
        context_name: Human-readable name for error messages.
        getter: Zero-arg callable returning the context value or None.
        error_message: Custom error message (defaults to "{context_name} not available").
    """
    msg = error_message or f"{context_name} not available"

    def decorator(func: F) -> F:
        if asyncio.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                if getter() is None:
                    return {"success": False, "error": msg}
                return await func(*args, **kwargs)
            return async_wrapper  # type: ignore[return-value]
        else:
            @functools.wraps(func)
            def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
                if getter() is None:
                    return {"success": False, "error": msg}
                return func(*args, **kwargs)
            return sync_wrapper  # type: ignore[return-value]
    return decorator


from plan_mode.tools.registry import (
    ErrorCode,
    ToolCategory,
    ToolDefinition,
    ToolError,
    ToolRegistry,
    get_registry,
    register_tool,
)

# Tool modules import the engine; loaded on first access
_lazy_imports = {
    "plan": "plan_mode.tools.plan_tools",
    "describe_plan_tool": "plan_mode.tools.plan_tools",
}


def __getattr__(name: str):
    """Lazy import for tool modules."""
    if name in _lazy_imports:
        import importlib

        module = importlib.import_module(_lazy_imports[name])
        value = getattr(module, name)
        globals()[name] = value
        return value
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "ErrorCode",
    "ToolCategory",
    "ToolDefinition",
    "ToolError",
    "ToolRegistry",
    "get_registry",
    "register_tool",
    "require_context",
    "plan",
    "describe_plan_tool",
]
