"""Registry of host-callable tools.

Tools register themselves at import time with @register_tool; the extension
dispatches host tool calls by name through the default registry.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable
import inspect

from plan_mode.errors import ErrorCode, ToolError

__all__ = [
    "ErrorCode",
    "ToolCategory",
    "ToolDefinition",
    "ToolError",
    "ToolRegistry",
    "get_registry",
    "register_tool",
]


class ToolCategory(Enum):
    PLANNING = "planning"
    OTHER = "other"


@dataclass
class ToolDefinition:
    """A registered tool.

    Attributes:
        name: Name the host calls the tool by (defaults to function name)
        description: First docstring line unless given explicitly
        func: The tool function
        category: Tool category
        is_async: Inferred from func
    """

    name: str
    description: str
    func: Callable[..., Any]
    category: ToolCategory = ToolCategory.OTHER
    is_async: bool = False

    def __post_init__(self):
        if inspect.iscoroutinefunction(self.func):
            self.is_async = True


class ToolRegistry:
    """Name-to-definition map with async-aware dispatch."""

    def __init__(self):
        self._tools: dict[str, ToolDefinition] = {}

    def register(
        self,
        func: Callable[..., Any] | None = None,
        *,
        name: str | None = None,
        description: str | None = None,
        category: ToolCategory = ToolCategory.OTHER,
    ) -> Callable[..., Any]:
        """Register a tool function, directly or as a decorator.

        Registering a second tool under the same name replaces the first.
        """

        def decorator(f: Callable[..., Any]) -> Callable[..., Any]:
            tool_name = name or f.__name__
            tool_desc = description or (f.__doc__ or "").split("\n")[0].strip()
            self._tools[tool_name] = ToolDefinition(
                name=tool_name,
                description=tool_desc,
                func=f,
                category=category,
            )
            return f

        if func is not None:
            return decorator(func)
        return decorator

    def get(self, name: str) -> ToolDefinition | None:
        return self._tools.get(name)

    async def call(self, name: str, **kwargs: Any) -> Any:
        """Invoke a registered tool, awaiting it when it is async.

        Raises:
            ToolError: NOT_FOUND if no tool is registered under name.
        """
        definition = self._tools.get(name)
        if definition is None:
            raise ToolError(f"Tool {name!r} is not registered", ErrorCode.NOT_FOUND)
        if definition.is_async:
            return await definition.func(**kwargs)
        return definition.func(**kwargs)


_default_registry = ToolRegistry()


def get_registry() -> ToolRegistry:
    """Get the default tool registry."""
    return _default_registry


def register_tool(
    func: Callable[..., Any] | None = None,
    *,
    name: str | None = None,
    description: str | None = None,
    category: ToolCategory = ToolCategory.OTHER,
) -> Callable[..., Any]:
    """Register a tool with the default registry.

        @register_tool(category=ToolCategory.PLANNING)
        async def plan(action: str) -> dict:
            '''Manage plans.'''
    """
    return _default_registry.register(func, name=name, description=description, category=category)
