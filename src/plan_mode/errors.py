"""Error types for plan-mode.

Provides:
- ToolError: Standard error carrying a machine-readable code
- ErrorCode: Standard error codes
- Plan*Error: The plan action taxonomy (validation, not found, conflict, lock)

Errors are raised inside the store, lock and engine layers and converted
into structured results once, at the action boundary.
"""

from typing import Any


class ToolError(Exception):
    """Standard error for tool failures.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code
        recoverable: Whether the error might be recoverable
        details: Additional error details
        tool_name: Name of the tool that failed
    """

    def __init__(
        self,
        message: str,
        error_code: str = "TOOL_ERROR",
        recoverable: bool = False,
        details: dict[str, Any] | None = None,
        tool_name: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.recoverable = recoverable
        self.details = details or {}
        self.tool_name = tool_name

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "success": False,
            "error": {
                "message": self.message,
                "code": self.error_code,
                "recoverable": self.recoverable,
                "details": self.details,
                "tool_name": self.tool_name,
            },
        }


class ErrorCode:
    """Standard error codes for tool failures."""

    # Input errors
    INVALID_INPUT = "INVALID_INPUT"
    MISSING_REQUIRED = "MISSING_REQUIRED"
    VALIDATION_FAILED = "VALIDATION_FAILED"

    # Resource errors
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"

    # Lock errors
    LOCKED = "LOCKED"
    LOCK_FAILED = "LOCK_FAILED"

    # Internal errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


class PlanValidationError(ToolError):
    """A parameter is missing or malformed. Raised before any I/O."""

    def __init__(self, message: str, error_code: str = ErrorCode.INVALID_INPUT, **kwargs: Any):
        super().__init__(message, error_code=error_code, **kwargs)


class PlanNotFoundError(ToolError):
    """The referenced plan (or step) does not exist."""

    def __init__(self, message: str, **kwargs: Any):
        super().__init__(message, error_code=ErrorCode.NOT_FOUND, **kwargs)


class PlanConflictError(ToolError):
    """A precondition on the stored plan failed (assignment, terminal status)."""

    def __init__(self, message: str, **kwargs: Any):
        super().__init__(message, error_code=ErrorCode.CONFLICT, **kwargs)


class PlanLockError(ToolError):
    """The plan lock is held by someone else, or could not be stolen."""

    def __init__(self, message: str, **kwargs: Any):
        super().__init__(message, error_code=ErrorCode.LOCKED, recoverable=True, **kwargs)


class LockSystemError(ToolError):
    """Unexpected filesystem failure while acquiring a lock."""

    def __init__(self, message: str, **kwargs: Any):
        super().__init__(message, error_code=ErrorCode.LOCK_FAILED, **kwargs)


class PlanIdGenerationError(ToolError):
    """No free plan id could be found."""

    def __init__(self, message: str = "Failed to generate unique plan id", **kwargs: Any):
        super().__init__(message, error_code=ErrorCode.INTERNAL_ERROR, **kwargs)
