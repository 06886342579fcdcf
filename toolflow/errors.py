"""Exception taxonomy for toolflow."""

from __future__ import annotations

from typing import Any, Optional


class ToolflowError(Exception):
    """Base class for all toolflow errors."""

    def __init__(self, message: str, context: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}


class ValidationError(ToolflowError):
    """Tool parameters did not match the tool's input schema."""

    def __init__(
        self,
        tool_name: str,
        issues: list[dict[str, Any]],
        params: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            f"Input validation failed for tool '{tool_name}'",
            {"tool_name": tool_name, "issues": issues, "params": params or {}},
        )
        self.tool_name = tool_name
        self.issues = issues


class ToolNotFoundError(ToolflowError):
    """No tool is registered under the requested name."""

    def __init__(self, tool_name: str) -> None:
        super().__init__(f"Tool not found: {tool_name}", {"tool_name": tool_name})
        self.tool_name = tool_name


class DuplicateToolError(ToolflowError):
    """A tool with the same name is already registered."""

    def __init__(self, tool_name: str) -> None:
        super().__init__(
            f"Tool already registered: {tool_name}", {"tool_name": tool_name}
        )
        self.tool_name = tool_name


class WorkflowConfigError(ToolflowError):
    """Workflow graph is malformed and cannot be executed."""


class ExecutionError(ToolflowError):
    """A tool failed while executing.

    Never propagated out of the dispatcher; converted into an error result.
    """

    def __init__(
        self,
        tool_name: str,
        message: str,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message, {"tool_name": tool_name})
        self.tool_name = tool_name
        self.cause = cause


class JobTransitionError(ToolflowError):
    """Job status change not allowed when strict transitions are enabled."""


class TemplateResolutionError(ToolflowError):
    """A ``{path}`` placeholder in workflow step params could not be resolved."""


__all__ = [
    "ToolflowError",
    "ValidationError",
    "ToolNotFoundError",
    "DuplicateToolError",
    "WorkflowConfigError",
    "ExecutionError",
    "JobTransitionError",
    "TemplateResolutionError",
]
