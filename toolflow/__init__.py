"""toolflow: tool dispatch, background jobs and workflow graphs."""

from .contracts import ContentBlock, ExecutionContext, ToolInput, ToolResult
from .dispatch import ToolDispatcher
from .errors import (
    DuplicateToolError,
    ExecutionError,
    ToolNotFoundError,
    ValidationError,
    WorkflowConfigError,
)
from .handlers import BaseHandler
from .jobs import InMemoryJobStore, Job, JobStatus, get_job_store
from .notices import AsyncNotice, build_async_notice
from .notifier import get_notifier
from .registry import ToolDefinition, ToolRegistry
from .runtime import Runtime, build_runtime
from .workflows import Workflow, WorkflowEngine, WorkflowResult, WorkflowStep

__version__ = "0.1.0"
__all__ = [
    "AsyncNotice",
    "BaseHandler",
    "ContentBlock",
    "DuplicateToolError",
    "ExecutionContext",
    "ExecutionError",
    "InMemoryJobStore",
    "Job",
    "JobStatus",
    "Runtime",
    "ToolDefinition",
    "ToolDispatcher",
    "ToolInput",
    "ToolNotFoundError",
    "ToolRegistry",
    "ToolResult",
    "ValidationError",
    "Workflow",
    "WorkflowConfigError",
    "WorkflowEngine",
    "WorkflowResult",
    "WorkflowStep",
    "build_async_notice",
    "build_runtime",
    "get_job_store",
    "get_notifier",
]
