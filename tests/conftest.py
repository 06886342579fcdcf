"""Shared fixtures for toolflow tests."""

from __future__ import annotations

from typing import Any, Callable, List, Optional

import pytest

from toolflow import (
    ExecutionContext,
    InMemoryJobStore,
    ToolDefinition,
    ToolDispatcher,
    ToolInput,
    ToolRegistry,
    ToolResult,
)
from toolflow.notifier import InMemoryNotifier


class MessageInput(ToolInput):
    message: str = "ok"


class RecordingTool:
    """Execute function that records its calls and returns a fixed outcome."""

    def __init__(
        self,
        text: str = "done",
        is_error: bool = False,
        raises: Optional[BaseException] = None,
        output: Optional[dict] = None,
    ) -> None:
        self.text = text
        self.is_error = is_error
        self.raises = raises
        self.output = output
        self.calls: List[tuple] = []

    async def __call__(self, params, config, context) -> ToolResult:
        self.calls.append((params, config, context))
        if self.raises is not None:
            raise self.raises
        if self.is_error:
            return ToolResult.error(self.text, details={"code": "TOOL_FAILED"})
        if self.output is not None:
            return ToolResult.text(self.text, output=self.output)
        return ToolResult.text(self.text)

    @property
    def call_count(self) -> int:
        return len(self.calls)


@pytest.fixture
def notifier() -> InMemoryNotifier:
    return InMemoryNotifier()


@pytest.fixture
def job_store(notifier) -> InMemoryJobStore:
    return InMemoryJobStore(notifier=notifier)


@pytest.fixture
def registry() -> ToolRegistry:
    return ToolRegistry()


@pytest.fixture
def dispatcher(registry, job_store) -> ToolDispatcher:
    return ToolDispatcher(registry, job_store)


@pytest.fixture
def context() -> ExecutionContext:
    return ExecutionContext(session_id="test-session")


@pytest.fixture
def add_tool(registry) -> Callable[..., RecordingTool]:
    """Register a :class:`RecordingTool` under ``name`` and return it."""

    def _add(
        name: str,
        schema: type = MessageInput,
        supports_async: bool = False,
        **kwargs: Any,
    ) -> RecordingTool:
        tool = RecordingTool(**kwargs)
        registry.register(
            ToolDefinition(
                name=name,
                description=f"{name} test tool",
                input_schema=schema,
                execute=tool,
                supports_async=supports_async,
            )
        )
        return tool

    return _add
