"""Validate-then-execute dispatch of registered tools."""

from __future__ import annotations

import asyncio
import inspect
import logging
import uuid
from typing import Any, Coroutine, Dict, Mapping, Optional, Set

import pydantic
from pydantic import BaseModel

from .config import DispatchConfig
from .constants import ASYNC_FLAG
from .contracts import ContentBlock, ExecutionContext, ToolResult
from .errors import ExecutionError, ValidationError
from .jobs import JobStatus, JobStore
from .notices import build_async_notice
from .registry import ToolDefinition, ToolRegistry

logger = logging.getLogger(__name__)


def _error_result(error: ExecutionError) -> ToolResult:
    details: Dict[str, Any] = {"type": type(error).__name__, "message": error.message}
    if error.cause is not None:
        details["cause"] = type(error.cause).__name__
    return ToolResult.error(error.message, details=details)


class ToolDispatcher:
    """Uniform entry point for invoking tools.

    Tool failures never escape :meth:`dispatch`; they come back as results
    with ``is_error`` set. Lookup and validation problems raise.
    """

    def __init__(
        self,
        registry: ToolRegistry,
        job_store: JobStore,
        config: Optional[DispatchConfig] = None,
        tool_config: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self._registry = registry
        self._job_store = job_store
        self._config = config or DispatchConfig()
        self._tool_config: Mapping[str, Any] = dict(tool_config or {})
        self._tasks: Set[asyncio.Task] = set()

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    @property
    def job_store(self) -> JobStore:
        return self._job_store

    def validate(self, tool: ToolDefinition, params: Mapping[str, Any]) -> BaseModel:
        """Validate ``params`` against the tool's input schema."""
        try:
            return tool.input_schema.model_validate(dict(params))
        except pydantic.ValidationError as e:
            issues = [
                {"loc": list(err["loc"]), "msg": err["msg"], "type": err["type"]}
                for err in e.errors(include_url=False)
            ]
            raise ValidationError(tool.name, issues, dict(params)) from e

    async def dispatch(
        self,
        tool_name: str,
        params: Optional[Mapping[str, Any]] = None,
        context: Optional[ExecutionContext] = None,
    ) -> ToolResult:
        """Dispatch ``tool_name`` with ``params``.

        Args:
            tool_name: Registered tool name.
            params: Raw parameters. ``{"async": True}`` requests background
                execution for tools that support it.
            context: Execution context; a fresh session is used when omitted.

        Returns:
            The tool's result, or an async notice result carrying ``jobId``.

        Raises:
            ToolNotFoundError: If no tool is registered under ``tool_name``.
            ValidationError: If ``params`` do not match the input schema.
        """
        tool = self._registry.lookup(tool_name)
        raw = dict(params or {})
        run_async = raw.pop(ASYNC_FLAG, False) is True
        validated = self.validate(tool, raw)
        context = context or ExecutionContext(session_id=str(uuid.uuid4()))

        if run_async:
            if tool.supports_async:
                return await self._submit(tool, validated, context)
            logger.debug(f"Tool {tool.name} does not support async; running inline")

        return await self.execute(tool, validated, context)

    async def execute(
        self, tool: ToolDefinition, params: BaseModel, context: ExecutionContext
    ) -> ToolResult:
        """Run an already validated call and capture any failure as data."""
        logger.debug(f"Executing tool {tool.name} for session_id={context.session_id}")
        try:
            if self._config.timeout_seconds is not None:
                raw = await asyncio.wait_for(
                    self._invoke(tool, params, context), self._config.timeout_seconds
                )
            else:
                raw = await self._invoke(tool, params, context)
        except asyncio.TimeoutError as e:
            logger.error(f"Tool {tool.name} timed out after {self._config.timeout_seconds}s")
            return _error_result(
                ExecutionError(
                    tool.name,
                    f"Tool '{tool.name}' timed out after {self._config.timeout_seconds} seconds.",
                    e,
                )
            )
        except Exception as e:
            logger.error(f"Tool {tool.name} execution failed: {e}")
            return _error_result(
                ExecutionError(
                    tool.name, f"Tool '{tool.name}' encountered an error: {e}", e
                )
            )

        result = self._coerce_result(raw)
        if result is None:
            logger.warning(f"Tool {tool.name} returned empty or invalid result content")
            return _error_result(
                ExecutionError(
                    tool.name,
                    f"Tool '{tool.name}' returned empty or invalid result content.",
                )
            )
        return result

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        """Schedule ``coro`` in the background and keep a reference to it."""
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    async def wait_for_pending(self) -> None:
        """Wait until every background job scheduled so far has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    @property
    def pending_count(self) -> int:
        return len(self._tasks)

    # ------------------------------------------------------------------
    async def _invoke(
        self, tool: ToolDefinition, params: BaseModel, context: ExecutionContext
    ) -> Any:
        if inspect.iscoroutinefunction(tool.execute):
            return await tool.execute(params, self._tool_config, context)
        value = await asyncio.to_thread(tool.execute, params, self._tool_config, context)
        if inspect.isawaitable(value):
            value = await value
        return value

    @staticmethod
    def _coerce_result(raw: Any) -> Optional[ToolResult]:
        if isinstance(raw, Mapping):
            try:
                raw = ToolResult.model_validate(raw)
            except pydantic.ValidationError:
                return None
        if not isinstance(raw, ToolResult) or not raw.content:
            return None
        return raw

    async def _submit(
        self, tool: ToolDefinition, params: BaseModel, context: ExecutionContext
    ) -> ToolResult:
        job_id = await self._job_store.create_job(
            params.model_dump(mode="json"), tool_name=tool.name
        )
        notice = build_async_notice(job_id, tool.name)
        self.spawn(self._run_job(job_id, tool, params, context.for_job(job_id)))
        logger.info(f"Scheduled tool {tool.name} as job_id={job_id}")
        return ToolResult(
            content=[ContentBlock(text=notice.message)],
            metadata={"jobId": job_id, "retrieval": notice.retrieval.model_dump()},
        )

    async def _run_job(
        self,
        job_id: str,
        tool: ToolDefinition,
        params: BaseModel,
        context: ExecutionContext,
    ) -> None:
        if not await self._job_store.update_status(job_id, JobStatus.PROCESSING):
            logger.error(f"Failed to mark job_id={job_id} PROCESSING (job not found?)")
            return

        result = await self.execute(tool, params, context)
        if result.is_error:
            updated = await self._job_store.update_status(
                job_id, JobStatus.FAILED, error=result.joined_text()
            )
        else:
            updated = await self._job_store.update_status(
                job_id, JobStatus.COMPLETED, result=result.to_json()
            )
        if not updated:
            logger.error(f"Failed to record outcome for job_id={job_id} (job not found?)")
        else:
            logger.info(f"Job job_id={job_id} finished for tool {tool.name}")

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"Background job task failed: {exc!r}")
