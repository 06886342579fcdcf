"""Tools that report the status or result of background jobs."""

from __future__ import annotations

import logging
from typing import Any, List, Mapping

import pydantic
from pydantic import ConfigDict, Field

from ..constants import JOB_RESULT_TOOL
from ..contracts import ExecutionContext, ToolInput, ToolResult
from ..jobs import JobStatus, JobStore
from ..notices import retrieval_tool_for
from ..registry import ToolDefinition, ToolRegistry

logger = logging.getLogger(__name__)


class JobResultInput(ToolInput):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    job_id: str = Field(alias="jobId", min_length=1)


def make_job_result_tool(
    job_store: JobStore, name: str = JOB_RESULT_TOOL
) -> ToolDefinition:
    """Build a retrieval tool bound to ``job_store``."""

    async def retrieve_job_result(
        params: JobResultInput,
        config: Mapping[str, Any],
        context: ExecutionContext,
    ) -> ToolResult:
        job_id = params.job_id
        job = await job_store.get_job(job_id)
        if job is None:
            logger.warning(f"Job not found job_id={job_id}")
            message = f'Job with ID "{job_id}" not found.'
            return ToolResult.error(
                message, details={"type": "JobNotFoundError", "message": message}
            )

        meta = {"jobId": job_id, "status": job.status.value}
        if job.status == JobStatus.PENDING:
            return ToolResult.text(f'Job "{job_id}" is currently pending.', **meta)
        if job.status == JobStatus.PROCESSING:
            return ToolResult.text(f'Job "{job_id}" is currently processing.', **meta)

        if job.status == JobStatus.FAILED:
            logger.info(f"Job job_id={job_id} failed: {job.error}")
            return ToolResult.error(
                f'Job "{job_id}" failed: {job.error or "Unknown error"}',
                details={"type": "JobFailedError", "message": job.error},
                **meta,
            )

        if job.result is None:
            logger.error(f"Completed job job_id={job_id} has no result stored")
            message = f'Job "{job_id}" is completed but has no result stored.'
            return ToolResult.error(
                message, details={"type": "MissingJobResultError", "message": message}, **meta
            )
        try:
            stored = ToolResult.from_json(job.result)
        except pydantic.ValidationError:
            stored = ToolResult.text(job.result)
        return stored.model_copy(update={"metadata": {**(stored.metadata or {}), **meta}})

    return ToolDefinition(
        name=name,
        description="Checks the status or gets results from a background job.",
        input_schema=JobResultInput,
        execute=retrieve_job_result,
    )


def register_job_result_tools(registry: ToolRegistry, job_store: JobStore) -> List[str]:
    """Register the generic retriever plus a ``<tool>-job-result`` alias for
    every async-capable tool that does not already have one.

    Returns the names that were added.
    """
    added: List[str] = []
    if JOB_RESULT_TOOL not in registry:
        registry.register(make_job_result_tool(job_store))
        added.append(JOB_RESULT_TOOL)
    for tool in registry.list():
        if not tool.supports_async:
            continue
        alias = retrieval_tool_for(tool.name)
        if alias not in registry:
            registry.register(make_job_result_tool(job_store, name=alias))
            added.append(alias)
    logger.debug(f"Registered job result tools: {added}")
    return added
