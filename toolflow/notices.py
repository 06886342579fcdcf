"""Standard messages returned when a call is deferred to a background job."""

from __future__ import annotations

import json
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, Field

from .constants import JOB_RESULT_SUFFIX


class RetrievalPrompt(BaseModel):
    """Payload the caller re-submits to fetch the job's status or result."""

    tool_name: str
    arguments: Dict[str, Any] = Field(default_factory=dict)


class AsyncNotice(BaseModel):
    job_id: str
    message: str
    retrieval: RetrievalPrompt


def retrieval_tool_for(tool_name: str) -> str:
    """Name of the conventional result tool for ``tool_name``."""
    return f"{tool_name}{JOB_RESULT_SUFFIX}"


def build_async_notice(
    job_id: str,
    tool_name: str,
    retrieval_tool_name: Optional[str] = None,
    extra_context: Optional[Mapping[str, Any]] = None,
    custom_instruction: Optional[str] = None,
) -> AsyncNotice:
    """Build the "job accepted" message for ``job_id``.

    The message embeds a fenced JSON block with the retrieval prompt so a
    client can echo it back verbatim.
    """
    retrieval = RetrievalPrompt(
        tool_name=retrieval_tool_name or retrieval_tool_for(tool_name),
        arguments={"jobId": job_id, **(extra_context or {})},
    )
    instruction = (
        custom_instruction
        or "To check the status or result of this job, send the following prompt:"
    )
    message = "\n".join(
        [
            "Your request has been received and is being processed as an async job.",
            f"\nJob ID: {job_id}",
            "\nPlease wait a moment for the task to complete before attempting "
            "to retrieve the job result.",
            f"\n{instruction}",
            "```json",
            json.dumps(retrieval.model_dump(), indent=2),
            "```",
            "\nYou can use this prompt in the assistant, API, or Studio to "
            "retrieve your job's status or result.",
        ]
    )
    return AsyncNotice(job_id=job_id, message=message, retrieval=retrieval)
