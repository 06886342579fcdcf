"""Core contracts shared by tools, the dispatcher and the workflow engine."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ToolInput(BaseModel):
    """Base for tool input schemas; unknown keys are rejected."""

    model_config = ConfigDict(extra="forbid")


class ContentBlock(BaseModel):
    """One typed chunk of tool output."""

    type: str = "text"
    text: str


class ToolResult(BaseModel):
    """Output of a tool execution."""

    model_config = ConfigDict(populate_by_name=True)

    content: List[ContentBlock] = Field(default_factory=list)
    is_error: bool = Field(default=False, alias="isError")
    error_details: Optional[Any] = Field(default=None, alias="errorDetails")
    metadata: Optional[Dict[str, Any]] = None

    @classmethod
    def text(cls, text: str, **metadata: Any) -> "ToolResult":
        """Build a successful single-block text result."""
        return cls(content=[ContentBlock(text=text)], metadata=metadata or None)

    @classmethod
    def error(
        cls, text: str, details: Any = None, **metadata: Any
    ) -> "ToolResult":
        """Build an error result."""
        return cls(
            content=[ContentBlock(type="text", text=text)],
            is_error=True,
            error_details=details,
            metadata=metadata or None,
        )

    def joined_text(self, separator: str = "\n") -> str:
        """Concatenate the text of every content block."""
        return separator.join(block.text for block in self.content)

    def to_json(self) -> str:
        """Serialize result to JSON using the wire field names.

        Values JSON cannot represent (exceptions in ``error_details`` and the
        like) are written as their ``str()``.
        """
        return json.dumps(self.model_dump(by_alias=True, exclude_none=True), default=str)

    @classmethod
    def from_json(cls, data: str) -> "ToolResult":
        """Deserialize result from JSON."""
        return cls.model_validate_json(data)


class ExecutionContext(BaseModel):
    """Context passed alongside validated params to every execute call."""

    model_config = ConfigDict(extra="allow")

    session_id: str
    job_id: Optional[str] = None
    user_id: Optional[str] = None
    workflow_id: Optional[str] = None
    step_id: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

    def for_job(self, job_id: str) -> "ExecutionContext":
        """Return a copy bound to ``job_id``."""
        return self.model_copy(update={"job_id": job_id})

    def for_step(self, workflow_id: str, step_id: str) -> "ExecutionContext":
        """Return a copy bound to a workflow step."""
        return self.model_copy(update={"workflow_id": workflow_id, "step_id": step_id})
