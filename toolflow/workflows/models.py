"""Workflow graph definitions and run results."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..contracts import ToolResult
from ..errors import WorkflowConfigError


class WorkflowStep(BaseModel):
    """One node of a workflow graph."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str = ""
    tool: str
    params: Dict[str, Any] = Field(default_factory=dict)
    next: List[str] = Field(default_factory=list)
    on_error: List[str] = Field(default_factory=list, alias="onError")

    @field_validator("next", "on_error", mode="before")
    @classmethod
    def _none_is_empty(cls, v: Any) -> Any:
        return [] if v is None else v


class Workflow(BaseModel):
    """Named directed graph of tool invocations."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str = ""
    description: str = ""
    start_at: str = Field(alias="startAt")
    steps: Dict[str, WorkflowStep] = Field(default_factory=dict)
    output: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("steps", mode="before")
    @classmethod
    def _index_steps(cls, v: Any) -> Any:
        """Accept the list form used by definition files."""
        if not isinstance(v, list):
            return v
        indexed: Dict[str, Any] = {}
        for raw in v:
            step_id = raw.id if isinstance(raw, WorkflowStep) else raw.get("id")
            if step_id in indexed:
                raise ValueError(f"duplicate step id '{step_id}'")
            indexed[step_id] = raw
        return indexed

    def step(self, step_id: str) -> WorkflowStep:
        return self.steps[step_id]

    def validate_graph(self) -> None:
        """Raise :class:`WorkflowConfigError` on dangling references."""
        problems: List[str] = []
        for key, step in self.steps.items():
            if key != step.id:
                problems.append(f"step keyed '{key}' declares id '{step.id}'")
        if self.start_at not in self.steps:
            problems.append(f"startAt references unknown step '{self.start_at}'")
        for step in self.steps.values():
            for target in step.next:
                if target not in self.steps:
                    problems.append(f"step '{step.id}' next references unknown step '{target}'")
            for target in step.on_error:
                if target not in self.steps:
                    problems.append(
                        f"step '{step.id}' onError references unknown step '{target}'"
                    )
        if problems:
            raise WorkflowConfigError(
                f"Workflow '{self.id}' is invalid: " + "; ".join(problems),
                {"workflow_id": self.id, "problems": problems},
            )


class StepError(BaseModel):
    """First unrecovered failure of a workflow run."""

    step_id: str
    tool: str
    message: str
    details: Optional[Any] = None


class WorkflowResult(BaseModel):
    """Aggregated outcome of one workflow run."""

    workflow_id: str
    success: bool
    message: str
    output: Optional[ToolResult] = None
    error: Optional[StepError] = None
    step_results: Dict[str, ToolResult] = Field(default_factory=dict)
    executed: List[str] = Field(default_factory=list)
    outputs: Dict[str, Any] = Field(default_factory=dict)

    def to_tool_result(self) -> ToolResult:
        """Summarize the run as a tool result."""
        if self.success:
            text = self.output.joined_text() if self.output else self.message
            extra = {"outputs": dict(self.outputs)} if self.outputs else {}
            return ToolResult.text(
                text,
                workflowId=self.workflow_id,
                executed=list(self.executed),
                **extra,
            )
        return ToolResult.error(
            self.message,
            details=self.error.model_dump() if self.error else None,
            workflowId=self.workflow_id,
            executed=list(self.executed),
        )

    def to_json(self) -> str:
        return json.dumps(self.model_dump(by_alias=True), default=str)
