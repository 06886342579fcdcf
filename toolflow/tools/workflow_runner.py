"""Tool exposing catalog workflows through the dispatcher."""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping

from pydantic import ConfigDict, Field

from ..constants import WORKFLOW_RUNNER_TOOL
from ..contracts import ExecutionContext, ToolInput, ToolResult
from ..handlers import BaseHandler
from ..workflows import WorkflowCatalog, WorkflowEngine

logger = logging.getLogger(__name__)


class WorkflowRunnerInput(ToolInput):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    workflow_name: str = Field(alias="workflowName", min_length=1)
    input: Dict[str, Any] = Field(default_factory=dict)


class WorkflowRunnerHandler(BaseHandler):
    """Runs a sequence of automated tasks (workflow)."""

    name = WORKFLOW_RUNNER_TOOL
    description = "Runs a sequence of automated tasks (workflow) (runs in background)."
    input_schema = WorkflowRunnerInput
    supports_async = True

    def __init__(self, engine: WorkflowEngine, catalog: WorkflowCatalog) -> None:
        self._engine = engine
        self._catalog = catalog

    async def execute(
        self,
        params: WorkflowRunnerInput,
        config: Mapping[str, Any],
        context: ExecutionContext,
    ) -> ToolResult:
        workflow = self._catalog.get(params.workflow_name)
        if workflow is None:
            message = f'Workflow "{params.workflow_name}" not found.'
            logger.warning(message)
            return ToolResult.error(
                message, details={"type": "WorkflowNotFound", "message": message}
            )
        result = await self._engine.run(workflow, params.input, context)
        return result.to_tool_result()
