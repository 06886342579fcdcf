"""Graph execution engine for toolflow workflows."""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Any, Dict, List, Mapping, Optional, Set, Tuple

from ..constants import ASYNC_FLAG, JOB_RESULT_TOOL, WORKFLOW_JOB_PREFIX
from ..contracts import ContentBlock, ExecutionContext, ToolResult
from ..dispatch import ToolDispatcher
from ..errors import (
    TemplateResolutionError,
    ToolflowError,
    ValidationError,
    WorkflowConfigError,
)
from ..jobs import JobStatus, JobStore
from ..notices import build_async_notice
from ..registry import ToolRegistry
from .models import StepError, Workflow, WorkflowResult, WorkflowStep
from .templating import resolve_params, resolve_value

logger = logging.getLogger(__name__)


def validate_workflow(workflow: Workflow, registry: ToolRegistry) -> None:
    """Raise :class:`WorkflowConfigError` if ``workflow`` cannot run.

    Dangling ``startAt``/``next``/``onError`` ids and tools missing from
    ``registry`` are both rejected.
    """
    workflow.validate_graph()
    missing = sorted(
        {step.tool for step in workflow.steps.values()} - set(registry.names())
    )
    if missing:
        raise WorkflowConfigError(
            f"Workflow '{workflow.id}' references unregistered tools: "
            + ", ".join(missing),
            {"workflow_id": workflow.id, "tools": missing},
        )


class _RunState:
    """Mutable bookkeeping for one workflow run.

    Branches running concurrently only touch it while holding ``lock``.
    """

    def __init__(self, initial_input: Mapping[str, Any]) -> None:
        self.lock = asyncio.Lock()
        self.visited: Set[str] = set()
        self.executed: List[str] = []
        self.step_results: Dict[str, ToolResult] = {}
        self.failures: List[StepError] = []
        self.terminal: List[Tuple[str, ToolResult]] = []
        self.scope: Dict[str, Any] = {
            "workflow": {"input": dict(initial_input)},
            "steps": {},
        }


class WorkflowEngine:
    """Runs workflows one step at a time through a :class:`ToolDispatcher`.

    Each step id executes at most once per run, so a cyclic graph still
    terminates. Sibling successors run concurrently, each with its own copy of
    the inherited context.
    """

    def __init__(
        self, dispatcher: ToolDispatcher, job_store: Optional[JobStore] = None
    ) -> None:
        self._dispatcher = dispatcher
        self._job_store = job_store or dispatcher.job_store

    def validate(self, workflow: Workflow) -> None:
        """Check graph integrity and tool availability before running."""
        validate_workflow(workflow, self._dispatcher.registry)

    async def run(
        self,
        workflow: Workflow,
        initial_input: Optional[Mapping[str, Any]] = None,
        context: Optional[ExecutionContext] = None,
    ) -> WorkflowResult:
        """Execute ``workflow`` to completion and aggregate the outcome.

        Raises:
            WorkflowConfigError: If the graph is invalid; no step runs.
        """
        self.validate(workflow)
        initial_input = dict(initial_input or {})
        context = context or ExecutionContext(session_id=str(uuid.uuid4()))
        state = _RunState(initial_input)

        logger.info(
            f"Starting workflow {workflow.id} at step {workflow.start_at} "
            f"for session_id={context.session_id}"
        )
        await self._run_branch(workflow, workflow.start_at, initial_input, state, context)
        result = self._aggregate(workflow, state)
        if result.success:
            logger.info(f"Workflow {workflow.id} completed successfully")
        else:
            logger.warning(result.message)
        return result

    async def submit(
        self,
        workflow: Workflow,
        initial_input: Optional[Mapping[str, Any]] = None,
        context: Optional[ExecutionContext] = None,
    ) -> ToolResult:
        """Run ``workflow`` in the background as a single job.

        Returns immediately with an async notice; the job is updated once the
        whole traversal has finished.
        """
        self.validate(workflow)
        initial_input = dict(initial_input or {})
        context = context or ExecutionContext(session_id=str(uuid.uuid4()))
        job_id = await self._job_store.create_job(
            {"workflowId": workflow.id, "input": initial_input},
            tool_name=f"{WORKFLOW_JOB_PREFIX}{workflow.id}",
        )
        notice = build_async_notice(
            job_id,
            f"{WORKFLOW_JOB_PREFIX}{workflow.id}",
            retrieval_tool_name=JOB_RESULT_TOOL,
        )
        self._dispatcher.spawn(
            self._run_job(job_id, workflow, initial_input, context.for_job(job_id))
        )
        logger.info(f"Scheduled workflow {workflow.id} as job_id={job_id}")
        return ToolResult(
            content=[ContentBlock(text=notice.message)],
            metadata={
                "jobId": job_id,
                "workflowId": workflow.id,
                "retrieval": notice.retrieval.model_dump(),
            },
        )

    # ------------------------------------------------------------------
    async def _run_job(
        self,
        job_id: str,
        workflow: Workflow,
        initial_input: Dict[str, Any],
        context: ExecutionContext,
    ) -> None:
        if not await self._job_store.update_status(job_id, JobStatus.PROCESSING):
            logger.error(f"Failed to mark job_id={job_id} PROCESSING (job not found?)")
            return
        try:
            result = await self.run(workflow, initial_input, context)
        except Exception as e:
            logger.error(f"Workflow {workflow.id} crashed in job_id={job_id}: {e}")
            await self._job_store.update_status(job_id, JobStatus.FAILED, error=str(e))
            return

        if result.success:
            await self._job_store.update_status(
                job_id, JobStatus.COMPLETED, result=result.to_tool_result().to_json()
            )
        else:
            await self._job_store.update_status(
                job_id, JobStatus.FAILED, error=result.message
            )

    async def _run_branch(
        self,
        workflow: Workflow,
        step_id: str,
        inherited: Dict[str, Any],
        state: _RunState,
        context: ExecutionContext,
    ) -> bool:
        """Run ``step_id`` and its successors; ``False`` if already visited."""
        async with state.lock:
            if step_id in state.visited:
                logger.debug(
                    f"Step {step_id} already visited in workflow {workflow.id}; "
                    "stopping branch"
                )
                return False
            state.visited.add(step_id)
            state.executed.append(step_id)

        step = workflow.step(step_id)
        result = await self._execute_step(workflow, step, inherited, state, context)

        async with state.lock:
            state.step_results[step.id] = result
            state.scope["steps"][step.id] = {"output": result.model_dump(by_alias=True)}

            if result.is_error:
                successors = step.on_error
                branch_context = inherited
                if not successors:
                    state.failures.append(
                        StepError(
                            step_id=step.id,
                            tool=step.tool,
                            message=result.joined_text(),
                            details=result.error_details,
                        )
                    )
                    return True
                logger.info(
                    f"Step {step.id} failed; routing to error handlers {successors}"
                )
            else:
                successors = step.next
                branch_context = {**inherited, **self._step_output(result)}
                if not successors:
                    state.terminal.append((step.id, result))
                    return True

        ran = await asyncio.gather(
            *(
                self._run_branch(workflow, target, dict(branch_context), state, context)
                for target in successors
            )
        )
        if result.is_error and not any(ran):
            logger.warning(
                f"Error handlers {successors} of step {step.id} were already visited"
            )
            async with state.lock:
                state.failures.append(
                    StepError(
                        step_id=step.id,
                        tool=step.tool,
                        message=result.joined_text(),
                        details=result.error_details,
                    )
                )
        return True

    async def _execute_step(
        self,
        workflow: Workflow,
        step: WorkflowStep,
        inherited: Mapping[str, Any],
        state: _RunState,
        context: ExecutionContext,
    ) -> ToolResult:
        logger.info(f"Executing workflow {workflow.id} step {step.id} ({step.tool})")
        try:
            tool = self._dispatcher.registry.lookup(step.tool)
            accepted = set()
            for name, field in tool.input_schema.model_fields.items():
                accepted.add(name)
                if field.alias:
                    accepted.add(field.alias)
            params = {k: v for k, v in inherited.items() if k in accepted}
            params.update(resolve_params(step.params, state.scope))
            params.pop(ASYNC_FLAG, None)
            return await self._dispatcher.dispatch(
                step.tool, params, context.for_step(workflow.id, step.id)
            )
        except ToolflowError as e:
            logger.warning(f"Step {step.id} of workflow {workflow.id} failed: {e.message}")
            details: Dict[str, Any] = {"type": type(e).__name__, "message": e.message}
            if isinstance(e, ValidationError):
                details["issues"] = e.issues
            return ToolResult.error(e.message, details=details)

    @staticmethod
    def _step_output(result: ToolResult) -> Dict[str, Any]:
        output = (result.metadata or {}).get("output")
        return dict(output) if isinstance(output, Mapping) else {}

    @staticmethod
    def _aggregate(workflow: Workflow, state: _RunState) -> WorkflowResult:
        label = workflow.name or workflow.id
        if state.failures:
            error = state.failures[0]
            return WorkflowResult(
                workflow_id=workflow.id,
                success=False,
                message=(
                    f'Workflow "{label}" failed at step {error.step_id} '
                    f"({error.tool}): {error.message}"
                ),
                output=state.step_results.get(error.step_id),
                error=error,
                step_results=dict(state.step_results),
                executed=list(state.executed),
            )

        if state.terminal:
            output = state.terminal[-1][1]
        else:
            output = state.step_results.get(state.executed[-1])
        return WorkflowResult(
            workflow_id=workflow.id,
            success=True,
            message=f'Workflow "{label}" completed successfully.',
            output=output,
            step_results=dict(state.step_results),
            executed=list(state.executed),
            outputs=WorkflowEngine._resolve_outputs(workflow, state),
        )

    @staticmethod
    def _resolve_outputs(workflow: Workflow, state: _RunState) -> Dict[str, Any]:
        outputs: Dict[str, Any] = {}
        for key, template in workflow.output.items():
            try:
                outputs[key] = resolve_value(template, state.scope)
            except TemplateResolutionError as e:
                logger.warning(
                    f"Workflow {workflow.id} output '{key}' could not be resolved: "
                    f"{e.message}"
                )
                outputs[key] = f"Error: Failed to resolve output template: {e.message}"
        return outputs
