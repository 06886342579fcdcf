"""Command line interface for calling tools and running workflows."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import typer

from toolflow.config import load_config
from toolflow.contracts import ExecutionContext, ToolResult
from toolflow.errors import ToolflowError, ValidationError
from toolflow.runtime import Runtime, build_runtime
from toolflow.workflows import WorkflowEngine, load_workflows

app = typer.Typer(help="CLI for toolflow tools and workflows")

tools_app = typer.Typer(help="Commands for registered tools")
workflow_app = typer.Typer(help="Commands for workflow definition files")

app.add_typer(tools_app, name="tools")
app.add_typer(workflow_app, name="workflow")


@app.callback()
def main(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Path to a toolflow YAML config file"
    ),
) -> None:
    """toolflow CLI entry point."""
    loaded = load_config(str(config) if config else None)
    logging.basicConfig(
        level=getattr(logging, loaded.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = loaded


def _runtime(ctx: typer.Context) -> Runtime:
    try:
        return build_runtime(ctx.obj)
    except ToolflowError as e:
        typer.secho(f"Failed to start: {e.message}", fg=typer.colors.RED)
        raise typer.Exit(code=1)


def _parse_json_option(value: Optional[str], option: str) -> Dict[str, Any]:
    if not value:
        return {}
    try:
        data = json.loads(value)
    except json.JSONDecodeError as e:
        typer.secho(f"{option} is not valid JSON: {e}", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    if not isinstance(data, dict):
        typer.secho(f"{option} must be a JSON object", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    return data


def _echo_result(result: ToolResult) -> None:
    color = typer.colors.RED if result.is_error else None
    typer.secho(result.joined_text(), fg=color)
    if result.metadata:
        typer.echo(f"Metadata: {json.dumps(result.metadata, default=str)}")


@tools_app.command("list")
def tools_list(ctx: typer.Context) -> None:
    """
    List registered tools with their descriptions.

    Example:
        toolflow tools list
        # Output: job-result-retriever - Checks the status or gets results from a background job.
    """
    runtime = _runtime(ctx)
    for tool in runtime.registry.list():
        suffix = " [async]" if tool.supports_async else ""
        typer.echo(f"{tool.name}{suffix} - {tool.description}")


@tools_app.command("call")
def tools_call(
    ctx: typer.Context,
    name: str,
    params: Optional[str] = typer.Option(None, help="JSON object of tool params"),
    run_async: bool = typer.Option(
        False, "--async", help="Run the tool as a background job"
    ),
    wait: bool = typer.Option(
        True, help="With --async, wait for the job and print its final record"
    ),
    session_id: str = typer.Option("cli", help="Session id passed to the tool"),
) -> None:
    """
    Dispatch a single tool call.

    Jobs live in memory only, so background jobs are awaited before the
    process exits unless --no-wait is given.

    Example:
        toolflow tools call workflow-runner --params '{"workflowName": "docs"}'
        toolflow tools call workflow-runner --params '{"workflowName": "docs"}' --async
    """
    runtime = _runtime(ctx)
    payload = _parse_json_option(params, "--params")
    if run_async:
        payload["async"] = True

    async def _call() -> None:
        try:
            result = await runtime.dispatcher.dispatch(
                name, payload, ExecutionContext(session_id=session_id)
            )
        except ValidationError as e:
            typer.secho(e.message, fg=typer.colors.RED)
            for issue in e.issues:
                loc = ".".join(str(part) for part in issue["loc"])
                typer.secho(f"  {loc}: {issue['msg']}", fg=typer.colors.RED)
            raise typer.Exit(code=1)
        except ToolflowError as e:
            typer.secho(e.message, fg=typer.colors.RED)
            raise typer.Exit(code=1)

        _echo_result(result)
        job_id = (result.metadata or {}).get("jobId")
        if run_async and job_id and wait:
            await runtime.dispatcher.wait_for_pending()
            job = await runtime.job_store.get_job(job_id)
            typer.echo(f"Job {job_id}: {job.status.value}")
            if job.result is not None:
                typer.echo(job.result)
            if job.error is not None:
                typer.secho(job.error, fg=typer.colors.RED)
        await runtime.shutdown()
        if result.is_error:
            raise typer.Exit(code=1)

    asyncio.run(_call())


@workflow_app.command("validate")
def workflow_validate(ctx: typer.Context, path: Path) -> None:
    """
    Check a workflow definition file without running it.

    Verifies that every step id referenced by startAt, next and onError exists
    and that every tool is registered.

    Example:
        toolflow workflow validate ./workflows/docs.yaml
        # Output: docs: OK (3 steps)
    """
    runtime = _runtime(ctx)
    try:
        workflows = load_workflows(path)
    except ToolflowError as e:
        typer.secho(e.message, fg=typer.colors.RED)
        raise typer.Exit(code=1)

    failed = False
    for workflow in workflows:
        try:
            runtime.engine.validate(workflow)
        except ToolflowError as e:
            typer.secho(f"{workflow.id}: {e.message}", fg=typer.colors.RED)
            failed = True
            continue
        typer.echo(f"{workflow.id}: OK ({len(workflow.steps)} steps)")
    if failed:
        raise typer.Exit(code=1)


@workflow_app.command("run")
def workflow_run(
    ctx: typer.Context,
    path: Path,
    workflow_id: Optional[str] = typer.Option(
        None, "--workflow", help="Workflow id when the file defines several"
    ),
    input: Optional[str] = typer.Option(None, help="JSON object of workflow input"),
    session_id: str = typer.Option("cli", help="Session id passed to every step"),
) -> None:
    """
    Run a workflow from a definition file and print its outcome.

    Example:
        toolflow workflow run ./workflows/docs.yaml --input '{"topic": "billing"}'
        # Output: Workflow "docs" completed successfully.
        #         Executed: draft -> review
    """
    runtime = _runtime(ctx)
    initial_input = _parse_json_option(input, "--input")
    try:
        workflows = load_workflows(path)
    except ToolflowError as e:
        typer.secho(e.message, fg=typer.colors.RED)
        raise typer.Exit(code=1)

    if workflow_id is None:
        if len(workflows) != 1:
            typer.secho(
                "File defines several workflows; pick one with --workflow",
                fg=typer.colors.RED,
            )
            raise typer.Exit(code=1)
        workflow = workflows[0]
    else:
        workflow = next((w for w in workflows if w.id == workflow_id), None)
        if workflow is None:
            typer.secho(f"Workflow not found: {workflow_id}", fg=typer.colors.RED)
            raise typer.Exit(code=1)

    engine: WorkflowEngine = runtime.engine

    async def _run() -> bool:
        try:
            result = await engine.run(
                workflow, initial_input, ExecutionContext(session_id=session_id)
            )
        except ToolflowError as e:
            typer.secho(e.message, fg=typer.colors.RED)
            return False
        finally:
            await runtime.shutdown()
        typer.secho(result.message, fg=None if result.success else typer.colors.RED)
        typer.echo(f"Executed: {' -> '.join(result.executed)}")
        if result.output is not None:
            typer.echo(result.output.joined_text())
        return result.success

    if not asyncio.run(_run()):
        raise typer.Exit(code=1)


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    app()
