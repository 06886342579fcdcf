"""Tool dispatch tests: validation, execution capture and async jobs."""

import asyncio
import json

import pytest

from toolflow import ToolDefinition, ToolDispatcher, ToolInput, ToolResult
from toolflow.config import DispatchConfig
from toolflow.errors import ToolNotFoundError, ValidationError
from toolflow.jobs import JobStatus


class MessageInput(ToolInput):
    message: str = "ok"


@pytest.mark.asyncio
async def test_sync_dispatch_returns_tool_result(dispatcher, add_tool, context):
    tool = add_tool("echo", text="hello")

    result = await dispatcher.dispatch("echo", {"message": "hi"}, context)

    assert result.is_error is False
    assert result.joined_text() == "hello"
    assert tool.call_count == 1
    params, config, call_context = tool.calls[0]
    assert params.message == "hi"
    assert call_context.session_id == "test-session"


@pytest.mark.asyncio
async def test_invalid_params_never_reach_execute(dispatcher, add_tool, context):
    tool = add_tool("echo")

    with pytest.raises(ValidationError) as exc_info:
        await dispatcher.dispatch("echo", {"message": 42, "extra": True}, context)

    assert tool.call_count == 0
    issues = exc_info.value.issues
    assert {tuple(issue["loc"]) for issue in issues} == {("message",), ("extra",)}


@pytest.mark.asyncio
async def test_unknown_tool_raises_without_creating_job(dispatcher, job_store):
    with pytest.raises(ToolNotFoundError):
        await dispatcher.dispatch("ghost", {"async": True})
    assert await job_store.list_jobs() == []


@pytest.mark.asyncio
async def test_raising_tool_becomes_error_result(dispatcher, add_tool, context):
    add_tool("boom", raises=RuntimeError("kaput"))

    result = await dispatcher.dispatch("boom", {}, context)

    assert result.is_error is True
    assert "kaput" in result.joined_text()
    assert result.error_details == {
        "type": "ExecutionError",
        "message": "Tool 'boom' encountered an error: kaput",
        "cause": "RuntimeError",
    }


@pytest.mark.asyncio
async def test_empty_result_is_an_error(registry, dispatcher, context):
    async def empty(params, config, ctx):
        return ToolResult()

    registry.register(ToolDefinition(name="empty", input_schema=MessageInput, execute=empty))
    result = await dispatcher.dispatch("empty", {}, context)

    assert result.is_error is True
    assert "empty or invalid" in result.joined_text()


@pytest.mark.asyncio
async def test_plain_function_and_dict_results(registry, dispatcher, context):
    def sync_tool(params, config, ctx):
        return {"content": [{"type": "text", "text": f"sync {params.message}"}]}

    registry.register(
        ToolDefinition(name="sync", input_schema=MessageInput, execute=sync_tool)
    )
    result = await dispatcher.dispatch("sync", {"message": "call"}, context)

    assert result.is_error is False
    assert result.joined_text() == "sync call"


@pytest.mark.asyncio
async def test_tool_config_is_passed_through(registry, job_store, context):
    seen = {}

    async def reads_config(params, config, ctx):
        seen.update(config)
        return ToolResult.text("ok")

    registry.register(
        ToolDefinition(name="cfg", input_schema=MessageInput, execute=reads_config)
    )
    dispatcher = ToolDispatcher(registry, job_store, tool_config={"llm": {"model": "m"}})
    await dispatcher.dispatch("cfg", {}, context)

    assert seen == {"llm": {"model": "m"}}


@pytest.mark.asyncio
async def test_timeout_becomes_error_result(registry, job_store, context):
    async def slow(params, config, ctx):
        await asyncio.sleep(5)
        return ToolResult.text("late")

    registry.register(ToolDefinition(name="slow", input_schema=MessageInput, execute=slow))
    dispatcher = ToolDispatcher(
        registry, job_store, config=DispatchConfig(timeout_seconds=0.05)
    )

    result = await dispatcher.dispatch("slow", {}, context)
    assert result.is_error is True
    assert "timed out" in result.joined_text()


@pytest.mark.asyncio
async def test_async_dispatch_returns_notice_and_completes(
    dispatcher, add_tool, job_store, context
):
    tool = add_tool("prd-generator", supports_async=True, text="PRD body")

    notice = await dispatcher.dispatch(
        "prd-generator", {"message": "billing", "async": True}, context
    )

    job_id = notice.metadata["jobId"]
    assert notice.is_error is False
    assert job_id in notice.joined_text()
    assert notice.metadata["retrieval"] == {
        "tool_name": "prd-generator-job-result",
        "arguments": {"jobId": job_id},
    }

    job = await job_store.get_job(job_id)
    assert job.tool_name == "prd-generator"
    assert job.input == {"message": "billing"}

    await dispatcher.wait_for_pending()
    job = await job_store.get_job(job_id)
    assert job.status == JobStatus.COMPLETED
    assert job.error is None
    stored = ToolResult.from_json(job.result)
    assert stored.joined_text() == "PRD body"

    assert tool.call_count == 1
    _, _, job_context = tool.calls[0]
    assert job_context.job_id == job_id
    assert job_context.session_id == "test-session"


@pytest.mark.asyncio
async def test_async_failure_marks_job_failed(dispatcher, add_tool, job_store, notifier):
    add_tool("flaky", supports_async=True, raises=ValueError("bad input"))

    notice = await dispatcher.dispatch("flaky", {"async": True})
    job_id = notice.metadata["jobId"]
    await dispatcher.wait_for_pending()

    job = await job_store.get_job(job_id)
    assert job.status == JobStatus.FAILED
    assert "bad input" in job.error
    assert job.result is None

    statuses = [e.status for e in notifier.history if e.job_id == job_id]
    assert statuses == [JobStatus.PENDING, JobStatus.PROCESSING, JobStatus.FAILED]


@pytest.mark.asyncio
async def test_async_flag_ignored_for_sync_only_tool(dispatcher, add_tool, job_store):
    tool = add_tool("echo", text="inline")

    result = await dispatcher.dispatch("echo", {"async": True})

    assert result.joined_text() == "inline"
    assert result.metadata is None
    assert tool.call_count == 1
    assert await job_store.list_jobs() == []


@pytest.mark.asyncio
async def test_async_flag_must_be_true(dispatcher, add_tool, job_store):
    add_tool("echo", supports_async=True)

    result = await dispatcher.dispatch("echo", {"async": False})

    assert result.joined_text() == "done"
    assert await job_store.list_jobs() == []


@pytest.mark.asyncio
async def test_invalid_async_params_create_no_job(dispatcher, add_tool, job_store):
    add_tool("prd-generator", supports_async=True)

    with pytest.raises(ValidationError):
        await dispatcher.dispatch("prd-generator", {"async": True, "message": ["x"]})
    assert await job_store.list_jobs() == []


@pytest.mark.asyncio
async def test_stored_result_round_trips_metadata(dispatcher, add_tool, job_store):
    add_tool("gen", supports_async=True, output={"path": "docs/prd.md"})

    notice = await dispatcher.dispatch("gen", {"async": True})
    await dispatcher.wait_for_pending()

    job = await job_store.get_job(notice.metadata["jobId"])
    assert json.loads(job.result)["metadata"] == {"output": {"path": "docs/prd.md"}}
    assert dispatcher.pending_count == 0
