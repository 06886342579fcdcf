"""Job result retrieval tool tests."""

import pytest

from toolflow import ToolResult
from toolflow.errors import ValidationError
from toolflow.jobs import JobStatus
from toolflow.tools import register_job_result_tools


@pytest.fixture
def retrieval(registry, job_store):
    def _register():
        return register_job_result_tools(registry, job_store)

    return _register


def test_registers_generic_and_per_tool_aliases(registry, add_tool, retrieval):
    add_tool("prd-generator", supports_async=True)
    add_tool("echo")

    added = retrieval()

    assert added == ["job-result-retriever", "prd-generator-job-result"]
    assert "echo-job-result" not in registry
    assert retrieval() == []


@pytest.mark.asyncio
async def test_unknown_job(dispatcher, retrieval):
    retrieval()

    result = await dispatcher.dispatch("job-result-retriever", {"jobId": "nope"})

    assert result.is_error is True
    assert result.joined_text() == 'Job with ID "nope" not found.'
    assert result.error_details["type"] == "JobNotFoundError"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status, word", [(JobStatus.PENDING, "pending"), (JobStatus.PROCESSING, "processing")]
)
async def test_running_job_reports_status(dispatcher, job_store, retrieval, status, word):
    retrieval()
    job_id = await job_store.create_job({}, tool_name="prd-generator")
    await job_store.update_status(job_id, status)

    result = await dispatcher.dispatch("job-result-retriever", {"jobId": job_id})

    assert result.is_error is False
    assert result.joined_text() == f'Job "{job_id}" is currently {word}.'
    assert result.metadata == {"jobId": job_id, "status": status.value}


@pytest.mark.asyncio
async def test_failed_job_returns_error(dispatcher, job_store, retrieval):
    retrieval()
    job_id = await job_store.create_job({})
    await job_store.update_status(job_id, JobStatus.FAILED, error="LLM quota exceeded")

    result = await dispatcher.dispatch("job-result-retriever", {"jobId": job_id})

    assert result.is_error is True
    assert result.joined_text() == f'Job "{job_id}" failed: LLM quota exceeded'
    assert result.error_details["type"] == "JobFailedError"


@pytest.mark.asyncio
async def test_completed_job_without_result(dispatcher, job_store, retrieval):
    retrieval()
    job_id = await job_store.create_job({})
    await job_store.update_status(job_id, JobStatus.COMPLETED)

    result = await dispatcher.dispatch("job-result-retriever", {"jobId": job_id})

    assert result.is_error is True
    assert result.error_details["type"] == "MissingJobResultError"


@pytest.mark.asyncio
async def test_completed_job_returns_stored_result(dispatcher, job_store, retrieval):
    retrieval()
    job_id = await job_store.create_job({})
    stored = ToolResult.text("PRD body", path="docs/prd.md")
    await job_store.update_status(job_id, JobStatus.COMPLETED, result=stored.to_json())

    result = await dispatcher.dispatch("job-result-retriever", {"jobId": job_id})

    assert result.is_error is False
    assert result.joined_text() == "PRD body"
    assert result.metadata == {
        "path": "docs/prd.md",
        "jobId": job_id,
        "status": "COMPLETED",
    }


@pytest.mark.asyncio
async def test_plain_text_result_is_wrapped(dispatcher, job_store, retrieval):
    retrieval()
    job_id = await job_store.create_job({})
    await job_store.update_status(job_id, JobStatus.COMPLETED, result="raw output")

    result = await dispatcher.dispatch("job-result-retriever", {"jobId": job_id})

    assert result.joined_text() == "raw output"


@pytest.mark.asyncio
async def test_alias_retrieves_async_dispatch(dispatcher, add_tool, retrieval, context):
    add_tool("prd-generator", supports_async=True, text="PRD body")
    retrieval()

    notice = await dispatcher.dispatch("prd-generator", {"async": True}, context)
    await dispatcher.wait_for_pending()

    retrieval_call = notice.metadata["retrieval"]
    result = await dispatcher.dispatch(
        retrieval_call["tool_name"], retrieval_call["arguments"], context
    )
    assert result.joined_text() == "PRD body"
    assert result.metadata["status"] == "COMPLETED"


@pytest.mark.asyncio
async def test_missing_job_id_is_rejected(dispatcher, retrieval):
    retrieval()
    with pytest.raises(ValidationError):
        await dispatcher.dispatch("job-result-retriever", {})
