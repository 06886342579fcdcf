"""Example showing inline and background tool dispatch."""

import asyncio

from pydantic import Field

from toolflow import (
    ExecutionContext,
    InMemoryJobStore,
    ToolDefinition,
    ToolDispatcher,
    ToolInput,
    ToolRegistry,
    ToolResult,
)
from toolflow.notifier import InMemoryNotifier
from toolflow.tools import register_job_result_tools


class StubRequest(ToolInput):
    function_name: str = Field(min_length=1)
    language: str = "python"


async def generate_stub(params: StubRequest, config, context) -> ToolResult:
    await asyncio.sleep(0.5)
    return ToolResult.text(f"def {params.function_name}():\n    raise NotImplementedError\n")


async def main():
    """Dispatch a tool inline, then as a job that is polled later."""
    notifier = InMemoryNotifier()
    store = InMemoryJobStore(notifier=notifier)
    registry = ToolRegistry()
    registry.register(
        ToolDefinition(
            name="code-stub-generator",
            description="Generates a function stub.",
            input_schema=StubRequest,
            execute=generate_stub,
            supports_async=True,
        )
    )
    register_job_result_tools(registry, store)
    dispatcher = ToolDispatcher(registry, store)
    context = ExecutionContext(session_id="guide")

    result = await dispatcher.dispatch(
        "code-stub-generator", {"function_name": "parse"}, context
    )
    print(result.joined_text())

    notice = await dispatcher.dispatch(
        "code-stub-generator", {"function_name": "render", "async": True}, context
    )
    print(notice.joined_text())

    await dispatcher.wait_for_pending()
    retrieval = notice.metadata["retrieval"]
    polled = await dispatcher.dispatch(
        retrieval["tool_name"], retrieval["arguments"], context
    )
    print(polled.joined_text())
    print(f"Events: {[event.type for event in notifier.history]}")


if __name__ == "__main__":
    asyncio.run(main())
