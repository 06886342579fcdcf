"""Example workflow with a success edge, an error edge and a fan-out."""

import asyncio

from toolflow import (
    ExecutionContext,
    InMemoryJobStore,
    ToolDefinition,
    ToolDispatcher,
    ToolInput,
    ToolRegistry,
    ToolResult,
    Workflow,
    WorkflowEngine,
)


class TopicInput(ToolInput):
    topic: str


class TextInput(ToolInput):
    text: str = ""


async def draft_prd(params: TopicInput, config, context) -> ToolResult:
    if not params.topic:
        return ToolResult.error("No topic given")
    return ToolResult.text(f"PRD for {params.topic}", output={"text": f"PRD for {params.topic}"})


async def user_stories(params: TextInput, config, context) -> ToolResult:
    return ToolResult.text(f"Stories derived from: {params.text}")


async def task_list(params: TextInput, config, context) -> ToolResult:
    return ToolResult.text(f"Tasks derived from: {params.text}")


async def report(params: TextInput, config, context) -> ToolResult:
    return ToolResult.text("Drafting failed; a human will follow up.")


WORKFLOW = Workflow.model_validate(
    {
        "id": "docs",
        "name": "Documentation",
        "description": "Draft a PRD then derive stories and tasks from it.",
        "startAt": "draft",
        "steps": [
            {"id": "draft", "tool": "prd", "next": ["stories", "tasks"], "onError": ["report"]},
            {"id": "stories", "tool": "stories"},
            {"id": "tasks", "tool": "tasks"},
            {"id": "report", "tool": "report"},
        ],
    }
)


async def main():
    registry = ToolRegistry()
    for name, fn, schema in [
        ("prd", draft_prd, TopicInput),
        ("stories", user_stories, TextInput),
        ("tasks", task_list, TextInput),
        ("report", report, TextInput),
    ]:
        registry.register(ToolDefinition(name=name, input_schema=schema, execute=fn))

    engine = WorkflowEngine(ToolDispatcher(registry, InMemoryJobStore()))
    context = ExecutionContext(session_id="guide")

    ok = await engine.run(WORKFLOW, {"topic": "billing"}, context)
    print(ok.message, ok.executed)

    recovered = await engine.run(WORKFLOW, {"topic": ""}, context)
    print(recovered.message, recovered.executed, recovered.output.joined_text())


if __name__ == "__main__":
    asyncio.run(main())
