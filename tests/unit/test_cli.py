"""CLI tests driven through typer's CliRunner."""

import json
import textwrap

import pytest
from typer.testing import CliRunner

from toolflow.cli import app

TOOLS_MODULE = textwrap.dedent(
    """
    from toolflow import ToolDefinition, ToolInput, ToolResult


    class GreetInput(ToolInput):
        name: str = "world"


    async def greet(params, config, context):
        return ToolResult.text(f"Hello, {params.name}!")


    async def fail(params, config, context):
        return ToolResult.error("greeting service down")


    TOOLS = [
        ToolDefinition(
            name="greet",
            description="Greets someone.",
            input_schema=GreetInput,
            execute=greet,
            supports_async=True,
        ),
        ToolDefinition(
            name="fail", description="Always fails.", input_schema=GreetInput, execute=fail
        ),
    ]
    """
)

WORKFLOWS = textwrap.dedent(
    """
    workflows:
      - id: hello
        name: Hello
        startAt: first
        steps:
          - id: first
            tool: greet
            next: [second]
          - id: second
            tool: greet
            params:
              name: "{workflow.input.who}"
      - id: broken
        startAt: only
        steps:
          - id: only
            tool: fail
    """
)


@pytest.fixture
def cli_config(tmp_path, monkeypatch):
    (tmp_path / "cli_demo_tools.py").write_text(TOOLS_MODULE)
    monkeypatch.syspath_prepend(str(tmp_path))
    monkeypatch.delenv("TOOLFLOW_NOTIFIER", raising=False)
    monkeypatch.delenv("TOOLFLOW_LOG_LEVEL", raising=False)
    config_path = tmp_path / "toolflow.yaml"
    config_path.write_text(
        "log_level: WARNING\ntools:\n  modules: [cli_demo_tools]\n"
    )
    return str(config_path)


@pytest.fixture
def workflows_file(tmp_path):
    path = tmp_path / "flows.yaml"
    path.write_text(WORKFLOWS)
    return str(path)


def test_tools_list(cli_config):
    runner = CliRunner()
    result = runner.invoke(app, ["--config", cli_config, "tools", "list"])

    assert result.exit_code == 0, result.output
    assert "greet [async] - Greets someone." in result.output
    assert "fail - Always fails." in result.output
    assert "workflow-runner [async]" in result.output
    assert "greet-job-result" in result.output
    assert "job-result-retriever" in result.output


def test_tools_call(cli_config):
    runner = CliRunner()
    result = runner.invoke(
        app,
        ["--config", cli_config, "tools", "call", "greet", "--params", '{"name": "Ada"}'],
    )

    assert result.exit_code == 0, result.output
    assert "Hello, Ada!" in result.output


def test_tools_call_async_waits_for_job(cli_config):
    runner = CliRunner()
    result = runner.invoke(
        app, ["--config", cli_config, "tools", "call", "greet", "--async"]
    )

    assert result.exit_code == 0, result.output
    assert "Job ID:" in result.output
    assert ": COMPLETED" in result.output
    assert "Hello, world!" in result.output


def test_tools_call_errors(cli_config):
    runner = CliRunner()

    invalid = runner.invoke(
        app, ["--config", cli_config, "tools", "call", "greet", "--params", '{"nam": 1}']
    )
    assert invalid.exit_code == 1
    assert "Input validation failed for tool 'greet'" in invalid.output

    missing = runner.invoke(app, ["--config", cli_config, "tools", "call", "nope"])
    assert missing.exit_code == 1
    assert "Tool not found: nope" in missing.output

    bad_json = runner.invoke(
        app, ["--config", cli_config, "tools", "call", "greet", "--params", "{"]
    )
    assert bad_json.exit_code == 1
    assert "--params is not valid JSON" in bad_json.output

    failing = runner.invoke(app, ["--config", cli_config, "tools", "call", "fail"])
    assert failing.exit_code == 1
    assert "greeting service down" in failing.output


def test_workflow_validate(cli_config, workflows_file, tmp_path):
    runner = CliRunner()
    result = runner.invoke(
        app, ["--config", cli_config, "workflow", "validate", workflows_file]
    )
    assert result.exit_code == 0, result.output
    assert "hello: OK (2 steps)" in result.output
    assert "broken: OK (1 steps)" in result.output

    dangling = tmp_path / "dangling.json"
    dangling.write_text(
        json.dumps(
            {"id": "bad", "startAt": "a", "steps": [{"id": "a", "tool": "greet", "next": ["x"]}]}
        )
    )
    result = runner.invoke(
        app, ["--config", cli_config, "workflow", "validate", str(dangling)]
    )
    assert result.exit_code == 1
    assert "next references unknown step 'x'" in result.output


def test_workflow_run(cli_config, workflows_file):
    runner = CliRunner()
    result = runner.invoke(
        app,
        [
            "--config",
            cli_config,
            "workflow",
            "run",
            workflows_file,
            "--workflow",
            "hello",
            "--input",
            '{"who": "Grace"}',
        ],
    )

    assert result.exit_code == 0, result.output
    assert 'Workflow "Hello" completed successfully.' in result.output
    assert "Executed: first -> second" in result.output
    assert "Hello, Grace!" in result.output


def test_workflow_run_failure_and_selection(cli_config, workflows_file):
    runner = CliRunner()

    failed = runner.invoke(
        app,
        ["--config", cli_config, "workflow", "run", workflows_file, "--workflow", "broken"],
    )
    assert failed.exit_code == 1
    assert "failed at step only (fail): greeting service down" in failed.output

    ambiguous = runner.invoke(
        app, ["--config", cli_config, "workflow", "run", workflows_file]
    )
    assert ambiguous.exit_code == 1
    assert "pick one with --workflow" in ambiguous.output

    unknown = runner.invoke(
        app,
        ["--config", cli_config, "workflow", "run", workflows_file, "--workflow", "nope"],
    )
    assert unknown.exit_code == 1
    assert "Workflow not found: nope" in unknown.output
