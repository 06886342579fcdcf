"""Loading workflow definitions from YAML or JSON files."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

import pydantic
import yaml

from ..errors import WorkflowConfigError
from .models import Workflow

logger = logging.getLogger(__name__)


def _parse_document(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        return json.loads(text)
    return yaml.safe_load(text)


def parse_workflows(data: Any, source: str = "<data>") -> List[Workflow]:
    """Build workflows from a parsed definition document.

    Accepts a single workflow mapping, a list of them, or a mapping with a
    ``workflows`` key holding either a list or a ``{id: definition}`` mapping.
    """
    if isinstance(data, dict) and "workflows" in data:
        data = data["workflows"]
        if isinstance(data, dict):
            data = [{"id": key, **(value or {})} for key, value in data.items()]
    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list):
        raise WorkflowConfigError(
            f"{source}: expected a workflow mapping or list, got {type(data).__name__}",
            {"source": source},
        )

    workflows: List[Workflow] = []
    for raw in data:
        try:
            workflows.append(Workflow.model_validate(raw))
        except pydantic.ValidationError as e:
            raise WorkflowConfigError(
                f"{source}: invalid workflow definition: {e}", {"source": source}
            ) from e
    return workflows


def load_workflows(path: Union[str, Path]) -> List[Workflow]:
    """Read and parse the workflow definitions stored at ``path``."""
    path = Path(path)
    if not path.exists():
        raise WorkflowConfigError(
            f"Workflow definition file not found: {path}", {"source": str(path)}
        )
    try:
        data = _parse_document(path)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise WorkflowConfigError(
            f"Failed to parse workflow definitions in {path}: {e}",
            {"source": str(path)},
        ) from e
    workflows = parse_workflows(data, source=str(path))
    logger.info(f"Loaded {len(workflows)} workflow definitions from {path}")
    return workflows


class WorkflowCatalog:
    """Workflows available by id to the workflow-runner tool and the CLI."""

    def __init__(self, workflows: Optional[Iterable[Workflow]] = None) -> None:
        self._workflows: Dict[str, Workflow] = {}
        for workflow in workflows or []:
            self.add(workflow)

    def add(self, workflow: Workflow) -> None:
        if workflow.id in self._workflows:
            logger.warning(f"Replacing workflow definition {workflow.id}")
        self._workflows[workflow.id] = workflow

    def load_file(self, path: Union[str, Path]) -> List[Workflow]:
        workflows = load_workflows(path)
        for workflow in workflows:
            self.add(workflow)
        return workflows

    def get(self, workflow_id: str) -> Optional[Workflow]:
        return self._workflows.get(workflow_id)

    def list(self) -> List[Workflow]:
        return list(self._workflows.values())

    def __contains__(self, workflow_id: object) -> bool:
        return workflow_id in self._workflows

    def __len__(self) -> int:
        return len(self._workflows)
