"""Workflow graphs and their execution engine."""

from __future__ import annotations

from .engine import WorkflowEngine, validate_workflow
from .loader import WorkflowCatalog, load_workflows, parse_workflows
from .models import StepError, Workflow, WorkflowResult, WorkflowStep
from .templating import resolve_params

__all__ = [
    "StepError",
    "Workflow",
    "WorkflowCatalog",
    "WorkflowEngine",
    "WorkflowResult",
    "WorkflowStep",
    "load_workflows",
    "parse_workflows",
    "resolve_params",
    "validate_workflow",
]
