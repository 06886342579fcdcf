from __future__ import annotations

import os
from typing import Any, Dict, List, Literal, Optional

import yaml
from pydantic import BaseModel, Field


class DispatchConfig(BaseModel):
    """Dispatcher settings."""

    timeout_seconds: Optional[float] = None


class JobsConfig(BaseModel):
    """Job store settings."""

    strict_transitions: bool = False


class NotifierConfig(BaseModel):
    """Job event notifier settings."""

    backend: Literal["inmemory", "logging", "none"] = "inmemory"


class ToolsConfig(BaseModel):
    """Tool loading settings."""

    modules: List[str] = Field(default_factory=list)
    config: Dict[str, Any] = Field(default_factory=dict)


class WorkflowsConfig(BaseModel):
    """Workflow definition files loaded at startup."""

    paths: List[str] = Field(default_factory=list)


class ToolflowConfig(BaseModel):
    """Top-level configuration model."""

    log_level: str = "INFO"
    dispatch: DispatchConfig = DispatchConfig()
    jobs: JobsConfig = JobsConfig()
    notifier: NotifierConfig = NotifierConfig()
    tools: ToolsConfig = ToolsConfig()
    workflows: WorkflowsConfig = WorkflowsConfig()


def load_config(path: Optional[str] = None) -> ToolflowConfig:
    """Load configuration from YAML file.

    Args:
        path: Optional path to config file. Falls back to TOOLFLOW_CONFIG env
            variable or 'toolflow.yaml' in the current directory.
    """

    config_path = path or os.getenv("TOOLFLOW_CONFIG", "toolflow.yaml")
    if os.path.exists(config_path):
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
        config = ToolflowConfig(**data)
    else:
        config = ToolflowConfig()

    env_notifier = os.getenv("TOOLFLOW_NOTIFIER")
    if env_notifier:
        config.notifier = NotifierConfig(backend=env_notifier.lower())
    env_log_level = os.getenv("TOOLFLOW_LOG_LEVEL")
    if env_log_level:
        config.log_level = env_log_level.upper()
    return config
