"""Data models for tracked jobs."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class JobStatus(str, Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)


class Job(BaseModel):
    """Tracked execution of a tool or workflow."""

    id: str
    tool_name: Optional[str] = None
    status: JobStatus = JobStatus.PENDING
    input: Dict[str, Any] = Field(default_factory=dict)
    result: Optional[str] = None
    error: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class JobEvent(BaseModel):
    """Status change pushed to notifier subscribers."""

    type: str
    job_id: str
    status: JobStatus
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    tool_name: Optional[str] = None
    message: Optional[str] = None

    def to_json(self) -> str:
        return self.model_dump_json()
