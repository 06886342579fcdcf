"""Job store abstraction."""

from __future__ import annotations

from typing import Any, Protocol

from .models import Job, JobStatus


class JobStore(Protocol):
    """Protocol for job state backends."""

    async def create_job(
        self, input: dict[str, Any], tool_name: str | None = None
    ) -> str:
        """Insert a PENDING job and return its id."""

    async def update_status(
        self,
        job_id: str,
        status: JobStatus,
        result: str | None = None,
        error: str | None = None,
    ) -> bool:
        """Transition a job; ``False`` when the id is unknown."""

    async def get_job(self, job_id: str) -> Job | None:
        """Return a snapshot of the job, or ``None``."""

    async def list_jobs(self) -> list[Job]:
        """Return snapshots of every job."""
