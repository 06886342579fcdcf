"""In-memory implementation of the job store."""

from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional

from ..errors import JobTransitionError
from .models import Job, JobEvent, JobStatus
from .repository import JobStore

if TYPE_CHECKING:
    from ..notifier.base import BaseNotifier

logger = logging.getLogger(__name__)

_ALLOWED_TRANSITIONS = {
    JobStatus.PENDING: {JobStatus.PROCESSING, JobStatus.FAILED},
    JobStatus.PROCESSING: {JobStatus.COMPLETED, JobStatus.FAILED},
    JobStatus.COMPLETED: set(),
    JobStatus.FAILED: set(),
}

_EVENT_TYPES = {
    JobStatus.PENDING: "JOB_UPDATED",
    JobStatus.PROCESSING: "JOB_UPDATED",
    JobStatus.COMPLETED: "JOB_COMPLETED",
    JobStatus.FAILED: "JOB_FAILED",
}

_TICK = timedelta(microseconds=1)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryJobStore(JobStore):
    """Keep jobs in local memory for the lifetime of the process.

    Any status may follow any other unless ``strict_transitions`` is set, in
    which case only PENDING -> PROCESSING -> COMPLETED/FAILED (and
    PENDING -> FAILED) are accepted.
    """

    def __init__(
        self,
        notifier: Optional["BaseNotifier"] = None,
        strict_transitions: bool = False,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._jobs: Dict[str, Job] = {}
        self._lock = asyncio.Lock()
        self._notifier = notifier
        self._strict = strict_transitions
        self._clock = clock

    # ------------------------------------------------------------------
    async def create_job(
        self, input: dict[str, Any], tool_name: str | None = None
    ) -> str:
        async with self._lock:
            job_id = str(uuid.uuid4())
            while job_id in self._jobs:
                job_id = str(uuid.uuid4())
            now = self._clock()
            job = Job(
                id=job_id,
                tool_name=tool_name,
                status=JobStatus.PENDING,
                input=dict(input),
                result=None,
                error=None,
                created_at=now,
                updated_at=now,
            )
            self._jobs[job_id] = job
        logger.info(f"Created job job_id={job_id} tool={tool_name}")
        await self._notify(
            JobEvent(
                type="JOB_CREATED",
                job_id=job_id,
                status=job.status,
                timestamp=job.updated_at,
                tool_name=tool_name,
            )
        )
        return job_id

    async def update_status(
        self,
        job_id: str,
        status: JobStatus,
        result: str | None = None,
        error: str | None = None,
    ) -> bool:
        status = JobStatus(status)
        async with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                logger.warning(f"Status update for unknown job_id={job_id}")
                return False
            if self._strict and status not in _ALLOWED_TRANSITIONS[job.status]:
                raise JobTransitionError(
                    f"Illegal transition {job.status.value} -> {status.value}",
                    {"job_id": job_id},
                )

            job.status = status
            job.updated_at = self._next_timestamp(job.updated_at)
            if status == JobStatus.COMPLETED:
                job.result = result
                job.error = None
            elif status == JobStatus.FAILED:
                job.result = None
                job.error = error
            else:
                job.result = None
                job.error = None
            event = JobEvent(
                type=_EVENT_TYPES[status],
                job_id=job_id,
                status=status,
                timestamp=job.updated_at,
                tool_name=job.tool_name,
                message=error if status == JobStatus.FAILED else None,
            )
        logger.debug(f"Job job_id={job_id} moved to {status.value}")
        await self._notify(event)
        return True

    async def get_job(self, job_id: str) -> Job | None:
        job = self._jobs.get(job_id)
        return job.model_copy(deep=True) if job else None

    async def list_jobs(self) -> list[Job]:
        return [job.model_copy(deep=True) for job in self._jobs.values()]

    # ------------------------------------------------------------------
    def _next_timestamp(self, previous: datetime) -> datetime:
        now = self._clock()
        return now if now > previous else previous + _TICK

    async def _notify(self, event: JobEvent) -> None:
        if self._notifier is None:
            return
        try:
            await self._notifier.publish(event)
        except Exception as e:
            logger.warning(
                f"Notifier failed for job_id={event.job_id} event={event.type}: {e}"
            )
