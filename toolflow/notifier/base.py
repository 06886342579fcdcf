"""Base notifier interface for job status events."""

from __future__ import annotations

import abc
from datetime import datetime, timezone

from ..jobs.models import JobEvent, JobStatus


class BaseNotifier(metaclass=abc.ABCMeta):
    """Abstract push channel for job status events.

    Delivery is best effort; callers never depend on a publish succeeding.
    """

    @abc.abstractmethod
    async def publish(self, event: JobEvent) -> None:
        """Push ``event`` to every listener."""
        raise NotImplementedError

    async def send_progress(
        self, job_id: str, status: JobStatus, message: str
    ) -> None:
        """Publish a free-form progress message for a running job."""
        await self.publish(
            JobEvent(
                type="JOB_PROGRESS",
                job_id=job_id,
                status=status,
                timestamp=datetime.now(timezone.utc),
                message=message,
            )
        )

    async def close(self) -> None:
        """Release listeners (no-op by default)."""
        pass
