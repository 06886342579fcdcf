"""Job tracking for asynchronous tool and workflow runs."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from ..config import ToolflowConfig, load_config
from .inmemory import InMemoryJobStore
from .models import Job, JobEvent, JobStatus
from .repository import JobStore

if TYPE_CHECKING:
    from ..notifier.base import BaseNotifier


def get_job_store(
    config: Optional[ToolflowConfig] = None,
    notifier: Optional["BaseNotifier"] = None,
) -> JobStore:
    """Factory function to obtain a job store.

    Jobs only live in memory, so every call returns a fresh store configured
    from ``config`` (loaded from disk when omitted).
    """

    config = config or load_config()
    return InMemoryJobStore(
        notifier=notifier, strict_transitions=config.jobs.strict_transitions
    )


__all__ = [
    "Job",
    "JobEvent",
    "JobStatus",
    "JobStore",
    "InMemoryJobStore",
    "get_job_store",
]
