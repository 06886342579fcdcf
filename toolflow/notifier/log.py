"""Notifier that writes job events to the log."""

from __future__ import annotations

import logging

from ..jobs.models import JobEvent
from .base import BaseNotifier

logger = logging.getLogger(__name__)


class LoggingNotifier(BaseNotifier):
    async def publish(self, event: JobEvent) -> None:
        logger.info(
            f"{event.type} job_id={event.job_id} status={event.status.value}"
            + (f" message={event.message}" if event.message else "")
        )
