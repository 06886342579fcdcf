"""Notifier factory and initialization."""

from __future__ import annotations

import os
from typing import Optional

from ..config import ToolflowConfig, load_config
from .base import BaseNotifier
from .inmemory import InMemoryNotifier
from .log import LoggingNotifier


def get_notifier(
    backend: Optional[str] = None, config: Optional[ToolflowConfig] = None
) -> Optional[BaseNotifier]:
    """Factory function to get the configured notifier.

    Returns ``None`` for the ``none`` backend.
    """

    config = config or load_config()
    backend = (
        backend or os.getenv("TOOLFLOW_NOTIFIER") or config.notifier.backend
    ).lower()

    if backend == "inmemory":
        return InMemoryNotifier()
    elif backend == "logging":
        return LoggingNotifier()
    elif backend == "none":
        return None
    else:
        raise ValueError(f"Unsupported notifier backend: {backend}")


__all__ = ["BaseNotifier", "InMemoryNotifier", "LoggingNotifier", "get_notifier"]
