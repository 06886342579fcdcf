"""Wiring of the registry, job store, dispatcher and engine for one process."""

from __future__ import annotations

import logging
from typing import Optional

from .config import ToolflowConfig, load_config
from .dispatch import ToolDispatcher
from .jobs import JobStore, get_job_store
from .loader import load_tool_modules
from .notifier import BaseNotifier, get_notifier
from .registry import ToolRegistry
from .tools import WorkflowRunnerHandler, register_job_result_tools
from .workflows import WorkflowCatalog, WorkflowEngine

logger = logging.getLogger(__name__)


class Runtime:
    """Components shared by every call made in this process."""

    def __init__(
        self,
        config: ToolflowConfig,
        notifier: Optional[BaseNotifier],
        job_store: JobStore,
        registry: ToolRegistry,
        dispatcher: ToolDispatcher,
        catalog: WorkflowCatalog,
        engine: WorkflowEngine,
    ) -> None:
        self.config = config
        self.notifier = notifier
        self.job_store = job_store
        self.registry = registry
        self.dispatcher = dispatcher
        self.catalog = catalog
        self.engine = engine

    async def shutdown(self) -> None:
        """Wait for background jobs, then release notifier listeners."""
        await self.dispatcher.wait_for_pending()
        if self.notifier is not None:
            await self.notifier.close()


def build_runtime(
    config: Optional[ToolflowConfig] = None,
    registry: Optional[ToolRegistry] = None,
) -> Runtime:
    """Build a :class:`Runtime` from ``config``.

    Tools from ``config.tools.modules`` are added to ``registry`` (a new one
    when omitted), followed by the workflow runner and the job result tools.
    """

    config = config or load_config()
    notifier = get_notifier(config=config)
    job_store = get_job_store(config=config, notifier=notifier)
    registry = registry if registry is not None else ToolRegistry()
    load_tool_modules(registry, config.tools.modules)

    dispatcher = ToolDispatcher(
        registry, job_store, config=config.dispatch, tool_config=config.tools.config
    )
    catalog = WorkflowCatalog()
    for path in config.workflows.paths:
        catalog.load_file(path)
    engine = WorkflowEngine(dispatcher, job_store)

    registry.register_handler(WorkflowRunnerHandler(engine, catalog))
    register_job_result_tools(registry, job_store)
    logger.info(
        f"Runtime ready with {len(registry)} tools and {len(catalog)} workflows"
    )
    return Runtime(config, notifier, job_store, registry, dispatcher, catalog, engine)
