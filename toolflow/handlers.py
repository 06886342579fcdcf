"""Class-based tool handlers."""

from __future__ import annotations

import abc
import logging
from typing import Any, ClassVar, Mapping, Type

from pydantic import BaseModel

from .contracts import ExecutionContext, ToolResult
from .registry.models import ToolDefinition

logger = logging.getLogger(__name__)


class BaseHandler(metaclass=abc.ABCMeta):
    """Base class for tools implemented as objects.

    Subclasses set ``name``, ``description`` and ``input_schema`` and
    implement :meth:`execute`. Register an instance with
    ``ToolRegistry.register_handler``.
    """

    name: ClassVar[str]
    description: ClassVar[str] = ""
    input_schema: ClassVar[Type[BaseModel]]
    supports_async: ClassVar[bool] = False

    async def handle(
        self,
        params: BaseModel,
        config: Mapping[str, Any],
        context: ExecutionContext,
    ) -> ToolResult:
        """Entry point used by the dispatcher."""
        logger.debug(f"Handler {self.name} invoked for session_id={context.session_id}")
        return await self.execute(params, config, context)

    @abc.abstractmethod
    async def execute(
        self,
        params: BaseModel,
        config: Mapping[str, Any],
        context: ExecutionContext,
    ) -> ToolResult:
        """Run the tool with already validated params."""
        raise NotImplementedError

    def metadata(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema.model_json_schema(),
        }

    def to_tool_definition(self) -> ToolDefinition:
        return ToolDefinition(
            name=self.name,
            description=self.description,
            input_schema=self.input_schema,
            execute=self.handle,
            supports_async=self.supports_async,
        )
