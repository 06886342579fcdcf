"""Tool registry."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Dict, List, Optional

from ..errors import DuplicateToolError, ToolNotFoundError
from .models import ExecuteFn, ToolDefinition

if TYPE_CHECKING:
    from ..handlers import BaseHandler

logger = logging.getLogger(__name__)


class ToolRegistry:
    """Maps tool names to their definitions.

    One instance is built at process start and handed to the dispatcher and
    the workflow engine. Registering a name twice raises
    :class:`DuplicateToolError`; use :meth:`unregister` first to replace a tool.
    """

    def __init__(self) -> None:
        self._tools: Dict[str, ToolDefinition] = {}

    def register(self, definition: ToolDefinition) -> ToolDefinition:
        if definition.name in self._tools:
            raise DuplicateToolError(definition.name)
        self._tools[definition.name] = definition
        logger.debug(f"Registered tool {definition.name}")
        return definition

    def register_handler(self, handler: "BaseHandler") -> ToolDefinition:
        """Register a handler object under its own name."""
        return self.register(handler.to_tool_definition())

    def lookup(self, name: str) -> ToolDefinition:
        tool = self._tools.get(name)
        if tool is None:
            raise ToolNotFoundError(name)
        return tool

    def get(self, name: str) -> Optional[ToolDefinition]:
        return self._tools.get(name)

    def list(self) -> List[ToolDefinition]:
        return list(self._tools.values())

    def names(self) -> List[str]:
        return list(self._tools)

    def unregister(self, name: str) -> bool:
        """Remove ``name``; returns ``False`` when it was not registered."""
        return self._tools.pop(name, None) is not None

    def clear(self) -> None:
        self._tools.clear()

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)


__all__ = ["ExecuteFn", "ToolDefinition", "ToolRegistry"]
