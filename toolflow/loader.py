"""Import tool modules and register what they export."""

from __future__ import annotations

import logging
from importlib import import_module
from typing import Iterable, List

from .errors import ToolflowError
from .handlers import BaseHandler
from .registry import ToolDefinition, ToolRegistry

logger = logging.getLogger(__name__)


def register_module_tools(registry: ToolRegistry, module: object) -> List[str]:
    """Register tools exported by an already imported ``module``.

    A module either defines ``register_tools(registry)`` or a ``TOOLS``
    iterable of :class:`ToolDefinition` or :class:`BaseHandler` objects.
    """
    module_name = getattr(module, "__name__", repr(module))
    hook = getattr(module, "register_tools", None)
    if callable(hook):
        before = set(registry.names())
        hook(registry)
        return [name for name in registry.names() if name not in before]

    exported = getattr(module, "TOOLS", None)
    if exported is None:
        raise ToolflowError(
            f"Module {module_name} defines neither register_tools() nor TOOLS",
            {"module": module_name},
        )

    names: List[str] = []
    for item in exported:
        if isinstance(item, BaseHandler):
            definition = registry.register_handler(item)
        elif isinstance(item, ToolDefinition):
            definition = registry.register(item)
        else:
            raise ToolflowError(
                f"Module {module_name} exports unsupported tool object {item!r}",
                {"module": module_name},
            )
        names.append(definition.name)
    return names


def load_tool_modules(registry: ToolRegistry, modules: Iterable[str]) -> List[str]:
    """Import each dotted module name and register its tools."""
    loaded: List[str] = []
    for module_name in modules:
        module = import_module(module_name)
        names = register_module_tools(registry, module)
        logger.info(f"Loaded {len(names)} tools from {module_name}: {names}")
        loaded.extend(names)
    return loaded
