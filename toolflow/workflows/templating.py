"""Resolution of ``{path}`` placeholders in workflow step params.

Paths are dotted lookups with optional list indexes, evaluated against::

    {"workflow": {"input": {...}}, "steps": {"<step id>": {"output": {...}}}}

for example ``{steps.draft.output.content[0].text}``. A string consisting of a
single placeholder resolves to the raw value; placeholders embedded in a
longer string are interpolated.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Mapping

from ..errors import TemplateResolutionError

logger = logging.getLogger(__name__)

_SEGMENT = r"[A-Za-z_][\w-]*(?:\[\d+\])*"
_PATH = rf"{_SEGMENT}(?:\.{_SEGMENT})*"
_PLACEHOLDER = re.compile(r"\{(" + _PATH + r")\}")
_SINGLE = re.compile(r"^\{(" + _PATH + r")\}$")
_INDEXED = re.compile(r"^([^\[]+)((?:\[\d+\])+)$")


def resolve_path(path: str, scope: Mapping[str, Any]) -> Any:
    value: Any = scope
    for part in path.split("."):
        indexes: list[int] = []
        match = _INDEXED.match(part)
        if match:
            part = match.group(1)
            indexes = [int(i) for i in re.findall(r"\[(\d+)\]", match.group(2))]

        if not isinstance(value, Mapping) or part not in value:
            raise TemplateResolutionError(
                f'Path "{path}" resolution failed: key "{part}" not found.',
                {"path": path},
            )
        value = value[part]

        for index in indexes:
            if not isinstance(value, (list, tuple)):
                raise TemplateResolutionError(
                    f'Path "{path}" resolution failed: expected a list at "{part}" '
                    f"but got {type(value).__name__}.",
                    {"path": path},
                )
            if index >= len(value):
                raise TemplateResolutionError(
                    f'Path "{path}" resolution failed: index {index} out of bounds '
                    f'for "{part}".',
                    {"path": path},
                )
            value = value[index]
    return value


def _embed(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (bool, int, float)):
        return json.dumps(value) if isinstance(value, bool) else str(value)
    return json.dumps(value, default=str)


def resolve_value(value: Any, scope: Mapping[str, Any]) -> Any:
    """Resolve placeholders inside ``value``, recursing into lists and dicts."""
    if isinstance(value, str):
        single = _SINGLE.match(value)
        if single:
            return resolve_path(single.group(1), scope)
        return _PLACEHOLDER.sub(lambda m: _embed(resolve_path(m.group(1), scope)), value)
    if isinstance(value, Mapping):
        return {key: resolve_value(item, scope) for key, item in value.items()}
    if isinstance(value, list):
        return [resolve_value(item, scope) for item in value]
    return value


def resolve_params(params: Mapping[str, Any], scope: Mapping[str, Any]) -> dict[str, Any]:
    resolved = {key: resolve_value(value, scope) for key, value in params.items()}
    logger.debug(f"Resolved step params: {resolved}")
    return resolved
