"""Pydantic models describing registry entities."""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Mapping, Type, Union

from pydantic import BaseModel, ConfigDict, field_validator

from ..contracts import ExecutionContext, ToolResult

ExecuteFn = Callable[
    [BaseModel, Mapping[str, Any], ExecutionContext],
    Union[ToolResult, Awaitable[ToolResult]],
]


class ToolDefinition(BaseModel):
    """Immutable descriptor of a tool exposed through the registry."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    description: str = ""
    input_schema: Type[BaseModel]
    execute: ExecuteFn
    supports_async: bool = False

    @field_validator("name")
    @classmethod
    def _ensure_name(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("tool name must be a non-empty string")
        return v

    def json_schema(self) -> dict[str, Any]:
        """Return the JSON schema of the accepted parameters."""
        return self.input_schema.model_json_schema()
