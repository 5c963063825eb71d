from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Union

from pydantic import BaseModel

if TYPE_CHECKING:
    from websearch_mcp.config.settings import Settings
    from websearch_mcp.terminal.manager import TerminalSessionManager


def _dumps(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)


@dataclass(frozen=True)
class ContentPart:
    payload: str
    kind: str = "text"


@dataclass(frozen=True)
class ToolOk:
    content: tuple[ContentPart, ...]
    is_error: bool = field(default=False, init=False)

    @property
    def text(self) -> str:
        return "\n".join(part.payload for part in self.content)


@dataclass(frozen=True)
class ToolError:
    """Structured failure returned by a tool instead of raising.

    Rendered as a single JSON text part so remote callers always get a
    serializable body: ``{"success": false, "error": ..., **details, "message": ...}``.
    """

    error: str
    message: str | None = None
    details: dict[str, Any] = field(default_factory=dict)
    is_error: bool = field(default=True, init=False)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"success": False, "error": self.error}
        payload.update(self.details)
        if self.message:
            payload["message"] = self.message
        return payload

    @property
    def content(self) -> tuple[ContentPart, ...]:
        return (ContentPart(_dumps(self.to_payload())),)

    @property
    def text(self) -> str:
        return self.content[0].payload


ToolResult = Union[ToolOk, ToolError]


def text_result(text: str) -> ToolOk:
    return ToolOk(content=(ContentPart(text),))


def json_result(data: Any) -> ToolOk:
    return ToolOk(content=(ContentPart(_dumps(data)),))


@dataclass(frozen=True)
class Tool:
    """A named operation with a pydantic argument schema and an async handler.

    Attributes:
        name: The unique, stable identifier for the tool.
        description: Surfaced to callers for discovery.
        args_schema: Pydantic model validating the raw JSON arguments.
        handler: Coroutine called with the validated arguments as keywords.
    """

    name: str
    description: str
    args_schema: type[BaseModel]
    handler: Callable[..., Awaitable[ToolResult]]

    def input_schema(self) -> dict[str, Any]:
        return self.args_schema.model_json_schema()


@dataclass(frozen=True)
class Adapter:
    name: str
    description: str
    tools: tuple[Tool, ...] = ()


@dataclass(frozen=True)
class AdapterContext:
    """Dependencies handed to adapter builders at registration time."""

    settings: Settings
    terminals: TerminalSessionManager


@dataclass(frozen=True)
class AdapterSpec:
    """Static definition of an adapter module and its builder function.

    Attributes:
        name: The unique identifier for the adapter.
        builder: A callable taking an AdapterContext and returning the Adapter.
        intent: Formal semantic purpose of the adapter for developer clarity.
        schema_notes: Expected input/output patterns and semantic constraints.
    """

    name: str
    builder: Callable[[AdapterContext], Adapter]
    intent: str = ""
    schema_notes: str = ""
