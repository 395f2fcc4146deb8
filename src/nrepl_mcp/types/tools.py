"""MCP Tools Types - Types for tool listing and invocation."""

from typing import Annotated, Any, Literal

from pydantic import Field

from nrepl_mcp.types.base import MCPModel, Meta, RequestParams, Result
from nrepl_mcp.types.content import TextContent


class JsonSchema(MCPModel):
    """A JSON Schema object."""

    type: Literal["object"] = "object"
    properties: dict[str, Any] | None = None
    required: list[str] | None = None


class Tool(MCPModel):
    """Definition of a tool the server provides."""

    name: str
    input_schema: Annotated[JsonSchema, Field(alias="inputSchema")]
    description: str | None = None


class ListToolsResult(Result[Meta]):
    """Server's response to a tools/list request."""

    tools: list[Tool]


class CallToolRequestParams(RequestParams):
    """Parameters for tools/call request."""

    name: str
    arguments: dict[str, Any] | None = None


class CallToolResult(Result[Meta]):
    """Server's response to a tools/call request.

    Tool failures travel here with ``is_error`` set, never as JSON-RPC errors,
    so the calling agent always sees the tool-result shape.
    """

    content: list[TextContent]
    is_error: Annotated[bool, Field(alias="isError")] = False

    @classmethod
    def text(cls, text: str, *, is_error: bool = False) -> "CallToolResult":
        return cls(content=[TextContent(text=text)], is_error=is_error)

    @classmethod
    def error(cls, text: str) -> "CallToolResult":
        return cls.text(text, is_error=True)
