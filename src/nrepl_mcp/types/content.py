"""MCP Content Types - Content block types used in tool results."""

from typing import Literal

from nrepl_mcp.types.base import MCPModel


class TextContent(MCPModel):
    """Text provided to or from an LLM."""

    type: Literal["text"] = "text"
    text: str
