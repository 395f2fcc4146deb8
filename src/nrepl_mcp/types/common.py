"""MCP Common Types - Shared types used across the protocol."""

from typing import Any

from nrepl_mcp.types.base import MCPModel


class Implementation(MCPModel):
    """Name and version of the bridge, as reported in ``serverInfo``."""

    name: str
    version: str
    title: str | None = None


class ServerCapabilities(MCPModel):
    """What the bridge offers. Only tools and resources; both take no options."""

    resources: dict[str, Any] | None = None
    tools: dict[str, Any] | None = None
