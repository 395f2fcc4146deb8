"""Tool and resource handlers."""

from nrepl_mcp.handlers.resources import ResourceHandlers, ResourceKind, parse_resource_uri
from nrepl_mcp.handlers.tools import ToolHandlers, ToolName

__all__ = ["ResourceHandlers", "ResourceKind", "ToolHandlers", "ToolName", "parse_resource_uri"]
