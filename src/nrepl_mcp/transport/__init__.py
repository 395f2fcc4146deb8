"""HTTP transport for the bridge."""

from nrepl_mcp.transport.starlette import create_starlette_app

__all__ = ["create_starlette_app"]
