"""MCP Initialize Types - Types for the initialize handshake."""

from typing import Annotated, Any

from pydantic import Field

from nrepl_mcp.types.base import Meta, RequestParams, Result
from nrepl_mcp.types.common import Implementation, ServerCapabilities


class InitializeRequestParams(RequestParams):
    """Parameters for the initialize request.

    Untyped on purpose: the bridge answers any ``initialize``, whatever
    shape the client sends, and does not negotiate on it.
    """

    meta: Annotated[Any, Field(alias="_meta")] = None
    protocol_version: Annotated[Any, Field(alias="protocolVersion")] = None
    capabilities: Any = None
    client_info: Annotated[Any, Field(alias="clientInfo")] = None


class InitializeResult(Result[Meta]):
    """Server's response to an initialize request."""

    protocol_version: Annotated[str, Field(alias="protocolVersion")]
    capabilities: ServerCapabilities
    server_info: Annotated[Implementation, Field(alias="serverInfo")]
    instructions: str | None = None
