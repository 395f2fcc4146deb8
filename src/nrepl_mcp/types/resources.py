"""MCP Resource Types - Types for resources."""

from typing import Annotated

from pydantic import Field

from nrepl_mcp.types.base import MCPModel, Meta, RequestParams, Result

# URIs are plain strings: ``clojure://doc/clojure.core/+`` must be echoed
# back exactly, so no URL normalisation is applied.
Uri = str


class ResourceContents(MCPModel):
    """The contents of a specific resource or sub-resource."""

    uri: Uri
    mime_type: Annotated[str | None, Field(alias="mimeType")] = None


class TextResourceContents(ResourceContents):
    """Text contents of a resource."""

    text: str


class Resource(MCPModel):
    """A known resource that the server is capable of reading."""

    uri: Uri
    name: str
    description: str | None = None
    mime_type: Annotated[str | None, Field(alias="mimeType")] = None


class ListResourcesResult(Result[Meta]):
    """Server's response to a resources/list request."""

    resources: list[Resource]


class ReadResourceRequestParams(RequestParams):
    """Parameters for resources/read request."""

    uri: Uri


class ReadResourceResult(Result[Meta]):
    """Server's response to a resources/read request."""

    contents: list[TextResourceContents]
