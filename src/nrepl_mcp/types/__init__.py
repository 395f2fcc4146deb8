"""Protocol models: JSON-RPC envelopes and the MCP subset the bridge serves."""

from nrepl_mcp.types.base import PROTOCOL_VERSION, MCPModel, Result
from nrepl_mcp.types.common import Implementation, ServerCapabilities
from nrepl_mcp.types.content import TextContent
from nrepl_mcp.types.initialize import InitializeRequestParams, InitializeResult
from nrepl_mcp.types.json_rpc import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    JSONRPC_VERSION,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    RESOURCE_NOT_FOUND,
    SERVER_NOT_INITIALIZED,
    ErrorData,
    JSONRPCErrorResponse,
    JSONRPCRequest,
    JSONRPCResponse,
    JSONRPCResultResponse,
    RequestId,
)
from nrepl_mcp.types.resources import (
    ListResourcesResult,
    ReadResourceRequestParams,
    ReadResourceResult,
    Resource,
    TextResourceContents,
)
from nrepl_mcp.types.tools import CallToolRequestParams, CallToolResult, JsonSchema, ListToolsResult, Tool

__all__ = [
    "PROTOCOL_VERSION",
    "JSONRPC_VERSION",
    "PARSE_ERROR",
    "INVALID_REQUEST",
    "METHOD_NOT_FOUND",
    "INVALID_PARAMS",
    "INTERNAL_ERROR",
    "SERVER_NOT_INITIALIZED",
    "RESOURCE_NOT_FOUND",
    "MCPModel",
    "Result",
    "Implementation",
    "ServerCapabilities",
    "TextContent",
    "InitializeRequestParams",
    "InitializeResult",
    "ErrorData",
    "JSONRPCErrorResponse",
    "JSONRPCRequest",
    "JSONRPCResponse",
    "JSONRPCResultResponse",
    "RequestId",
    "ListResourcesResult",
    "ReadResourceRequestParams",
    "ReadResourceResult",
    "Resource",
    "TextResourceContents",
    "CallToolRequestParams",
    "CallToolResult",
    "JsonSchema",
    "ListToolsResult",
    "Tool",
]
