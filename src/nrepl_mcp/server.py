"""Request dispatcher - JSON-RPC decoding, the initialize handshake and routing.

No I/O and no transport knowledge: raw request bytes go in, raw response
bytes come out. The HTTP layer in ``nrepl_mcp.transport`` is a thin shell
around ``Dispatcher.handle_body``.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any, Final, TypeVar

from pydantic import BaseModel, ValidationError

from nrepl_mcp.evaluator.base import Evaluator
from nrepl_mcp.exceptions import ProtocolError
from nrepl_mcp.handlers.resources import ResourceHandlers
from nrepl_mcp.handlers.tools import ToolHandlers
from nrepl_mcp.session import BridgeSession
from nrepl_mcp.types.base import PROTOCOL_VERSION
from nrepl_mcp.types.common import Implementation, ServerCapabilities
from nrepl_mcp.types.initialize import InitializeRequestParams, InitializeResult
from nrepl_mcp.types.json_rpc import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    SERVER_NOT_INITIALIZED,
    ErrorData,
    JSONRPCErrorResponse,
    JSONRPCRequest,
    JSONRPCResponse,
    JSONRPCResultResponse,
    RequestId,
)
from nrepl_mcp.types.resources import ListResourcesResult, ReadResourceRequestParams
from nrepl_mcp.types.tools import CallToolRequestParams, ListToolsResult

logger = logging.getLogger(__name__)

SERVER_NAME: Final[str] = "nrepl-mcp"
SERVER_VERSION: Final[str] = "0.1.0"

ParamsT = TypeVar("ParamsT", bound=BaseModel)
RequestHandler = Callable[[JSONRPCRequest], Awaitable[BaseModel]]


class Method(str, Enum):
    INITIALIZE = "initialize"
    TOOLS_LIST = "tools/list"
    TOOLS_CALL = "tools/call"
    RESOURCES_LIST = "resources/list"
    RESOURCES_READ = "resources/read"


class DispatcherState(Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"


def _error(request_id: RequestId | None, code: int, message: str) -> JSONRPCErrorResponse:
    return JSONRPCErrorResponse(id=request_id, error=ErrorData(code=code, message=message))


def _recover_id(payload: dict[str, Any]) -> RequestId | None:
    request_id = payload.get("id")
    if isinstance(request_id, str) or (isinstance(request_id, int) and not isinstance(request_id, bool)):
        return request_id
    return None


def _params(model: type[ParamsT], request: JSONRPCRequest) -> ParamsT:
    try:
        return model.model_validate(request.params or {})
    except ValidationError as exc:
        raise ProtocolError(f"Invalid params for {request.method}: {exc}", code=INVALID_PARAMS) from exc


def encode_response(response: JSONRPCResponse) -> bytes:
    payload = response.model_dump(mode="json", by_alias=True, exclude_none=True)
    # A null id still has to be on the wire.
    payload["id"] = response.id
    return json.dumps(payload).encode("utf-8")


class Dispatcher:
    """The bridge's protocol state machine.

    Starts Uninitialized; the first ``initialize`` request moves it to Ready,
    where it stays until the session is reset. While Uninitialized every
    other method is refused with ``Server not initialized``.

    Usage:
        dispatcher = Dispatcher(BridgeSession(), evaluator)
        response_bytes = await dispatcher.handle_body(request_bytes)
    """

    def __init__(
        self,
        session: BridgeSession,
        evaluator: Evaluator,
        *,
        name: str = SERVER_NAME,
        version: str = SERVER_VERSION,
    ) -> None:
        self.session = session
        self.evaluator = evaluator
        self.server_info = Implementation(name=name, version=version)
        self.tools = ToolHandlers(session, evaluator)
        self.resources = ResourceHandlers(session, evaluator)
        self._handlers: dict[Method, RequestHandler] = {
            Method.INITIALIZE: self._initialize,
            Method.TOOLS_LIST: self._list_tools,
            Method.TOOLS_CALL: self._call_tool,
            Method.RESOURCES_LIST: self._list_resources,
            Method.RESOURCES_READ: self._read_resource,
        }

    @property
    def state(self) -> DispatcherState:
        return DispatcherState.READY if self.session.initialized else DispatcherState.UNINITIALIZED

    def get_capabilities(self) -> ServerCapabilities:
        return ServerCapabilities(tools={}, resources={})

    async def handle_body(self, body: bytes) -> bytes | None:
        """Handle one raw request body. Returns None for notifications."""
        try:
            payload = json.loads(body)
        except (UnicodeDecodeError, json.JSONDecodeError, RecursionError) as exc:
            logger.debug("Unparsable request body: %s", exc)
            return encode_response(_error(None, PARSE_ERROR, f"Parse error: {exc}"))
        response = await self.handle_payload(payload)
        return encode_response(response) if response is not None else None

    async def handle_payload(self, payload: Any) -> JSONRPCResponse | None:
        """Handle one decoded JSON value."""
        if not isinstance(payload, dict):
            return _error(None, INVALID_REQUEST, "Invalid request: expected a JSON object")
        try:
            request = JSONRPCRequest.model_validate(payload)
        except ValidationError as exc:
            return _error(_recover_id(payload), INVALID_REQUEST, f"Invalid request: {exc}")
        if request.is_notification:
            logger.debug("Ignoring notification %s", request.method)
            return None
        return await self.dispatch(request)

    async def dispatch(self, request: JSONRPCRequest) -> JSONRPCResponse:
        """Enforce the handshake, route by method and wrap the result."""
        if self.state is DispatcherState.UNINITIALIZED and request.method != Method.INITIALIZE.value:
            return _error(request.id, SERVER_NOT_INITIALIZED, "Server not initialized")
        try:
            method = Method(request.method)
        except ValueError:
            return _error(request.id, METHOD_NOT_FOUND, f"Unknown method: {request.method}")

        logger.debug("Dispatching %s (id=%r)", method.value, request.id)
        try:
            result = await self._handlers[method](request)
        except ProtocolError as exc:
            return JSONRPCErrorResponse(id=request.id, error=exc.error)
        except Exception as exc:
            logger.exception("Handler error for %s", method.value)
            return _error(request.id, INTERNAL_ERROR, str(exc) or type(exc).__name__)
        return JSONRPCResultResponse(
            id=request.id,
            result=result.model_dump(mode="json", by_alias=True, exclude_none=True),
        )

    async def _initialize(self, request: JSONRPCRequest) -> InitializeResult:
        params = _params(InitializeRequestParams, request)
        client = params.client_info if isinstance(params.client_info, dict) else {}
        logger.info("Initialize from %s %s", client.get("name", "unknown client"), client.get("version", ""))
        self.session.mark_initialized()
        return InitializeResult(
            protocol_version=PROTOCOL_VERSION,
            capabilities=self.get_capabilities(),
            server_info=self.server_info,
        )

    async def _list_tools(self, request: JSONRPCRequest) -> ListToolsResult:
        return ListToolsResult(tools=self.tools.list_tools())

    async def _call_tool(self, request: JSONRPCRequest) -> BaseModel:
        params = _params(CallToolRequestParams, request)
        return await self.tools.call(params.name, params.arguments)

    async def _list_resources(self, request: JSONRPCRequest) -> ListResourcesResult:
        return ListResourcesResult(resources=self.resources.list_resources())

    async def _read_resource(self, request: JSONRPCRequest) -> BaseModel:
        params = _params(ReadResourceRequestParams, request)
        return await self.resources.read(params.uri)
