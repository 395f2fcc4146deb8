"""Exceptions raised by the bridge.

Two tiers exist. ``ProtocolError`` and its subclasses become JSON-RPC error
envelopes. ``EvaluatorError`` and its subclasses come from the nREPL side and
are turned into tool results with ``isError`` set by the tool handlers.
"""

from typing import Any

from nrepl_mcp.types.json_rpc import INTERNAL_ERROR, RESOURCE_NOT_FOUND, ErrorData


class BridgeError(Exception):
    """Base error for the bridge."""


class ProtocolError(BridgeError):
    """A request that has to be answered with a JSON-RPC error object.

    Attributes:
        error: The ErrorData placed in the response envelope
    """

    error: ErrorData

    def __init__(self, message: str, code: int = INTERNAL_ERROR, data: Any | None = None):
        super().__init__(message)
        self.error = ErrorData(code=code, message=message, data=data)


class ResourceError(ProtocolError):
    """Error in resource operations.

    Defaults to RESOURCE_NOT_FOUND (-32002), the only resource failure the
    bridge reports at the protocol tier.
    """

    def __init__(self, message: str, code: int = RESOURCE_NOT_FOUND, data: Any | None = None):
        super().__init__(message, code=code, data=data)


class EvaluatorError(BridgeError):
    """The evaluator could not be reached or answered with garbage."""


class BencodeError(EvaluatorError):
    """Malformed bencode on the nREPL connection."""


class EvaluationError(EvaluatorError):
    """The evaluator ran the code and reported a failure.

    Only raised by operations that have no outcome to carry the failure in,
    such as requiring a namespace.
    """
