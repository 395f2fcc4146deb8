"""MCP bridge to a running nREPL session."""

from nrepl_mcp.evaluator import EvalOutcome, Evaluator, NReplEvaluator
from nrepl_mcp.runner import BridgeServer
from nrepl_mcp.server import SERVER_VERSION, Dispatcher
from nrepl_mcp.session import BridgeSession
from nrepl_mcp.settings import BridgeSettings

__version__ = SERVER_VERSION

__all__ = [
    "BridgeServer",
    "BridgeSession",
    "BridgeSettings",
    "Dispatcher",
    "EvalOutcome",
    "Evaluator",
    "NReplEvaluator",
    "__version__",
]
