"""Tool handlers - eval-clojure, load-file, set-ns and apropos.

Every failure a tool can hit is reported inside the CallToolResult with
``isError`` set. Nothing here raises into the dispatcher except programming
errors.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any

from nrepl_mcp.evaluator.base import EvalOutcome, Evaluator
from nrepl_mcp.evaluator.clojure import apropos_form, load_file_form
from nrepl_mcp.exceptions import EvaluatorError
from nrepl_mcp.session import BridgeSession
from nrepl_mcp.types.tools import CallToolResult, JsonSchema, Tool

logger = logging.getLogger(__name__)


class ToolName(str, Enum):
    EVAL = "eval-clojure"
    LOAD_FILE = "load-file"
    SET_NS = "set-ns"
    APROPOS = "apropos"


ToolHandler = Callable[[dict[str, Any]], Awaitable[CallToolResult]]


def _string_schema(name: str, description: str) -> JsonSchema:
    return JsonSchema(properties={name: {"type": "string", "description": description}}, required=[name])


TOOL_CATALOG: dict[ToolName, Tool] = {
    ToolName.EVAL: Tool(
        name=ToolName.EVAL.value,
        description="Evaluate Clojure code",
        input_schema=_string_schema("code", "The Clojure code to evaluate"),
    ),
    ToolName.LOAD_FILE: Tool(
        name=ToolName.LOAD_FILE.value,
        description="Load and evaluate a Clojure file",
        input_schema=_string_schema("file-path", "The path to the Clojure file to load"),
    ),
    ToolName.SET_NS: Tool(
        name=ToolName.SET_NS.value,
        description="Switch to a different namespace",
        input_schema=_string_schema("namespace", "The namespace to switch to"),
    ),
    ToolName.APROPOS: Tool(
        name=ToolName.APROPOS.value,
        description="Search for symbols matching a pattern",
        input_schema=_string_schema("query", "Search pattern to match against symbol names"),
    ),
}


def format_outcome(outcome: EvalOutcome) -> str:
    """Join the non-blank parts of an outcome (stdout, stderr, value) with newlines."""
    parts = [outcome.out, outcome.err, outcome.value or ""]
    return "\n".join(part for part in parts if part.strip())


def _required_argument(arguments: dict[str, Any], name: str) -> str | None:
    value = arguments.get(name)
    if not isinstance(value, str) or not value.strip():
        return None
    return value


def _missing(name: str) -> CallToolResult:
    return CallToolResult.error(f"Error: {name} parameter is required and cannot be empty")


class ToolHandlers:
    """The four tools, bound to one session and one evaluator."""

    def __init__(self, session: BridgeSession, evaluator: Evaluator) -> None:
        self.session = session
        self.evaluator = evaluator
        self._handlers: dict[ToolName, ToolHandler] = {
            ToolName.EVAL: self.eval_clojure,
            ToolName.LOAD_FILE: self.load_file,
            ToolName.SET_NS: self.set_ns,
            ToolName.APROPOS: self.apropos,
        }

    def list_tools(self) -> list[Tool]:
        return list(TOOL_CATALOG.values())

    async def call(self, name: str, arguments: dict[str, Any] | None) -> CallToolResult:
        try:
            tool = ToolName(name)
        except ValueError:
            return CallToolResult.error(f"Unknown tool: {name}")
        logger.debug("Calling tool %s", tool.value)
        return await self._handlers[tool](arguments or {})

    async def eval_clojure(self, arguments: dict[str, Any]) -> CallToolResult:
        code = _required_argument(arguments, "code")
        if code is None:
            return _missing("Code")
        try:
            outcome = await self.evaluator.evaluate(code, self.session.current_namespace)
        except EvaluatorError as exc:
            return CallToolResult.error(f"Error evaluating Clojure code: {exc}")
        # Evaluation failures are already spelled out in outcome.err.
        return CallToolResult.text(format_outcome(outcome) or "nil")

    async def load_file(self, arguments: dict[str, Any]) -> CallToolResult:
        file_path = _required_argument(arguments, "file-path")
        if file_path is None:
            return _missing("file-path")
        try:
            if not await self.evaluator.file_exists(file_path):
                return CallToolResult.error(f"Error: File not found: {file_path}")
            outcome = await self.evaluator.evaluate(load_file_form(file_path), self.session.current_namespace)
        except EvaluatorError as exc:
            return CallToolResult.error(f"Error loading file: {exc}")
        return CallToolResult.text(format_outcome(outcome) or f"Successfully loaded file: {file_path}")

    async def set_ns(self, arguments: dict[str, Any]) -> CallToolResult:
        namespace = _required_argument(arguments, "namespace")
        if namespace is None:
            return _missing("namespace")
        try:
            await self.evaluator.require_namespace(namespace)
        except EvaluatorError as exc:
            return CallToolResult.error(f"Error switching namespace: {exc}")
        self.session.switch_namespace(namespace)
        logger.info("Switched namespace to %s", namespace)
        return CallToolResult.text(f"Successfully switched to namespace: {namespace}")

    async def apropos(self, arguments: dict[str, Any]) -> CallToolResult:
        query = _required_argument(arguments, "query")
        if query is None:
            return _missing("query")
        try:
            outcome = await self.evaluator.evaluate(apropos_form(query), self.session.current_namespace)
        except EvaluatorError as exc:
            return CallToolResult.error(f"Error searching symbols: {exc}")
        text = format_outcome(outcome)
        if text.strip() in ("", "nil", "()"):
            return CallToolResult.text("No matches found")
        return CallToolResult.text(text)
