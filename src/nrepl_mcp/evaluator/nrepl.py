"""nREPL client - the Evaluator backed by a running nREPL server.

Speaks bencode over a single TCP connection and evaluates inside one cloned
nREPL session, so definitions made through the bridge persist between calls
the same way they do at an interactive REPL.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any
from uuid import uuid4

import anyio
from anyio.abc import SocketStream
from anyio.streams.buffered import BufferedByteReceiveStream

from nrepl_mcp.evaluator import bencode
from nrepl_mcp.evaluator.base import EvalOutcome, OutputBuffer
from nrepl_mcp.evaluator.clojure import require_form
from nrepl_mcp.exceptions import BencodeError, EvaluationError, EvaluatorError

logger = logging.getLogger(__name__)

DEFAULT_HOST = "127.0.0.1"
# Namespace every Clojure process has; used for evaluations that must not
# depend on the caller's current namespace.
ROOT_NAMESPACE = "user"

_FAILURE_STATUSES = frozenset({"eval-error", "error", "namespace-not-found", "unknown-op"})


class NReplEvaluator:
    """Evaluator talking to an nREPL server.

    Usage:
        async with NReplEvaluator(port=7888) as evaluator:
            outcome = await evaluator.evaluate("(+ 1 2 3)", "user")
            assert outcome.value == "6"

    One request is in flight at a time: each round trip holds a lock from
    sending the message until the ``done`` status arrives, so output from one
    evaluation can never be attributed to another.
    """

    def __init__(self, host: str = DEFAULT_HOST, port: int = 7888, *, connect_timeout: float = 5.0) -> None:
        self.host = host
        self.port = port
        self.connect_timeout = connect_timeout
        self.session_id: str | None = None
        self._stream: SocketStream | None = None
        self._reader: BufferedByteReceiveStream | None = None
        self._lock = anyio.Lock()

    async def __aenter__(self) -> NReplEvaluator:
        await self.connect()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    @property
    def connected(self) -> bool:
        return self._stream is not None

    async def connect(self) -> None:
        """Open the connection and clone a fresh nREPL session."""
        try:
            with anyio.fail_after(self.connect_timeout):
                self._stream = await anyio.connect_tcp(self.host, self.port)
        except (OSError, TimeoutError) as exc:
            raise EvaluatorError(f"Cannot connect to nREPL at {self.host}:{self.port}: {exc}") from exc
        self._reader = BufferedByteReceiveStream(self._stream)

        responses = await self._round_trip({"op": "clone"})
        self.session_id = next((r["new-session"] for r in responses if "new-session" in r), None)
        if self.session_id is None:
            await self._close_stream()
            raise EvaluatorError("nREPL server did not return a session for clone")
        logger.info("Connected to nREPL at %s:%d (session %s)", self.host, self.port, self.session_id)

    async def aclose(self) -> None:
        """Close the nREPL session and the connection."""
        if self._stream is None:
            return
        if self.session_id is not None:
            try:
                await self._round_trip({"op": "close", "session": self.session_id})
            except EvaluatorError as exc:
                logger.warning("Could not close nREPL session %s: %s", self.session_id, exc)
        self.session_id = None
        await self._close_stream()
        logger.info("Disconnected from nREPL at %s:%d", self.host, self.port)

    async def evaluate(self, code: str, namespace: str) -> EvalOutcome:
        buffer = OutputBuffer()
        message = {"op": "eval", "code": code, "ns": namespace}
        if self.session_id is not None:
            message["session"] = self.session_id
        responses = await self._round_trip(message)
        return _collect(responses, buffer, namespace)

    async def require_namespace(self, namespace: str) -> None:
        outcome = await self.evaluate(require_form(namespace), ROOT_NAMESPACE)
        if outcome.failed:
            raise EvaluationError(outcome.err.removeprefix("Error: ").splitlines()[0])

    async def file_exists(self, path: str) -> bool:
        return await anyio.Path(path).is_file()

    async def _round_trip(self, message: dict[str, Any]) -> list[dict[str, Any]]:
        """Send one request and gather every response carrying its id until ``done``."""
        if self._stream is None or self._reader is None:
            raise EvaluatorError("Not connected to nREPL")

        message_id = uuid4().hex
        responses: list[dict[str, Any]] = []
        async with self._lock:
            try:
                await self._stream.send(bencode.encode({**message, "id": message_id}))
                while True:
                    response = await bencode.read_value(self._reader)
                    if not isinstance(response, dict):
                        raise BencodeError(f"Unexpected nREPL message: {response!r}")
                    if response.get("id") != message_id:
                        logger.debug("Skipping nREPL message for another request: %r", response)
                        continue
                    responses.append(response)
                    if "done" in _statuses(response):
                        return responses
            except (anyio.EndOfStream, anyio.BrokenResourceError, anyio.ClosedResourceError, OSError) as exc:
                await self._close_stream()
                raise EvaluatorError(f"Lost connection to nREPL: {exc!r}") from exc
            except BencodeError:
                await self._close_stream()
                raise

    async def _close_stream(self) -> None:
        stream, self._stream, self._reader = self._stream, None, None
        if stream is not None:
            await stream.aclose()


def _statuses(response: dict[str, Any]) -> set[str]:
    status = response.get("status", [])
    return {status} if isinstance(status, str) else set(status)


def _collect(responses: Iterable[dict[str, Any]], buffer: OutputBuffer, namespace: str) -> EvalOutcome:
    """Fold the response messages of one evaluation into an EvalOutcome."""
    statuses: set[str] = set()
    exception: str | None = None
    for response in responses:
        if "out" in response:
            buffer.write_out(response["out"])
        if "err" in response:
            buffer.write_err(response["err"])
        if "value" in response:
            buffer.add_value(response["value"])
        if "ex" in response:
            exception = response["ex"]
        statuses |= _statuses(response)

    if "namespace-not-found" in statuses:
        return buffer.failure(f"Namespace not found: {namespace}")
    if exception is not None or "eval-error" in statuses:
        return buffer.failure(_error_message(buffer, exception))
    if statuses & _FAILURE_STATUSES:
        return buffer.failure("nREPL reported " + ", ".join(sorted(statuses - {"done"})))
    return buffer.outcome()


def _error_message(buffer: OutputBuffer, exception: str | None) -> str:
    # The REPL prints the exception message as the last stderr line.
    lines = [line.strip() for line in "".join(buffer.err).splitlines() if line.strip()]
    if lines:
        return lines[-1]
    return exception or "Evaluation failed"
