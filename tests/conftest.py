from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from typing import Any

import anyio
import pytest
from anyio.abc import SocketAttribute, SocketStream
from anyio.streams.buffered import BufferedByteReceiveStream

from nrepl_mcp.evaluator import bencode
from nrepl_mcp.evaluator.base import EvalOutcome
from nrepl_mcp.exceptions import EvaluationError


@pytest.fixture
def anyio_backend():
    return "asyncio"


class FakeEvaluator:
    """In-memory Evaluator: canned outcomes keyed by the exact code string.

    Code without a canned outcome evaluates to ``nil``. Setting ``fault``
    makes every call fail the way a lost nREPL connection does.
    """

    def __init__(self) -> None:
        self.outcomes: dict[str, EvalOutcome] = {}
        self.namespaces: set[str] = {"user", "clojure.core", "clojure.string"}
        self.files: set[str] = set()
        self.fault: Exception | None = None
        self.calls: list[tuple[str, str]] = []

    async def evaluate(self, code: str, namespace: str) -> EvalOutcome:
        self.calls.append((code, namespace))
        if self.fault is not None:
            raise self.fault
        return self.outcomes.get(code, EvalOutcome(value="nil"))

    async def require_namespace(self, namespace: str) -> None:
        self.calls.append((f"require {namespace}", "user"))
        if self.fault is not None:
            raise self.fault
        if namespace not in self.namespaces:
            raise EvaluationError(f"Could not locate {namespace.replace('.', '/')}__init.class on classpath.")

    async def file_exists(self, path: str) -> bool:
        if self.fault is not None:
            raise self.fault
        return path in self.files


@pytest.fixture
def evaluator() -> FakeEvaluator:
    return FakeEvaluator()


@dataclass
class FakeNRepl:
    """A scripted nREPL server speaking bencode over TCP.

    ``scripts`` maps eval code to the response messages sent back (the
    request id is filled in unless the message sets its own, and a final
    ``done`` status is appended). Code in ``hang_up`` makes the server drop
    the connection instead of answering.
    """

    port: int = 0
    session: str = "fake-session-1"
    scripts: dict[str, list[dict[str, Any]]] = field(default_factory=dict)
    hang_up: set[str] = field(default_factory=set)
    received: list[dict[str, Any]] = field(default_factory=list)

    def ops(self) -> list[str]:
        return [message["op"] for message in self.received]

    async def handle(self, stream: SocketStream) -> None:
        reader = BufferedByteReceiveStream(stream)
        async with stream:
            while True:
                try:
                    message = await bencode.read_value(reader)
                except (anyio.EndOfStream, anyio.BrokenResourceError):
                    return
                assert isinstance(message, dict)
                self.received.append(message)
                if message.get("code") in self.hang_up:
                    return
                for reply in self.replies(message):
                    await stream.send(bencode.encode(reply))

    def replies(self, message: dict[str, Any]) -> list[dict[str, Any]]:
        request_id = message["id"]
        op = message.get("op")
        if op == "clone":
            return [{"id": request_id, "new-session": self.session, "status": ["done"]}]
        if op == "close":
            return [{"id": request_id, "status": ["done", "session-closed"]}]
        if op == "eval":
            script = self.scripts.get(message["code"], [{"value": "nil"}])
            return [{"id": request_id, **part} for part in script] + [{"id": request_id, "status": ["done"]}]
        return [{"id": request_id, "status": ["done", "error", "unknown-op"]}]


@pytest.fixture
async def fake_nrepl() -> AsyncIterator[FakeNRepl]:
    listener = await anyio.create_tcp_listener(local_host="127.0.0.1")
    nrepl = FakeNRepl(port=listener.extra(SocketAttribute.local_port))
    async with listener, anyio.create_task_group() as tg:
        tg.start_soon(listener.serve, nrepl.handle)
        yield nrepl
        tg.cancel_scope.cancel()
