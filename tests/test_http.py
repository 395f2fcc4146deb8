"""The bridge over HTTP, exercised via httpx's ASGI transport (no running server)."""

from collections.abc import AsyncIterator
from typing import Any

import httpx
import pytest

from nrepl_mcp.evaluator.base import EvalOutcome
from nrepl_mcp.server import Dispatcher
from nrepl_mcp.session import BridgeSession
from nrepl_mcp.transport.starlette import NOT_FOUND_MESSAGE, create_starlette_app

pytestmark = pytest.mark.anyio


@pytest.fixture
async def client(evaluator) -> AsyncIterator[httpx.AsyncClient]:
    app = create_starlette_app(Dispatcher(BridgeSession(), evaluator))
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as http_client:
        yield http_client


def _init_request(request_id: int = 1) -> dict[str, Any]:
    return {
        "jsonrpc": "2.0",
        "id": request_id,
        "method": "initialize",
        "params": {
            "protocolVersion": "2024-11-05",
            "capabilities": {},
            "clientInfo": {"name": "test-client", "version": "1.0"},
        },
    }


def _call(request_id: int, name: str, arguments: dict[str, Any]) -> dict[str, Any]:
    return {
        "jsonrpc": "2.0",
        "id": request_id,
        "method": "tools/call",
        "params": {"name": name, "arguments": arguments},
    }


async def test_initialize_handshake(client: httpx.AsyncClient) -> None:
    resp = await client.post("/", json=_init_request())

    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/json"
    data = resp.json()
    assert data["jsonrpc"] == "2.0"
    assert data["id"] == 1
    assert data["result"]["protocolVersion"] == "2024-11-05"
    assert data["result"]["serverInfo"]["name"] == "nrepl-mcp"


async def test_any_path_accepts_post(client: httpx.AsyncClient) -> None:
    resp = await client.post("/mcp", json=_init_request())

    assert resp.status_code == 200
    assert resp.json()["id"] == 1


@pytest.mark.parametrize("method", ["GET", "PUT", "DELETE", "OPTIONS", "PATCH", "TRACE", "PROPFIND"])
async def test_non_post_is_not_found(client: httpx.AsyncClient, method: str) -> None:
    resp = await client.request(method, "/")

    assert resp.status_code == 404
    assert resp.headers["content-type"].startswith("text/plain")
    assert resp.text == NOT_FOUND_MESSAGE


async def test_request_before_initialize(client: httpx.AsyncClient) -> None:
    resp = await client.post("/", json=_call(2, "eval-clojure", {"code": "(+ 1 2 3)"}))

    assert resp.status_code == 200
    assert resp.json()["error"]["message"] == "Server not initialized"


async def test_notification_is_accepted_without_body(client: httpx.AsyncClient) -> None:
    resp = await client.post("/", json={"jsonrpc": "2.0", "method": "notifications/initialized"})

    assert resp.status_code == 202
    assert resp.content == b""


async def test_malformed_body(client: httpx.AsyncClient) -> None:
    resp = await client.post("/", content=b"this is not json", headers={"content-type": "application/json"})

    assert resp.status_code == 200
    data = resp.json()
    assert data["id"] is None
    assert data["error"]["code"] == -32700


async def test_session_flow(client: httpx.AsyncClient, evaluator) -> None:
    evaluator.outcomes["(+ 1 2 3)"] = EvalOutcome(value="6")
    evaluator.outcomes["(/ 1 0)"] = EvalOutcome(value=None, err="Error: Divide by zero\n")

    await client.post("/", json=_init_request())

    resp = await client.post("/", json=_call(2, "eval-clojure", {"code": "(+ 1 2 3)"}))
    assert resp.json()["result"] == {"content": [{"type": "text", "text": "6"}], "isError": False}

    resp = await client.post("/", json=_call(3, "eval-clojure", {"code": "(/ 1 0)"}))
    result = resp.json()["result"]
    assert result["isError"] is False
    assert "Divide by zero" in result["content"][0]["text"]

    resp = await client.post("/", json=_call(4, "load-file", {"file-path": "/tmp/does-not-exist.clj"}))
    result = resp.json()["result"]
    assert result["isError"] is True
    assert "File not found" in result["content"][0]["text"]

    resp = await client.post("/", json=_call(5, "set-ns", {"namespace": "clojure.string"}))
    assert resp.json()["result"]["isError"] is False

    resp = await client.post(
        "/",
        json={"jsonrpc": "2.0", "id": 6, "method": "resources/read", "params": {"uri": "clojure://session/current-ns"}},
    )
    assert resp.json()["result"]["contents"][0]["text"] == "clojure.string"

    resp = await client.post(
        "/",
        json={"jsonrpc": "2.0", "id": "seven", "method": "resources/read", "params": {"uri": "clojure://bogus/x"}},
    )
    data = resp.json()
    assert data["id"] == "seven"
    assert data["error"]["code"] == -32002
