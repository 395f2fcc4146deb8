"""Starlette adapter - the single HTTP endpoint in front of the Dispatcher.

This is the only module with a Starlette dependency. Every POST, whatever
its path, carries one JSON-RPC request; anything else gets a plain-text 404.
"""

from __future__ import annotations

import logging

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response
from starlette.routing import Mount, request_response

from nrepl_mcp.server import Dispatcher

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "MCP server only accepts POST requests"


def create_starlette_app(dispatcher: Dispatcher, *, debug: bool = False) -> Starlette:
    """Create a Starlette ASGI app serving ``dispatcher``.

    Usage:
        app = create_starlette_app(Dispatcher(BridgeSession(), evaluator))
        uvicorn.run(app, host="127.0.0.1", port=8787)
    """

    async def handle_request(request: Request) -> Response:
        if request.method != "POST":
            return PlainTextResponse(NOT_FOUND_MESSAGE, status_code=404)

        body = await request.body()
        response_body = await dispatcher.handle_body(body)
        if response_body is None:
            # Notification: nothing to answer.
            return Response(status_code=202)
        return Response(content=response_body, media_type="application/json")

    # A Mount matches every path and every method; a Route would answer 405 for verbs it does not list.
    return Starlette(debug=debug, routes=[Mount("/", app=request_response(handle_request))])
