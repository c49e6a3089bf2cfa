"""ASGI handler — translates ASGI scope/messages to wren types.

The only component that touches raw HTTP scopes directly. Converts the
scope to a typed Request, runs it through the pipeline with route
dispatch as the innermost endpoint, and sends the Response back through
ASGI ``send()``.
"""

from wren._internal.asgi import Receive, Scope, Send
from wren.http.request import Request
from wren.middleware.pipeline import MiddlewarePipeline
from wren.routing.table import RouteTable
from wren.server.sender import send_response


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    pipeline: MiddlewarePipeline,
    routes: RouteTable,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)
    response = await pipeline.run(request, routes.dispatch)
    await send_response(response, send, head=request.method == "HEAD")
