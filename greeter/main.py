import ipaddress
import logging
from typing import Awaitable, Callable, Optional

from fastapi import FastAPI, Request, Response
from fastapi.responses import PlainTextResponse
from starlette.types import Receive, Scope, Send

from .config import resolve_hostname

logger = logging.getLogger(__name__)

GREETING = "Hello from Go Web App Demo for DockerHub and GHCR"


class AnyMethod:
    """ASGI endpoint serving ``handler`` whatever the request method.

    Routes built from a plain ASGI app carry no method list, so Starlette
    never answers 405 for them.
    """

    def __init__(self, handler: Callable[[Request], Awaitable[Response]]) -> None:
        self.handler = handler

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        response = await self.handler(Request(scope, receive))
        await response(scope, receive, send)


def remote_addr(request: Request) -> str:
    if request.client is None:
        return "-"
    host, port = request.client.host, request.client.port
    try:
        ip = ipaddress.ip_address(host)
    except ValueError:
        return f"{host}:{port}"
    if ip.version == 6 and ip.ipv4_mapped is not None:
        return f"{ip.ipv4_mapped}:{port}"
    if ip.version == 6:
        return f"[{ip}]:{port}"
    return f"{ip}:{port}"


def create_app(hostname: Optional[str] = None) -> FastAPI:
    """Build the application with both routes bound to ``hostname``.

    ``/health`` is matched exactly. Every other path, ``/`` included, falls
    through to the greeting route, which is registered last. Neither route
    looks at the method, headers or body.
    """
    if hostname is None:
        hostname = resolve_hostname()
    greeting = f"{GREETING} {hostname}\n"

    app = FastAPI(title="Greeter", version="1.0.0", docs_url=None, redoc_url=None, openapi_url=None)

    # === Health ===

    async def health(request: Request) -> Response:
        response = PlainTextResponse("OK", status_code=200)
        logger.info("Health check request received from %s", remote_addr(request))
        return response

    # === Greeting (catch-all) ===

    async def root(request: Request) -> Response:
        response = PlainTextResponse(greeting)
        logger.info("Request received from %s", remote_addr(request))
        return response

    app.add_route("/health", AnyMethod(health))
    app.add_route("/{path:path}", AnyMethod(root))
    return app


app = create_app()
