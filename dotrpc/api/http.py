"""FastAPI adapter exposing a Server over HTTP.

The server runs in suppressed-output mode; FastAPI delivers the raw reply.
"""

from __future__ import annotations

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import Response
from loguru import logger

from dotrpc.rpc.server import Server

JSON_MEDIA_TYPE = "application/json"


def create_router(server: Server, path: str = "/") -> APIRouter:
    """Build POST/GET routes that forward to ``server.handle``."""
    server.suppress_output()
    router = APIRouter()

    @router.post(path)
    async def rpc_post(request: Request) -> Response:
        body = await request.body()
        server.handle(body)
        return _reply(server)

    @router.get(path)
    async def rpc_get(request: Request) -> Response:
        server.handle(query=dict(request.query_params))
        return _reply(server)

    return router


def create_app(server: Server, path: str = "/") -> FastAPI:
    """Create a FastAPI app serving ``server`` at ``path``."""
    app = FastAPI(title="dotrpc")
    app.include_router(create_router(server, path))
    logger.info("JSON-RPC endpoint mounted at {} ({} methods)", path, len(server.list_methods()))
    return app


def _reply(server: Server) -> Response:
    return Response(content=server.get_raw_output(), media_type=JSON_MEDIA_TYPE)
