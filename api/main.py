from __future__ import annotations

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI

from api.errors import LinkchainAPIError, linkchain_error_handler
from api.routes import get_api_router
from linkchain import __version__
from linkchain.node import Node


def create_app(node: Node | None = None) -> FastAPI:
    """Control surface for one node. The node is injected; the app never builds one."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.started_at = time.monotonic()
        yield

    openapi_tags = [
        {"name": "health", "description": "Liveness, version and node counters."},
        {"name": "blocks", "description": "Read the chain and append new payload data."},
        {"name": "peers", "description": "Inspect and open peer links."},
    ]

    app = FastAPI(
        title="linkchain API",
        description="Control surface for a linkchain node",
        version=__version__,
        openapi_tags=openapi_tags,
        lifespan=lifespan,
    )
    app.state.node = node
    app.state.started_at = time.monotonic()

    app.add_exception_handler(LinkchainAPIError, linkchain_error_handler)
    app.include_router(get_api_router())
    return app
