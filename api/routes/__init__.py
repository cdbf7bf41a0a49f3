from __future__ import annotations

from fastapi import APIRouter

from api.routes import blocks, health, peers


def get_api_router() -> APIRouter:
    router = APIRouter()

    router.include_router(health.router, tags=["health"])
    router.include_router(blocks.router, tags=["blocks"])
    router.include_router(peers.router, tags=["peers"])

    return router
