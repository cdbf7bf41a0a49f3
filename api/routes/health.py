from __future__ import annotations

import time

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from api.deps import get_node
from linkchain import __version__
from linkchain.node import Node

router = APIRouter()


class HealthResponse(BaseModel):
    version: str
    uptime_seconds: float
    chain_length: int
    latest_index: int
    latest_hash: str
    peers: int
    metrics: dict[str, float]


@router.get("/health", response_model=HealthResponse)
def health(request: Request, node: Node = Depends(get_node)) -> HealthResponse:
    started_at = float(getattr(request.app.state, "started_at", time.monotonic()))
    tip = node.ledger.latest()

    return HealthResponse(
        version=__version__,
        uptime_seconds=time.monotonic() - started_at,
        chain_length=len(node.ledger),
        latest_index=tip.index,
        latest_hash=tip.hash,
        peers=len(node.registry),
        metrics=node.metrics.snapshot(),
    )
