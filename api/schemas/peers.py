from __future__ import annotations

from pydantic import BaseModel, Field


class AddPeerRequest(BaseModel):
    peer: str = Field(..., description="Peer endpoint, e.g. ws://localhost:6001")


class AddPeerResponse(BaseModel):
    status: str
    peer: str
