from __future__ import annotations

from pydantic import BaseModel, Field

from linkchain.core.models import Block


class BlockResponse(BaseModel):
    """Block in its wire encoding (camelCase ``previousHash``)."""

    index: int
    previousHash: str  # noqa: N815
    timestamp: int | float
    data: str
    hash: str

    @classmethod
    def from_block(cls, block: Block) -> BlockResponse:
        return cls(**block.to_wire())


class MineBlockRequest(BaseModel):
    data: str = Field(..., description="Opaque payload stored in the new block")
