"""linkchain.core.models

Core domain models.

A block is immutable once created. The chain only ever grows at the tip, or is
swapped out whole for a longer one.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from linkchain.core.hashing import compute_hash

GENESIS_PREVIOUS_HASH = "0"


class Block(BaseModel):
    """One ledger entry. Wire field names are camelCase (``previousHash``)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    index: int = Field(ge=0)
    previous_hash: str = Field(alias="previousHash")
    timestamp: float
    data: str
    hash: str

    def to_wire(self) -> dict[str, Any]:
        """Block encoding shared by the wire protocol and the control surface."""

        out = self.model_dump(by_alias=True)
        # Integral timestamps travel as integers, matching how they are hashed.
        if float(self.timestamp).is_integer():
            out["timestamp"] = int(self.timestamp)
        return out

    @classmethod
    def from_wire(cls, raw: dict[str, Any]) -> Block:
        return cls.model_validate(raw)


def build_block(*, index: int, previous_hash: str, timestamp: float, data: str) -> Block:
    """Build a block whose hash is computed from its content fields."""

    return Block(
        index=index,
        previous_hash=previous_hash,
        timestamp=timestamp,
        data=data,
        hash=compute_hash(index, previous_hash, timestamp, data),
    )


def genesis_block(*, data: str, hash: str, timestamp: float) -> Block:
    """Block 0 from the configured genesis pair.

    The hash is taken as configured, not recomputed: it is a shared constant
    that every cooperating node must carry bit-for-bit.
    """

    return Block(
        index=0,
        previous_hash=GENESIS_PREVIOUS_HASH,
        timestamp=timestamp,
        data=data,
        hash=hash,
    )
