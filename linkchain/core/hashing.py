"""linkchain.core.hashing

HashLink: the digest that binds a block to its position and predecessor.

hash = sha256(str(index) + previous_hash + str(timestamp) + data)

Fields are concatenated with no separators. Boundaries between fields are
therefore ambiguous ("1" + "23..." == "12" + "3..."); this is the on-wire
format every peer computes, so it is kept as-is and confined to this module.
"""

from __future__ import annotations

import hashlib
import math
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from linkchain.core.models import Block


def render_number(value: int | float) -> str:
    """Render a number the way peers print it: integral floats lose the ``.0``."""

    if isinstance(value, bool):
        raise TypeError("booleans are not block numbers")
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError(f"non-finite number: {value!r}")
        if value.is_integer():
            return str(int(value))
        return repr(value)
    return str(int(value))


def compute_hash(index: int, previous_hash: str, timestamp: int | float, data: str) -> str:
    """Compute the block digest over ``(index, previous_hash, timestamp, data)``."""

    material = f"{render_number(index)}{previous_hash}{render_number(timestamp)}{data}"
    return hashlib.sha256(material.encode("utf-8")).hexdigest()


def block_hash(block: Block) -> str:
    """Recompute the digest of an existing block from its four content fields."""

    return compute_hash(block.index, block.previous_hash, block.timestamp, block.data)
