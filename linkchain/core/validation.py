"""linkchain.core.validation

Validator: does a block extend a reference block, does a chain hold together.

Pure functions. A rejection is an expected outcome, reported as ``False`` and a
log line, never as an exception.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from linkchain.core.hashing import block_hash
from linkchain.core.models import Block

logger = logging.getLogger(__name__)


def is_valid_successor(candidate: Block, reference: Block) -> bool:
    """Check, in order: index, hash link, content hash."""

    if candidate.index != reference.index + 1:
        logger.info(
            "invalid_index",
            extra={"expected": reference.index + 1, "got": candidate.index},
        )
        return False
    if candidate.previous_hash != reference.hash:
        logger.info(
            "invalid_previous_hash",
            extra={"index": candidate.index, "expected": reference.hash, "got": candidate.previous_hash},
        )
        return False
    recomputed = block_hash(candidate)
    if recomputed != candidate.hash:
        logger.info(
            "invalid_hash",
            extra={"index": candidate.index, "expected": recomputed, "got": candidate.hash},
        )
        return False
    return True


def is_valid_chain(chain: Sequence[Block], genesis: Block) -> bool:
    """A chain is valid if it starts at our genesis and every link holds."""

    if not chain:
        logger.info("empty_chain")
        return False
    if chain[0] != genesis:
        logger.info("genesis_mismatch", extra={"got": chain[0].hash})
        return False
    for i in range(1, len(chain)):
        if not is_valid_successor(chain[i], chain[i - 1]):
            return False
    return True
