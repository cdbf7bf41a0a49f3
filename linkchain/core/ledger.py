"""linkchain.core.ledger

The node's one and only chain.

Invariants:
- never empty: block 0 is the configured genesis block and never changes
- mutated only by ``append`` (tip extension) or ``replace_with`` (whole swap)
- every read and write holds the same lock, so no caller observes a partial chain
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence

from linkchain.core.metrics import REGISTRY, MetricsRegistry
from linkchain.core.models import Block, build_block
from linkchain.core.time import unix_now
from linkchain.core.validation import is_valid_chain, is_valid_successor

logger = logging.getLogger(__name__)


class Ledger:
    """In-memory, lock-guarded sequence of blocks."""

    def __init__(self, genesis: Block, *, metrics: MetricsRegistry | None = None) -> None:
        if genesis.index != 0:
            raise ValueError("genesis block must have index 0")
        self._genesis = genesis
        self._chain: tuple[Block, ...] = (genesis,)
        self._lock = threading.RLock()
        self._metrics = metrics or REGISTRY
        self._metrics.set_gauge("chain_length", 1)

    @property
    def genesis(self) -> Block:
        return self._genesis

    def __len__(self) -> int:
        with self._lock:
            return len(self._chain)

    def latest(self) -> Block:
        with self._lock:
            return self._chain[-1]

    def snapshot(self) -> list[Block]:
        """Copy of the full chain, safe to hand to other threads or the wire."""

        with self._lock:
            return list(self._chain)

    def next_block(self, data: str, *, timestamp: float | None = None) -> Block:
        """Build the block that would extend the current tip."""

        with self._lock:
            tip = self._chain[-1]
            return build_block(
                index=tip.index + 1,
                previous_hash=tip.hash,
                timestamp=unix_now() if timestamp is None else timestamp,
                data=data,
            )

    def append(self, candidate: Block) -> bool:
        """Extend the tip with ``candidate``. Rejected blocks leave the chain untouched."""

        with self._lock:
            if not is_valid_successor(candidate, self._chain[-1]):
                self._metrics.inc("blocks_rejected")
                logger.info("block_rejected", extra={"index": candidate.index, "hash": candidate.hash})
                return False
            self._chain = (*self._chain, candidate)
            length = len(self._chain)

        self._metrics.inc("blocks_appended")
        self._metrics.set_gauge("chain_length", length)
        logger.info("block_appended", extra={"index": candidate.index, "hash": candidate.hash})
        return True

    def replace_with(self, candidate_chain: Sequence[Block]) -> bool:
        """Adopt ``candidate_chain`` iff it is valid and strictly longer than ours.

        Equal length never wins: the first chain seen at a given length stays.
        """

        candidate = tuple(candidate_chain)
        with self._lock:
            current_length = len(self._chain)
            if len(candidate) <= current_length:
                accepted = False
            else:
                accepted = is_valid_chain(candidate, self._genesis)
            if accepted:
                self._chain = candidate

        if not accepted:
            self._metrics.inc("chains_rejected")
            logger.info(
                "chain_rejected",
                extra={"received_length": len(candidate), "current_length": current_length},
            )
            return False

        self._metrics.inc("chains_replaced")
        self._metrics.set_gauge("chain_length", len(candidate))
        logger.info(
            "chain_replaced",
            extra={"previous_length": current_length, "new_length": len(candidate)},
        )
        return True
