"""linkchain.p2p.protocol

Replication: what to say to a peer, and what to do with what it says.

Each link is stateless between messages. The ledger is the only state, and
every handler here is (ledger, incoming message) -> (ledger, outgoing messages):

- on connect:        register, ask for the peer's tip
- query latest:      answer with our tip only
- query all:         answer with our whole chain
- chain payload:     the longest-chain decision, see ``handle_chain``

Known gap: a single block that does not extend us triggers a query-all to its
sender; if the answer is again a lone unrelated block, we ask again and
never converge on our own.
"""

from __future__ import annotations

import logging

from linkchain.core.exceptions import ProtocolError
from linkchain.core.ledger import Ledger
from linkchain.core.models import Block
from linkchain.p2p.messages import ChainPayload, Message, QueryAll, QueryLatest, decode
from linkchain.p2p.registry import PeerLink, PeerRegistry

logger = logging.getLogger(__name__)


class ReplicationProtocol:
    def __init__(self, ledger: Ledger, registry: PeerRegistry) -> None:
        self.ledger = ledger
        self.registry = registry

    # Link lifecycle

    async def on_connect(self, link: PeerLink) -> None:
        self.registry.add(link)
        logger.info("peer_connected", extra={"peer": link.peer_id})
        await self.registry.send(link, QueryLatest())

    async def on_disconnect(self, link: PeerLink) -> None:
        if self.registry.remove(link):
            logger.info("peer_disconnected", extra={"peer": link.peer_id})

    # Inbound

    async def handle_raw(self, link: PeerLink, frame: str | bytes) -> None:
        """Decode and dispatch one frame. Malformed frames raise ProtocolError."""

        try:
            message = decode(frame)
        except ProtocolError:
            logger.warning("malformed_frame", extra={"peer": link.peer_id})
            raise
        await self.handle_message(link, message)

    async def handle_message(self, link: PeerLink, message: Message) -> None:
        logger.debug("message_received", extra={"peer": link.peer_id, "type": int(message.type)})
        if isinstance(message, QueryLatest):
            await self.registry.send(link, ChainPayload.of([self.ledger.latest()]))
        elif isinstance(message, QueryAll):
            await self.registry.send(link, ChainPayload.of(self.ledger.snapshot()))
        elif isinstance(message, ChainPayload):
            await self.handle_chain(link, message.blocks)

    async def handle_chain(self, link: PeerLink, received: tuple[Block, ...] | list[Block]) -> None:
        if not received:
            logger.info("empty_chain_payload", extra={"peer": link.peer_id})
            return

        # Transport order is not trusted.
        blocks = sorted(received, key=lambda b: b.index)
        their_tip = blocks[-1]
        our_tip = self.ledger.latest()

        if their_tip.index <= our_tip.index:
            logger.debug(
                "peer_not_ahead",
                extra={"peer": link.peer_id, "ours": our_tip.index, "theirs": their_tip.index},
            )
            return

        logger.info(
            "chain_possibly_behind",
            extra={"peer": link.peer_id, "ours": our_tip.index, "theirs": their_tip.index},
        )

        if our_tip.hash == their_tip.previous_hash:
            if self.ledger.append(their_tip):
                await self.broadcast_latest()
        elif len(blocks) == 1:
            logger.info("query_full_chain", extra={"peer": link.peer_id})
            await self.registry.send(link, QueryAll())
        elif self.ledger.replace_with(blocks):
            await self.broadcast_latest()

    # Local

    async def submit(self, data: str) -> Block | None:
        """Append new payload data on top of our tip and announce it."""

        block = self.ledger.next_block(data)
        if not self.ledger.append(block):
            return None
        await self.broadcast_latest()
        return block

    async def broadcast_latest(self) -> int:
        return await self.registry.broadcast(ChainPayload.of([self.ledger.latest()]))
