"""linkchain.node

One process, one node: a ledger, its peers, and the two servers in front of them.

    control surface (HTTP, api.main)   peer endpoint (WebSocket, p2p.transport)
                  \\                        /
                   ReplicationProtocol ---- PeerRegistry
                           |
                         Ledger
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from linkchain.core.config import Config
from linkchain.core.ledger import Ledger
from linkchain.core.metrics import REGISTRY, MetricsRegistry
from linkchain.p2p.protocol import ReplicationProtocol
from linkchain.p2p.registry import PeerRegistry
from linkchain.p2p.transport import PeerConnector, create_peer_app

logger = logging.getLogger(__name__)


@dataclass
class Node:
    config: Config
    metrics: MetricsRegistry = field(default_factory=lambda: REGISTRY)

    def __post_init__(self) -> None:
        self.ledger = Ledger(self.config.genesis.block(), metrics=self.metrics)
        self.registry = PeerRegistry(metrics=self.metrics)
        self.protocol = ReplicationProtocol(self.ledger, self.registry)
        self.connector = PeerConnector(self.protocol, connect_timeout_s=self.config.p2p.connect_timeout_s)

    def connect_to_peers(self, urls: list[str]) -> list[asyncio.Task[None]]:
        """Dial each peer in the background. Failures are logged, not retried."""

        return [self.connector.schedule(url) for url in urls]

    async def serve(self) -> None:
        """Run the peer endpoint and the control surface until cancelled."""

        import uvicorn

        from api.main import create_app

        peer_server = uvicorn.Server(
            uvicorn.Config(
                create_peer_app(self.protocol),
                host=self.config.p2p.host,
                port=self.config.p2p.port,
                log_config=None,
                lifespan="off",
            )
        )
        api_server = uvicorn.Server(
            uvicorn.Config(
                create_app(node=self),
                host=self.config.api.host,
                port=self.config.api.port,
                log_config=None,
            )
        )

        logger.info("p2p_listening", extra={"host": self.config.p2p.host, "port": self.config.p2p.port})
        logger.info("http_listening", extra={"host": self.config.api.host, "port": self.config.api.port})
        self.connect_to_peers(self.config.peers)
        try:
            await asyncio.gather(peer_server.serve(), api_server.serve())
        finally:
            await self.connector.aclose()
