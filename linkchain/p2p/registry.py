"""linkchain.p2p.registry

The set of live peer links.

Registry responsibilities:
- add/remove, safe to call from any connection's close or error path
- a link leaves exactly once, whoever notices first
- broadcast over a membership snapshot; one bad link never stalls the rest
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod

from linkchain.core.metrics import REGISTRY, MetricsRegistry
from linkchain.p2p.messages import Message, encode

logger = logging.getLogger(__name__)


class PeerLink(ABC):
    """One live duplex connection to a peer, identified by object identity."""

    @property
    @abstractmethod
    def peer_id(self) -> str:
        """Human-readable address of the remote end (``host:port``)."""

    @abstractmethod
    async def send_text(self, text: str) -> None: ...

    @abstractmethod
    async def close(self) -> None: ...

    async def send(self, message: Message) -> None:
        await self.send_text(encode(message))

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.peer_id}>"


class PeerRegistry:
    def __init__(self, *, metrics: MetricsRegistry | None = None) -> None:
        self._links: list[PeerLink] = []
        self._lock = threading.RLock()
        self._metrics = metrics or REGISTRY

    def __len__(self) -> int:
        with self._lock:
            return len(self._links)

    def __contains__(self, link: object) -> bool:
        with self._lock:
            return any(existing is link for existing in self._links)

    def add(self, link: PeerLink) -> bool:
        with self._lock:
            if any(existing is link for existing in self._links):
                return False
            self._links.append(link)
            count = len(self._links)
        self._metrics.set_gauge("peers_connected", count)
        logger.info("peer_registered", extra={"peer": link.peer_id, "peers": count})
        return True

    def remove(self, link: PeerLink) -> bool:
        """Drop ``link``. Only the call that actually removed it returns True."""

        with self._lock:
            for i, existing in enumerate(self._links):
                if existing is link:
                    del self._links[i]
                    break
            else:
                return False
            count = len(self._links)
        self._metrics.set_gauge("peers_connected", count)
        logger.info("peer_removed", extra={"peer": link.peer_id, "peers": count})
        return True

    def peers(self) -> list[PeerLink]:
        with self._lock:
            return list(self._links)

    def peer_ids(self) -> list[str]:
        return [link.peer_id for link in self.peers()]

    async def send(self, link: PeerLink, message: Message) -> bool:
        """Send to one link; a failed send drops and closes it like a disconnect would."""

        try:
            await link.send(message)
            return True
        except Exception:  # noqa: BLE001
            logger.warning("peer_send_failed", extra={"peer": link.peer_id}, exc_info=True)
            await self.discard(link)
            return False

    async def broadcast(self, message: Message) -> int:
        """Send to every registered link. Returns how many sends succeeded."""

        delivered = 0
        for link in self.peers():
            if await self.send(link, message):
                delivered += 1
        self._metrics.inc("broadcasts")
        return delivered

    async def discard(self, link: PeerLink) -> None:
        """Remove and close ``link``. Safe to call repeatedly."""

        if self.remove(link):
            try:
                await link.close()
            except Exception:  # noqa: BLE001
                logger.debug("peer_close_failed", extra={"peer": link.peer_id}, exc_info=True)
