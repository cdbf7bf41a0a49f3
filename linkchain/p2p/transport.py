"""linkchain.p2p.transport

WebSocket links, both directions.

- inbound: a FastAPI app with one WebSocket route, served on the peer port
- outbound: aiohttp client connections opened on request

Either way the link is driven by the same loop: connect, feed every text frame
to the protocol, deregister on close. A malformed frame ends that one link.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator, Callable
from urllib.parse import urlsplit

import aiohttp
from fastapi import FastAPI, WebSocket
from starlette.websockets import WebSocketState

from linkchain.core.exceptions import PeerError, ProtocolError
from linkchain.p2p.protocol import ReplicationProtocol
from linkchain.p2p.registry import PeerLink

logger = logging.getLogger(__name__)


class ServerPeerLink(PeerLink):
    """A peer that dialed us."""

    def __init__(self, websocket: WebSocket) -> None:
        self._ws = websocket
        client = websocket.client
        self._peer_id = f"{client.host}:{client.port}" if client else "unknown"

    @property
    def peer_id(self) -> str:
        return self._peer_id

    async def send_text(self, text: str) -> None:
        await self._ws.send_text(text)

    async def close(self) -> None:
        if (
            self._ws.client_state == WebSocketState.CONNECTED
            and self._ws.application_state == WebSocketState.CONNECTED
        ):
            await self._ws.close()

    async def frames(self) -> AsyncIterator[str | bytes]:
        while True:
            message = await self._ws.receive()
            if message["type"] == "websocket.disconnect":
                return
            if message.get("text") is not None:
                yield message["text"]
            elif message.get("bytes") is not None:
                yield message["bytes"]


class ClientPeerLink(PeerLink):
    """A peer we dialed."""

    def __init__(self, ws: aiohttp.ClientWebSocketResponse, url: str) -> None:
        self._ws = ws
        self.url = url
        parts = urlsplit(url)
        self._peer_id = f"{parts.hostname}:{parts.port}" if parts.port else str(parts.hostname or url)

    @property
    def peer_id(self) -> str:
        return self._peer_id

    async def send_text(self, text: str) -> None:
        await self._ws.send_str(text)

    async def close(self) -> None:
        if not self._ws.closed:
            await self._ws.close()

    async def frames(self) -> AsyncIterator[str | bytes]:
        async for msg in self._ws:
            if msg.type == aiohttp.WSMsgType.TEXT:
                yield msg.data
            elif msg.type == aiohttp.WSMsgType.BINARY:
                yield msg.data
            elif msg.type == aiohttp.WSMsgType.ERROR:
                logger.warning("peer_socket_error", extra={"peer": self.peer_id, "error": str(self._ws.exception())})
                return
            else:
                return


async def serve_link(
    protocol: ReplicationProtocol,
    link: PeerLink,
    frames: Callable[[], AsyncIterator[str | bytes]],
) -> None:
    """Drive one link from connect to close."""

    await protocol.on_connect(link)
    try:
        async for frame in frames():
            try:
                await protocol.handle_raw(link, frame)
            except ProtocolError:
                break
    finally:
        await protocol.on_disconnect(link)
        try:
            await link.close()
        except Exception:  # noqa: BLE001
            logger.debug("peer_close_failed", extra={"peer": link.peer_id}, exc_info=True)


def create_peer_app(protocol: ReplicationProtocol) -> FastAPI:
    """ASGI app accepting inbound peer links on ``/``."""

    app = FastAPI(title="linkchain peer endpoint", docs_url=None, redoc_url=None, openapi_url=None)

    @app.websocket("/")
    async def peer_socket(websocket: WebSocket) -> None:
        await websocket.accept()
        link = ServerPeerLink(websocket)
        await serve_link(protocol, link, link.frames)

    return app


class PeerConnector:
    """Opens outbound links and keeps their reader tasks alive until they close."""

    def __init__(self, protocol: ReplicationProtocol, *, connect_timeout_s: float = 10.0) -> None:
        self.protocol = protocol
        self.connect_timeout_s = connect_timeout_s
        self._session: aiohttp.ClientSession | None = None
        self._tasks: set[asyncio.Task[None]] = set()

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        return self._session

    async def open(self, url: str) -> ClientPeerLink:
        """Dial ``url``. Raises PeerError if the peer cannot be reached."""

        try:
            ws = await asyncio.wait_for(self._get_session().ws_connect(url), timeout=self.connect_timeout_s)
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError, ValueError) as e:
            logger.warning("peer_connect_failed", extra={"url": url, "error": str(e)})
            raise PeerError(f"connection failed: {url}") from e
        return ClientPeerLink(ws, url)

    async def connect(self, url: str) -> ClientPeerLink:
        """Dial ``url`` and run the link in the background."""

        link = await self.open(url)
        task = asyncio.create_task(serve_link(self.protocol, link, link.frames), name=f"peer:{url}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return link

    def schedule(self, url: str) -> asyncio.Task[None]:
        """Fire-and-forget connect; failures are logged, never retried."""

        async def _run() -> None:
            with contextlib.suppress(PeerError):
                await self.connect(url)

        task = asyncio.create_task(_run(), name=f"dial:{url}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def aclose(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        if self._session is not None:
            await self._session.close()

