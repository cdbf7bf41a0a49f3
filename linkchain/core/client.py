"""linkchain.core.client

HTTP client for a running node's control surface, with:
- retries (exponential backoff) on transport errors
- bearer token passthrough

The CLI uses this; peers never do (they speak the WebSocket protocol).
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any

import httpx

from linkchain.core.models import Block


@dataclass(frozen=True, slots=True)
class ClientConfig:
    base_url: str = "http://127.0.0.1:3001"
    auth_token: str = ""
    max_retries: int = 2
    timeout_s: float = 10.0


class ControlClient:
    def __init__(self, config: ClientConfig | None = None, *, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.config = config or ClientConfig()
        headers = {"Authorization": f"Bearer {self.config.auth_token}"} if self.config.auth_token else {}
        self._client = httpx.AsyncClient(
            base_url=self.config.base_url,
            timeout=self.config.timeout_s,
            headers=headers,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> ControlClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.aclose()

    async def request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        last_exc: Exception | None = None
        for attempt in range(self.config.max_retries + 1):
            try:
                resp = await self._client.request(method, path, **kwargs)
                resp.raise_for_status()
                return resp
            except (httpx.TimeoutException, httpx.NetworkError) as e:
                last_exc = e
                if attempt >= self.config.max_retries:
                    break
                await asyncio.sleep(min(2**attempt, 8))

        assert last_exc is not None
        raise last_exc

    async def blocks(self) -> list[Block]:
        resp = await self.request("GET", "/blocks")
        return [Block.from_wire(raw) for raw in resp.json()]

    async def mine(self, data: str) -> Block:
        resp = await self.request("POST", "/mineBlock", json={"data": data})
        return Block.from_wire(resp.json())

    async def peers(self) -> list[str]:
        resp = await self.request("GET", "/peers")
        return [str(p) for p in resp.json()]

    async def add_peer(self, peer: str) -> dict[str, Any]:
        resp = await self.request("POST", "/addPeer", json={"peer": peer})
        return dict(resp.json())
