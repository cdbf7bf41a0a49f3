from __future__ import annotations

import pytest

from linkchain import GENESIS_HASH
from linkchain.core.validation import is_valid_chain
from linkchain.p2p.messages import ChainPayload
from tests.chain_helpers import RecordingLink
from tests.unit._api_test_client import make_client, make_node_app

pytestmark = pytest.mark.anyio


async def test_blocks_returns_wire_encoded_chain(test_config):
    node, app = make_node_app(test_config)

    async with make_client(app) as ac:
        r = await ac.get("/blocks")

    assert r.status_code == 200
    (genesis,) = r.json()
    assert genesis["index"] == 0
    assert genesis["previousHash"] == "0"
    assert genesis["timestamp"] == 1465154705
    assert genesis["hash"] == GENESIS_HASH


async def test_mine_block_appends_and_broadcasts(test_config):
    node, app = make_node_app(test_config)
    link = RecordingLink()
    node.registry.add(link)

    async with make_client(app) as ac:
        r = await ac.post("/mineBlock", json={"data": "hello"})
        assert r.status_code == 200
        body = r.json()
        assert body["index"] == 1
        assert body["data"] == "hello"

        latest = (await ac.get("/blocks/latest")).json()
        assert latest == body

    assert is_valid_chain(node.ledger.snapshot(), node.ledger.genesis)
    assert link.messages == [ChainPayload.of([node.ledger.latest()])]


async def test_mine_block_requires_data(test_config):
    _, app = make_node_app(test_config)
    async with make_client(app) as ac:
        r = await ac.post("/mineBlock", json={})
    assert r.status_code == 422


async def test_mine_block_reports_rejected_append(test_config, monkeypatch):
    node, app = make_node_app(test_config)
    monkeypatch.setattr(node.ledger, "append", lambda block: False)

    async with make_client(app) as ac:
        r = await ac.post("/mineBlock", json={"data": "x"})

    assert r.status_code == 409
    assert r.json()["error"]["code"] == "ledger.append_rejected"


async def test_get_block_by_index(test_config):
    node, app = make_node_app(test_config)
    await node.protocol.submit("one")

    async with make_client(app) as ac:
        assert (await ac.get("/blocks/1")).json()["data"] == "one"
        missing = await ac.get("/blocks/5")

    assert missing.status_code == 404
    assert missing.json()["error"]["code"] == "block.not_found"
