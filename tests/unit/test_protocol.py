from __future__ import annotations

import pytest

from linkchain.core.exceptions import ProtocolError
from linkchain.core.ledger import Ledger
from linkchain.core.models import Block, build_block
from linkchain.p2p.messages import ChainPayload, QueryAll, QueryLatest
from linkchain.p2p.protocol import ReplicationProtocol
from linkchain.p2p.registry import PeerRegistry
from tests.chain_helpers import RecordingLink, extend

pytestmark = pytest.mark.anyio


async def _connected(protocol: ReplicationProtocol, *names: str) -> list[RecordingLink]:
    links = [RecordingLink(n) for n in names]
    for link in links:
        await protocol.on_connect(link)
        link.frames.clear()
    return links


async def test_connect_registers_and_probes_tip(protocol: ReplicationProtocol, registry: PeerRegistry) -> None:
    link = RecordingLink()
    await protocol.on_connect(link)
    assert link in registry
    assert link.messages == [QueryLatest()]


async def test_disconnect_deregisters_once(protocol: ReplicationProtocol, registry: PeerRegistry) -> None:
    (link,) = await _connected(protocol, "p")
    await protocol.on_disconnect(link)
    await protocol.on_disconnect(link)
    assert len(registry) == 0


async def test_query_latest_answers_with_tip_only(protocol: ReplicationProtocol, ledger: Ledger) -> None:
    ledger.append(ledger.next_block("one"))
    asker, bystander = await _connected(protocol, "asker", "bystander")

    await protocol.handle_message(asker, QueryLatest())

    assert asker.messages == [ChainPayload.of([ledger.latest()])]
    assert bystander.frames == []


async def test_query_all_answers_with_full_chain(protocol: ReplicationProtocol, ledger: Ledger) -> None:
    ledger.append(ledger.next_block("one"))
    (asker,) = await _connected(protocol, "asker")

    await protocol.handle_message(asker, QueryAll())

    assert asker.messages == [ChainPayload.of(ledger.snapshot())]


async def test_direct_extension_appends_and_broadcasts(
    protocol: ReplicationProtocol, ledger: Ledger, genesis: Block
) -> None:
    sender, other = await _connected(protocol, "sender", "other")
    g, b1 = extend([genesis], 1)

    await protocol.handle_message(sender, ChainPayload.of([g, b1]))

    assert ledger.snapshot() == [genesis, b1]
    assert sender.messages == [ChainPayload.of([b1])]
    assert other.messages == [ChainPayload.of([b1])]


async def test_ambiguous_single_block_queries_sender_for_full_chain(
    protocol: ReplicationProtocol, ledger: Ledger, genesis: Block
) -> None:
    ledger.append(ledger.next_block("local-1"))
    before = ledger.snapshot()
    sender, other = await _connected(protocol, "sender", "other")
    b2_prime = build_block(index=2, previous_hash="e" * 64, timestamp=2.0, data="theirs")

    await protocol.handle_message(sender, ChainPayload.of([b2_prime]))

    assert ledger.snapshot() == before
    assert sender.messages == [QueryAll()]
    assert other.frames == []


async def test_longer_fork_replaces_and_broadcasts(
    protocol: ReplicationProtocol, ledger: Ledger, genesis: Block
) -> None:
    ledger.append(ledger.next_block("local-1"))
    sender, other = await _connected(protocol, "sender", "other")
    fork = extend([genesis], 2, tag="fork")

    await protocol.handle_message(sender, ChainPayload.of(fork))

    assert ledger.snapshot() == fork
    assert sender.messages == [ChainPayload.of([fork[-1]])]
    assert other.messages == [ChainPayload.of([fork[-1]])]


async def test_unsorted_payload_is_sorted_before_deciding(
    protocol: ReplicationProtocol, ledger: Ledger, genesis: Block
) -> None:
    (sender,) = await _connected(protocol, "sender")
    chain = extend([genesis], 3)

    await protocol.handle_message(sender, ChainPayload.of(reversed(chain)))

    assert ledger.snapshot() == chain


async def test_stale_peer_is_ignored(protocol: ReplicationProtocol, ledger: Ledger, genesis: Block) -> None:
    ledger.append(ledger.next_block("local-1"))
    before = ledger.snapshot()
    sender, other = await _connected(protocol, "sender", "other")

    await protocol.handle_message(sender, ChainPayload.of([genesis]))

    assert ledger.snapshot() == before
    assert sender.frames == [] and other.frames == []


async def test_invalid_longer_fork_changes_nothing(
    protocol: ReplicationProtocol, ledger: Ledger, genesis: Block
) -> None:
    ledger.append(ledger.next_block("local-1"))
    before = ledger.snapshot()
    (sender,) = await _connected(protocol, "sender")
    fork = extend([genesis], 3, tag="fork")
    fork[2] = fork[2].model_copy(update={"data": "tampered"})

    await protocol.handle_message(sender, ChainPayload.of(fork))

    assert ledger.snapshot() == before
    assert sender.frames == []


async def test_corrupt_tip_that_links_to_us_is_not_appended(
    protocol: ReplicationProtocol, ledger: Ledger, genesis: Block
) -> None:
    (sender,) = await _connected(protocol, "sender")
    b1 = ledger.next_block("honest")
    forged = b1.model_copy(update={"data": "forged"})

    await protocol.handle_message(sender, ChainPayload.of([forged]))

    assert ledger.snapshot() == [genesis]
    assert sender.frames == []


async def test_empty_payload_is_ignored(protocol: ReplicationProtocol, ledger: Ledger) -> None:
    (sender,) = await _connected(protocol, "sender")
    await protocol.handle_message(sender, ChainPayload.of([]))
    assert len(ledger) == 1
    assert sender.frames == []


async def test_submit_appends_and_announces(protocol: ReplicationProtocol, ledger: Ledger) -> None:
    a, b = await _connected(protocol, "a", "b")

    block = await protocol.submit("hello")

    assert block is not None
    assert ledger.latest() == block
    assert block.data == "hello"
    assert a.messages == [ChainPayload.of([block])]
    assert b.messages == [ChainPayload.of([block])]


async def test_malformed_frame_raises_for_transport(protocol: ReplicationProtocol, ledger: Ledger) -> None:
    (sender,) = await _connected(protocol, "sender")
    with pytest.raises(ProtocolError):
        await protocol.handle_raw(sender, "{not json")
    assert len(ledger) == 1


async def test_handle_raw_dispatches_decoded_frames(protocol: ReplicationProtocol, ledger: Ledger) -> None:
    (sender,) = await _connected(protocol, "sender")
    await protocol.handle_raw(sender, '{"type": 0}')
    assert sender.messages == [ChainPayload.of([ledger.latest()])]
