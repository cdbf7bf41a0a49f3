"""linkchain.p2p.messages

Peer wire protocol. One JSON object per frame:

    {"type": 0}                      query latest
    {"type": 1}                      query all
    {"type": 2, "data": "<json>"}    chain payload; data is a JSON-encoded block array

The chain payload is encoded twice (an array serialized into a string field).
Peers expect exactly this shape.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from dataclasses import dataclass
from enum import IntEnum
from typing import Any

from pydantic import TypeAdapter, ValidationError

from linkchain.core.exceptions import ProtocolError
from linkchain.core.models import Block

_BLOCKS = TypeAdapter(list[Block])


class MessageType(IntEnum):
    QUERY_LATEST = 0
    QUERY_ALL = 1
    RESPONSE_BLOCKCHAIN = 2


@dataclass(frozen=True, slots=True)
class QueryLatest:
    type: MessageType = MessageType.QUERY_LATEST


@dataclass(frozen=True, slots=True)
class QueryAll:
    type: MessageType = MessageType.QUERY_ALL


@dataclass(frozen=True, slots=True)
class ChainPayload:
    blocks: tuple[Block, ...]
    type: MessageType = MessageType.RESPONSE_BLOCKCHAIN

    @classmethod
    def of(cls, blocks: Iterable[Block]) -> ChainPayload:
        return cls(blocks=tuple(blocks))


Message = QueryLatest | QueryAll | ChainPayload


def encode(message: Message) -> str:
    body: dict[str, Any] = {"type": int(message.type)}
    if isinstance(message, ChainPayload):
        body["data"] = json.dumps([b.to_wire() for b in message.blocks], separators=(",", ":"))
    return json.dumps(body, separators=(",", ":"))


def decode(frame: str | bytes) -> Message:
    """Parse one frame. Anything unreadable raises ProtocolError."""

    try:
        text = frame.decode("utf-8") if isinstance(frame, bytes) else frame
        body = json.loads(text)
    except UnicodeDecodeError as e:
        raise ProtocolError(f"frame is not UTF-8: {e.reason}") from e
    except json.JSONDecodeError as e:
        raise ProtocolError(f"frame is not JSON: {e}") from e
    if not isinstance(body, dict):
        raise ProtocolError("frame must be a JSON object")

    raw_type = body.get("type")
    try:
        kind = MessageType(raw_type)
    except ValueError as e:
        raise ProtocolError(f"unknown message type: {raw_type!r}") from e

    if kind is MessageType.QUERY_LATEST:
        return QueryLatest()
    if kind is MessageType.QUERY_ALL:
        return QueryAll()

    data = body.get("data")
    if not isinstance(data, str):
        raise ProtocolError("chain payload data must be a JSON string")
    try:
        blocks = _BLOCKS.validate_json(data)
    except ValidationError as e:
        raise ProtocolError(f"chain payload is not a block array: {e.error_count()} error(s)") from e
    return ChainPayload.of(blocks)
