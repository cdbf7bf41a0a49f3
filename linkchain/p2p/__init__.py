"""linkchain.p2p

Peer links, the wire protocol, and the replication state machine.
"""

from .messages import ChainPayload, MessageType, QueryAll, QueryLatest, decode, encode
from .protocol import ReplicationProtocol
from .registry import PeerLink, PeerRegistry

__all__ = [
    "ChainPayload",
    "MessageType",
    "PeerLink",
    "PeerRegistry",
    "QueryAll",
    "QueryLatest",
    "ReplicationProtocol",
    "decode",
    "encode",
]
