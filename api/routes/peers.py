from __future__ import annotations

from urllib.parse import urlsplit

from fastapi import APIRouter, Depends

from api.auth import AuthDep
from api.deps import get_node
from api.errors import LinkchainAPIError
from api.schemas.common import ErrorResponse
from api.schemas.peers import AddPeerRequest, AddPeerResponse
from linkchain.node import Node

router = APIRouter()

_PEER_SCHEMES = {"ws", "wss"}


@router.get("/peers", response_model=list[str])
def list_peers(node: Node = Depends(get_node)) -> list[str]:
    return node.registry.peer_ids()


@router.post(
    "/addPeer",
    response_model=AddPeerResponse,
    status_code=202,
    dependencies=[AuthDep],
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
)
async def add_peer(req: AddPeerRequest, node: Node = Depends(get_node)) -> AddPeerResponse:
    url = req.peer.strip()
    parts = urlsplit(url)
    if parts.scheme not in _PEER_SCHEMES or not parts.hostname:
        raise LinkchainAPIError(
            code="peer.invalid_address",
            message="Peer must be a ws:// or wss:// URL",
            status=400,
            peer=req.peer,
        )

    # Connection happens in the background; failures show up in logs, not here.
    node.connect_to_peers([url])
    return AddPeerResponse(status="connecting", peer=url)
