from api.schemas.blocks import BlockResponse, MineBlockRequest
from api.schemas.common import ErrorResponse
from api.schemas.peers import AddPeerRequest, AddPeerResponse

__all__ = [
    "AddPeerRequest",
    "AddPeerResponse",
    "BlockResponse",
    "ErrorResponse",
    "MineBlockRequest",
]
