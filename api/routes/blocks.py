from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from api.auth import AuthDep
from api.deps import get_node
from api.errors import LinkchainAPIError
from api.schemas.blocks import BlockResponse, MineBlockRequest
from api.schemas.common import ErrorResponse
from linkchain.node import Node

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/blocks", response_model=list[BlockResponse])
def list_blocks(node: Node = Depends(get_node)) -> list[BlockResponse]:
    return [BlockResponse.from_block(b) for b in node.ledger.snapshot()]


@router.get("/blocks/latest", response_model=BlockResponse)
def latest_block(node: Node = Depends(get_node)) -> BlockResponse:
    return BlockResponse.from_block(node.ledger.latest())


@router.get("/blocks/{index}", response_model=BlockResponse, responses={404: {"model": ErrorResponse}})
def get_block(index: int, node: Node = Depends(get_node)) -> BlockResponse:
    chain = node.ledger.snapshot()
    if index < 0 or index >= len(chain):
        raise LinkchainAPIError(code="block.not_found", message="No block at that index", status=404, index=index)
    return BlockResponse.from_block(chain[index])


@router.post(
    "/mineBlock",
    response_model=BlockResponse,
    dependencies=[AuthDep],
    responses={401: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def mine_block(req: MineBlockRequest, node: Node = Depends(get_node)) -> BlockResponse:
    block = await node.protocol.submit(req.data)
    if block is None:
        raise LinkchainAPIError(
            code="ledger.append_rejected",
            message="Block no longer extends the tip; retry",
            status=409,
        )
    logger.info("block_added", extra={"index": block.index, "hash": block.hash})
    return BlockResponse.from_block(block)
