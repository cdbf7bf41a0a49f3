from __future__ import annotations

from fastapi import Request

from api.errors import LinkchainAPIError
from linkchain.core.config import Config
from linkchain.node import Node


def get_node(request: Request) -> Node:
    node = getattr(request.app.state, "node", None)
    if node is None:
        raise LinkchainAPIError(code="node.unavailable", message="Node is not running", status=503)
    return node


def get_config(request: Request) -> Config:
    return get_node(request).config
