"""Control-surface errors.

Routes raise ``LinkchainAPIError``; one handler renders it as an ``ErrorResponse``:

    {"error": {"code": "peer.invalid_address", "message": "...", "context": {"peer": "..."}}}

Codes in use: ``node.unavailable``, ``auth.*``, ``block.not_found``,
``ledger.append_rejected``, ``peer.invalid_address``.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

from api.schemas.common import ErrorDetail, ErrorResponse

logger = logging.getLogger(__name__)


class LinkchainAPIError(Exception):
    def __init__(self, code: str, message: str, status: int = 400, **context: Any) -> None:
        super().__init__(f"{code}: {message}")
        self.code = code
        self.message = message
        self.status = status
        self.context = context

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(error=ErrorDetail(code=self.code, message=self.message, context=self.context))


async def linkchain_error_handler(request: Request, exc: LinkchainAPIError) -> JSONResponse:
    logger.info("api_error", extra={"code": exc.code, "status": exc.status, "path": request.url.path})
    return JSONResponse(status_code=exc.status, content=exc.to_response().model_dump(mode="json"))
