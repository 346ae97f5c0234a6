"""Telegram webhook endpoint."""

import logging
import secrets

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import PlainTextResponse

from ...config import Config
from ...webhook import AdmissionGate
from ..dependencies import get_config, get_gate

router = APIRouter()
logger = logging.getLogger(__name__)

ACK_BODY = "OK"


@router.post(
    "/{token}",
    response_class=PlainTextResponse,
    include_in_schema=False,
)
async def receive_update(
    token: str,
    request: Request,
    config: Config = Depends(get_config),
    gate: AdmissionGate = Depends(get_gate),
) -> str:
    """
    Accept an update pushed by Telegram.

    The update is handled as an independent task; the acknowledgment does
    not wait for it.

    Raises:
        HTTPException: 404 if the path does not end with the bot token
    """
    if not secrets.compare_digest(token.encode(), config.bot_token.encode()):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not Found")

    try:
        payload = await request.json()
    except ValueError:
        logger.debug("Ignoring webhook request with a malformed body")
        return ACK_BODY

    gate.submit(payload)
    return ACK_BODY
