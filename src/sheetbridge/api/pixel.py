"""Conversion reporting routes."""

import logging
from typing import Optional

from fastapi import APIRouter, Request

from ..conversions import ConversionsClient, PixelEvent

logger = logging.getLogger(__name__)

router = APIRouter(tags=["conversions"])

_conversions_client: Optional[ConversionsClient] = None


def get_conversions_client() -> ConversionsClient:
    global _conversions_client
    if _conversions_client is None:
        _conversions_client = ConversionsClient()
    return _conversions_client


@router.post("/meta/pixel", response_model=PixelEvent)
@router.post("/sw/meta", response_model=PixelEvent)
def post_pixel(request: Request, event: PixelEvent):
    """Forward a purchase event with the caller's IP and user agent."""
    logger.debug(f"Pixel event: {event}")
    client_ip = request.client.host if request.client else None
    user_agent = request.headers.get("user-agent")
    return get_conversions_client().report_purchase(event, client_ip, user_agent)
