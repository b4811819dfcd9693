"""Server-side purchase events for the Meta Conversions API."""

import hashlib
import logging
import time
from typing import Optional

import httpx
from pydantic import BaseModel

from .config import settings

logger = logging.getLogger(__name__)

GRAPH_API_URL = "https://graph.facebook.com"


class PixelEvent(BaseModel):
    """Purchase payload posted by the browser; ``result`` is filled on return."""

    tokenId: Optional[str] = None
    pixelId: Optional[str] = None
    urlId: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    eventId: Optional[str] = None
    productId: Optional[str] = None
    fbp: Optional[str] = None
    fbc: Optional[str] = None
    productValue: Optional[float] = None
    result: Optional[str] = None


def _hash(value: Optional[str]) -> Optional[list[str]]:
    # Conversions API expects normalized, SHA-256 hashed identifiers
    if not value:
        return None
    normalized = value.strip().lower()
    return [hashlib.sha256(normalized.encode("utf-8")).hexdigest()]


def build_purchase_event(
    event: PixelEvent,
    client_ip: Optional[str],
    user_agent: Optional[str],
    currency: Optional[str] = None,
    event_time: Optional[int] = None,
) -> dict:
    """Build one Conversions API "Purchase" event."""
    user_data = {
        "em": _hash(event.email),
        "ph": _hash(event.phone),
        "client_ip_address": client_ip,
        "client_user_agent": user_agent,
        "fbp": event.fbp,
        "fbc": event.fbc,
    }
    payload = {
        "event_name": "Purchase",
        "event_time": event_time if event_time is not None else int(time.time()),
        "event_source_url": event.urlId,
        "action_source": "website",
        "user_data": {k: v for k, v in user_data.items() if v},
        "custom_data": {
            "currency": currency or settings.pixel_currency,
            "value": event.productValue,
            "contents": [
                {
                    "id": event.productId,
                    "quantity": 1,
                    "delivery_category": "home_delivery",
                }
            ],
        },
    }
    if event.eventId:
        payload["event_id"] = event.eventId
    return payload


class ConversionsClient:
    """Posts events to the Graph API ``/{pixel_id}/events`` edge."""

    def __init__(self, base_url: str = GRAPH_API_URL, api_version: Optional[str] = None, timeout: float = 30.0):
        self.base_url = base_url
        self.api_version = api_version or settings.meta_graph_api_version
        self.timeout = timeout

    def send(self, pixel_id: str, access_token: str, events: list[dict]) -> dict:
        with httpx.Client(timeout=self.timeout) as client:
            response = client.post(
                f"{self.base_url}/{self.api_version}/{pixel_id}/events",
                params={"access_token": access_token},
                json={"data": events},
            )
            response.raise_for_status()
            return response.json()

    def report_purchase(
        self,
        event: PixelEvent,
        client_ip: Optional[str],
        user_agent: Optional[str],
    ) -> PixelEvent:
        """Forward a purchase and return the payload with ``result`` set.

        Vendor failures do not raise; the error text is returned in ``result``.
        """
        payload = build_purchase_event(event, client_ip, user_agent)
        result = event.model_copy(update={"result": "Success"})
        try:
            response = self.send(event.pixelId or "", event.tokenId or "", [payload])
            logger.debug(f"Conversions API response : {response}")
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Conversions API error for pixel {event.pixelId}: {e}")
            result.result = str(e)
        return result
