"""Outgoing webhook for new campaign entries (Pro feature).

Each new entry is POSTed once to the campaign's webhook URL. There are no
retries; a failed delivery is logged and does not affect the entry.
"""

from typing import Any

import httpx

from prizejet.logging_config import get_logger
from prizejet.settings import settings
from prizejet.storage.models import Campaign, Entry

logger = get_logger(__name__)

ENTRY_CREATED_EVENT = "entry.created"


def entry_created_payload(campaign: Campaign, entry: Entry) -> dict[str, Any]:
    """Webhook body for a new entry."""
    return {
        "event": ENTRY_CREATED_EVENT,
        "campaign": {
            "id": campaign.id,
            "title": campaign.title,
            "slug": campaign.slug,
        },
        "entry": {
            "id": entry.id,
            "name": entry.name,
            "email": entry.email,
            "referral_code": entry.referral_code,
            "referrer_id": entry.referrer_id,
            "points": entry.points,
            "created_at": entry.created_at.isoformat(),
        },
    }


def webhook_url_for(campaign: Campaign) -> str | None:
    return ((campaign.pro_features or {}).get("webhook_url") or "").strip() or None


async def send_entry_webhook(url: str, payload: dict[str, Any]) -> bool:
    """Deliver a webhook.

    Args:
        url: Target URL
        payload: JSON body

    Returns:
        True if the receiver answered with a 2xx status
    """
    try:
        async with httpx.AsyncClient() as client:
            response = await client.post(
                url,
                json=payload,
                headers={"User-Agent": f"{settings.app_name}-webhooks/1.0"},
                timeout=settings.webhook_timeout_seconds,
            )
    except httpx.RequestError as e:
        logger.warning("webhook_delivery_error", url=url, error=str(e))
        return False

    if response.is_success:
        logger.info("webhook_delivered", url=url, status_code=response.status_code)
        return True

    logger.warning("webhook_rejected", url=url, status_code=response.status_code)
    return False
