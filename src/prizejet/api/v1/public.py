"""Public endpoints: landing page data, entry submission and bonus actions.

The landing page remembers two things per visitor in cookies:

- ``prizejet_ref_{slug}``: the referral code from the last ``?ref=`` link,
  so the referral survives until the visitor actually enters.
- ``prizejet_entry_{campaign_id}``: the visitor's entry, so a returning
  participant is recognised instead of entering again.
"""

from datetime import datetime

from fastapi import APIRouter, BackgroundTasks, Depends, Request, Response, status
from pydantic import BaseModel

from prizejet.analytics.stats import Countdown, time_left
from prizejet.api.deps import get_campaign_service, get_entry_service
from prizejet.api.rate_limit import client_ip, limiter
from prizejet.campaigns.schemas import PublicCampaignResponse
from prizejet.campaigns.service import CampaignService, public_url, to_public_response
from prizejet.entries.service import EntryService
from prizejet.errors import NotFoundError
from prizejet.integrations.webhook import entry_created_payload, send_entry_webhook, webhook_url_for
from prizejet.logging_config import get_logger
from prizejet.settings import settings
from prizejet.storage.models import Campaign, Entry, utcnow

logger = get_logger(__name__)

router = APIRouter(prefix="/public", tags=["public"])
landing_router = APIRouter(tags=["public"])

COOKIE_MAX_AGE = 60 * 60 * 24 * 90  # 90 days


# ==================== MODELS ====================


class EntryCreateRequest(BaseModel):
    email: str
    name: str
    referral_code: str | None = None
    referrer_id: str | None = None


class EntryResponse(BaseModel):
    """What a participant sees about their own entry."""
    id: str
    campaign_id: str
    name: str
    referral_code: str
    points: int
    bonus_actions_completed: list[str]
    created_at: datetime
    share_url: str | None = None


class LandingResponse(BaseModel):
    campaign: PublicCampaignResponse
    total_entries: int
    time_left: Countdown
    referral_code: str | None = None
    entry: EntryResponse | None = None


def ref_cookie_name(slug: str) -> str:
    return f"prizejet_ref_{slug}"


def entry_cookie_name(campaign_id: str) -> str:
    return f"prizejet_entry_{campaign_id}"


def share_url(campaign: Campaign, entry: Entry) -> str | None:
    url = public_url(campaign.slug)
    return f"{url}?ref={entry.referral_code}" if url else None


def _entry_response(entry: Entry, campaign: Campaign | None = None) -> EntryResponse:
    return EntryResponse(
        id=entry.id,
        campaign_id=entry.campaign_id,
        name=entry.name,
        referral_code=entry.referral_code,
        points=entry.points,
        bonus_actions_completed=list(entry.bonus_actions_completed or []),
        created_at=entry.created_at,
        share_url=share_url(campaign, entry) if campaign else None,
    )


# ==================== ENDPOINTS ====================


@landing_router.get("/c/{slug}", response_model=LandingResponse)
async def landing_page(
    slug: str,
    request: Request,
    response: Response,
    ref: str | None = None,
    campaigns: CampaignService = Depends(get_campaign_service),
    entries: EntryService = Depends(get_entry_service),
):
    """Data for a campaign's public landing page.

    Only published campaigns resolve. A ``ref`` query parameter is stored in
    a cookie and reused on later visits.
    """
    campaign = campaigns.get_public_campaign(slug)

    referral_code = (ref or "").strip() or request.cookies.get(ref_cookie_name(slug))
    if ref and ref.strip():
        response.set_cookie(
            ref_cookie_name(slug), ref.strip(), max_age=COOKIE_MAX_AGE, httponly=True, samesite="lax"
        )

    entry = None
    stored_entry_id = request.cookies.get(entry_cookie_name(campaign.id))
    if stored_entry_id:
        try:
            known = entries.get_entry(stored_entry_id)
        except NotFoundError:
            logger.debug("stale_entry_cookie", campaign_id=campaign.id)
        else:
            if known.campaign_id == campaign.id:
                entry = _entry_response(known, campaign)

    return LandingResponse(
        campaign=to_public_response(campaign),
        total_entries=entries.count_entries(campaign.id),
        time_left=time_left(campaign.end_date, utcnow()),
        referral_code=referral_code,
        entry=entry,
    )


@router.post(
    "/campaigns/{campaign_id}/entries",
    response_model=EntryResponse,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit(settings.entry_rate_limit)
async def submit_entry(
    campaign_id: str,
    body: EntryCreateRequest,
    request: Request,
    response: Response,
    background_tasks: BackgroundTasks,
    campaigns: CampaignService = Depends(get_campaign_service),
    entries: EntryService = Depends(get_entry_service),
):
    """Enter a campaign.

    Without an explicit referral code or referrer, the code remembered from
    the landing page link is used.
    """
    campaign = campaigns.get_published(campaign_id)

    referral_code = body.referral_code
    if not referral_code and not body.referrer_id:
        referral_code = request.cookies.get(ref_cookie_name(campaign.slug or ""))

    entry = entries.submit_entry(
        campaign.id,
        name=body.name,
        email=body.email,
        referral_code=referral_code,
        referrer_id=body.referrer_id,
        ip_address=client_ip(request),
    )

    response.set_cookie(
        entry_cookie_name(campaign.id), entry.id, max_age=COOKIE_MAX_AGE, httponly=True, samesite="lax"
    )

    webhook_url = webhook_url_for(campaign)
    if webhook_url:
        background_tasks.add_task(send_entry_webhook, webhook_url, entry_created_payload(campaign, entry))

    return _entry_response(entry, campaign)


@router.get("/entries/{entry_id}", response_model=EntryResponse)
async def get_entry(
    entry_id: str,
    entries: EntryService = Depends(get_entry_service),
):
    """Look up a participant's own entry (returning visitors)."""
    return _entry_response(entries.get_entry(entry_id))


@router.post("/entries/{entry_id}/bonus-actions/{action_id}", response_model=EntryResponse)
async def complete_bonus_action(
    entry_id: str,
    action_id: str,
    entries: EntryService = Depends(get_entry_service),
):
    """Mark a bonus action as done. Repeating it awards nothing more."""
    return _entry_response(entries.complete_bonus_action(entry_id, action_id))
