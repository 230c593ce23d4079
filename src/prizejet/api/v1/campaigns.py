"""Owner campaign endpoints: authoring, publishing, dashboard and export."""

from datetime import datetime
from urllib.parse import quote

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import StreamingResponse
from pydantic import BaseModel

from prizejet.api.deps import get_campaign_service, get_entry_service
from prizejet.auth.middleware import require_auth
from prizejet.auth.models import UserAccount
from prizejet.campaigns.schemas import CampaignInput, CampaignResponse
from prizejet.campaigns.service import CampaignService, Dashboard, to_response
from prizejet.entries.service import EntryService
from prizejet.logging_config import get_logger
from prizejet.storage.export import entries_to_csv, export_filename
from prizejet.storage.models import Entry

logger = get_logger(__name__)

router = APIRouter(prefix="/campaigns", tags=["campaigns"])


class EntryAdminResponse(BaseModel):
    """Owner view of an entry."""
    id: str
    name: str
    email: str
    points: int
    referral_code: str
    referrer_id: str | None = None
    ip_address: str | None = None
    bonus_actions_completed: list[str]
    created_at: datetime


def _entry_admin_response(entry: Entry) -> EntryAdminResponse:
    return EntryAdminResponse(
        id=entry.id,
        name=entry.name,
        email=entry.email,
        points=entry.points,
        referral_code=entry.referral_code,
        referrer_id=entry.referrer_id,
        ip_address=entry.ip_address,
        bonus_actions_completed=list(entry.bonus_actions_completed or []),
        created_at=entry.created_at,
    )


@router.get("", response_model=list[CampaignResponse])
async def list_campaigns(
    user: UserAccount = Depends(require_auth),
    campaigns: CampaignService = Depends(get_campaign_service),
):
    """List the current owner's campaigns, newest first."""
    return [to_response(campaign) for campaign in campaigns.list_campaigns(user)]


@router.post("", response_model=CampaignResponse, status_code=status.HTTP_201_CREATED)
async def create_campaign(
    body: CampaignInput,
    user: UserAccount = Depends(require_auth),
    campaigns: CampaignService = Depends(get_campaign_service),
):
    """Create a draft campaign."""
    return to_response(campaigns.create_campaign(user, body))


@router.get("/{campaign_id}", response_model=CampaignResponse)
async def get_campaign(
    campaign_id: str,
    user: UserAccount = Depends(require_auth),
    campaigns: CampaignService = Depends(get_campaign_service),
):
    return to_response(campaigns.get_campaign(user, campaign_id))


@router.put("/{campaign_id}", response_model=CampaignResponse)
async def update_campaign(
    campaign_id: str,
    body: CampaignInput,
    user: UserAccount = Depends(require_auth),
    campaigns: CampaignService = Depends(get_campaign_service),
):
    """Edit a campaign. Its status and slug are not affected."""
    return to_response(campaigns.update_campaign(user, campaign_id, body))


@router.post("/{campaign_id}/publish", response_model=CampaignResponse)
async def publish_campaign(
    campaign_id: str,
    user: UserAccount = Depends(require_auth),
    campaigns: CampaignService = Depends(get_campaign_service),
):
    """Publish a campaign to its public landing page."""
    return to_response(campaigns.publish(user, campaign_id))


@router.get("/{campaign_id}/dashboard", response_model=Dashboard)
async def get_dashboard(
    campaign_id: str,
    tz: str | None = Query(default=None, description="IANA time zone for the daily chart"),
    user: UserAccount = Depends(require_auth),
    campaigns: CampaignService = Depends(get_campaign_service),
):
    """Entry counts, daily chart, top referrers and leaderboard."""
    return campaigns.dashboard(user, campaign_id, tz=tz)


@router.get("/{campaign_id}/entries", response_model=list[EntryAdminResponse])
async def list_entries(
    campaign_id: str,
    search: str | None = Query(default=None, description="Filter by name or email"),
    user: UserAccount = Depends(require_auth),
    campaigns: CampaignService = Depends(get_campaign_service),
    entries: EntryService = Depends(get_entry_service),
):
    campaign = campaigns.get_campaign(user, campaign_id)
    return [_entry_admin_response(entry) for entry in entries.list_entries(campaign.id, search=search)]


@router.get("/{campaign_id}/export")
async def export_entries(
    campaign_id: str,
    user: UserAccount = Depends(require_auth),
    campaigns: CampaignService = Depends(get_campaign_service),
    entries: EntryService = Depends(get_entry_service),
):
    """Download all entries as CSV."""
    campaign = campaigns.get_campaign(user, campaign_id)
    rows = entries.list_entries(campaign.id)
    logger.info("entries_exported", campaign_id=campaign.id, count=len(rows))

    return StreamingResponse(
        iter([entries_to_csv(rows)]),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(export_filename(campaign.title))}"},
    )
