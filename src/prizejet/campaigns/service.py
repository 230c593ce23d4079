"""Campaign service: authoring, publishing and the owner dashboard."""

import secrets

from pydantic import BaseModel
from slugify import slugify

from prizejet.analytics.stats import (
    DailyStat,
    EntryCounts,
    LeaderboardRow,
    TopReferrer,
    daily_stats,
    entry_counts,
    leaderboard,
    top_referrers,
)
from prizejet.auth.models import UserAccount
from prizejet.campaigns.schemas import (
    BonusAction,
    CampaignInput,
    CampaignResponse,
    PublicCampaignResponse,
)
from prizejet.errors import NotFoundError, ProFeatureRequiredError, UpstreamError
from prizejet.logging_config import get_logger
from prizejet.referral.service import REFERRAL_ALPHABET
from prizejet.settings import settings
from prizejet.storage.db import Database
from prizejet.storage.models import Campaign, CampaignStatus, utcnow
from prizejet.storage.repo import CampaignRepository, EntryRepository

logger = get_logger(__name__)

MAX_SLUG_ATTEMPTS = 10


class Dashboard(BaseModel):
    """Everything the owner dashboard shows for one campaign."""
    campaign: CampaignResponse
    counts: EntryCounts
    daily_stats: list[DailyStat]
    top_referrers: list[TopReferrer]
    leaderboard: list[LeaderboardRow]


def public_url(slug: str | None) -> str | None:
    if not slug:
        return None
    return f"{settings.public_base_url.rstrip('/')}/c/{slug}"


def generate_slug(title: str, suffix_length: int | None = None) -> str:
    """Public slug from a title plus a random suffix, e.g. ``summer-giveaway-x7k2p``."""
    suffix_length = suffix_length or settings.slug_suffix_length
    suffix = "".join(secrets.choice(REFERRAL_ALPHABET) for _ in range(suffix_length))
    base = slugify(title, max_length=200)
    return f"{base}-{suffix}" if base else suffix


def carry_bonus_action_ids(stored: list[dict], incoming: list[BonusAction]) -> list[dict]:
    """Serialized bonus actions, reusing stored ids for actions sent without one."""
    stored_ids = {(action.get("type"), action.get("title")): action.get("id") for action in stored}
    taken = {action.id for action in incoming if "id" in action.model_fields_set}

    result = []
    for action in incoming:
        payload = action.model_dump(mode="json")
        if "id" not in action.model_fields_set:
            stored_id = stored_ids.get((payload["type"], payload["title"]))
            if stored_id and stored_id not in taken:
                payload["id"] = stored_id
                taken.add(stored_id)
        result.append(payload)
    return result


def to_response(campaign: Campaign) -> CampaignResponse:
    """Owner view of a campaign, with the status as users see it."""
    return CampaignResponse(
        id=campaign.id,
        title=campaign.title,
        description=campaign.description,
        featured_image=campaign.featured_image,
        start_date=campaign.start_date,
        end_date=campaign.end_date,
        status=campaign.effective_status(utcnow()).value,
        stored_status=campaign.status.value,
        slug=campaign.slug,
        public_url=public_url(campaign.slug),
        prize_title=campaign.prize_title,
        prize_description=campaign.prize_description,
        num_winners=campaign.num_winners,
        entry_options=campaign.entry_options,
        points_config=campaign.points_config,
        pro_features=campaign.pro_features,
        created_at=campaign.created_at,
        updated_at=campaign.updated_at,
    )


def to_public_response(campaign: Campaign) -> PublicCampaignResponse:
    """Participant view of a published campaign. Integrations stay private."""
    now = utcnow()
    return PublicCampaignResponse(
        id=campaign.id,
        slug=campaign.slug,
        title=campaign.title,
        description=campaign.description,
        featured_image=campaign.featured_image,
        start_date=campaign.start_date,
        end_date=campaign.end_date,
        status=campaign.effective_status(now).value,
        is_ended=campaign.has_ended(now),
        prize_title=campaign.prize_title,
        prize_description=campaign.prize_description,
        num_winners=campaign.num_winners,
        referral_enabled=campaign.referral_enabled,
        referral_points=campaign.referral_points,
        bonus_actions=campaign.bonus_actions,
    )


class CampaignService:
    """Service for managing campaigns."""

    def __init__(self, db: Database):
        self.db = db
        self.logger = get_logger(__name__)

    def create_campaign(self, owner: UserAccount, data: CampaignInput) -> Campaign:
        """Create a draft campaign.

        Args:
            owner: Campaign owner
            data: Validated campaign fields

        Returns:
            The new campaign

        Raises:
            ProFeatureRequiredError: Integrations configured without Pro
        """
        self._check_pro_features(owner, data)
        with self.db.session() as session:
            return CampaignRepository(session).create(owner.id, **data.to_columns())

    def update_campaign(self, owner: UserAccount, campaign_id: str, data: CampaignInput) -> Campaign:
        """Replace a campaign's editable fields. Status and slug are kept.

        Bonus actions sent without an id keep the id of the stored action
        with the same type and title, so earlier completions still match.
        """
        self._check_pro_features(owner, data)
        with self.db.session() as session:
            campaign = self._owned(session, owner, campaign_id)
            columns = data.to_columns()
            columns["entry_options"]["bonus_actions"] = carry_bonus_action_ids(
                campaign.bonus_actions, data.entry_options.bonus_actions
            )
            for field, value in columns.items():
                setattr(campaign, field, value)
            session.flush()
            self.logger.info("campaign_updated", campaign_id=campaign.id)
            return campaign

    def get_campaign(self, owner: UserAccount, campaign_id: str) -> Campaign:
        with self.db.session() as session:
            return self._owned(session, owner, campaign_id)

    def list_campaigns(self, owner: UserAccount) -> list[Campaign]:
        with self.db.session() as session:
            return CampaignRepository(session).list_for_owner(owner.id)

    def publish(self, owner: UserAccount, campaign_id: str) -> Campaign:
        """Publish a campaign to its public landing page.

        Generates a slug when the campaign has none. Publishing an active
        campaign again changes nothing. There is no way back to draft.

        Args:
            owner: Campaign owner
            campaign_id: Campaign to publish

        Returns:
            The published campaign
        """
        with self.db.session() as session:
            repo = CampaignRepository(session)
            campaign = self._owned(session, owner, campaign_id)

            if campaign.status == CampaignStatus.ACTIVE and campaign.slug:
                return campaign

            if not campaign.slug:
                campaign.slug = self._allocate_slug(repo, campaign.title)
            campaign.status = CampaignStatus.ACTIVE
            session.flush()

            self.logger.info(
                "campaign_published",
                campaign_id=campaign.id,
                slug=campaign.slug,
                already_ended=campaign.has_ended(utcnow()),
            )
            return campaign

    def get_public_campaign(self, slug: str) -> Campaign:
        """Resolve a public slug. Only published campaigns are visible.

        Raises:
            NotFoundError: Unknown slug or campaign not active
        """
        with self.db.session() as session:
            campaign = CampaignRepository(session).get_active_by_slug(slug)
            if campaign is None:
                raise NotFoundError("Campaign not found or no longer active.")
            return campaign

    def get_published(self, campaign_id: str) -> Campaign:
        """Get an active campaign by ID for the public entry flow."""
        with self.db.session() as session:
            campaign = CampaignRepository(session).get_by_id(campaign_id)
            if campaign is None or campaign.status != CampaignStatus.ACTIVE:
                raise NotFoundError("Campaign not found or no longer active.")
            return campaign

    def dashboard(self, owner: UserAccount, campaign_id: str, tz: str | None = None) -> Dashboard:
        """Compute the owner dashboard from the campaign's full entry list.

        Args:
            owner: Campaign owner
            campaign_id: Campaign ID
            tz: IANA time zone for the daily chart

        Returns:
            Dashboard data
        """
        with self.db.session() as session:
            campaign = self._owned(session, owner, campaign_id)
            entries = EntryRepository(session).list_for_campaign(campaign.id)

        tz = tz or settings.default_timezone
        return Dashboard(
            campaign=to_response(campaign),
            counts=entry_counts(entries),
            daily_stats=daily_stats(entries, days=settings.stats_days, tz=tz),
            top_referrers=top_referrers(entries, limit=settings.top_referrers_limit),
            leaderboard=leaderboard(entries, limit=settings.leaderboard_limit),
        )

    def _owned(self, session, owner: UserAccount, campaign_id: str) -> Campaign:
        campaign = CampaignRepository(session).get_for_owner(campaign_id, owner.id)
        if campaign is None:
            raise NotFoundError("Campaign not found.")
        return campaign

    def _allocate_slug(self, repo: CampaignRepository, title: str) -> str:
        for _ in range(MAX_SLUG_ATTEMPTS):
            slug = generate_slug(title)
            if not repo.slug_exists(slug):
                return slug
            self.logger.warning("slug_collision", slug=slug)
        raise UpstreamError("Could not allocate a unique campaign slug.")

    def _check_pro_features(self, owner: UserAccount, data: CampaignInput) -> None:
        if data.pro_features.in_use and not owner.is_pro:
            self.logger.info("pro_feature_blocked", owner_id=owner.id)
            raise ProFeatureRequiredError()

