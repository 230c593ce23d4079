"""Repository layer for data access."""

from typing import Any

from sqlalchemy import func, or_, select, update
from sqlalchemy.orm import Session

from prizejet.logging_config import get_logger
from prizejet.storage.models import BonusActionCompletion, Campaign, CampaignStatus, Entry

logger = get_logger(__name__)


class CampaignRepository:
    """Repository for Campaign entities."""

    def __init__(self, session: Session):
        self.session = session

    def create(self, owner_id: int, **fields: Any) -> Campaign:
        """Create a new draft campaign.

        Args:
            owner_id: Owning user ID
            **fields: Column values

        Returns:
            Created campaign
        """
        campaign = Campaign(owner_id=owner_id, status=CampaignStatus.DRAFT, **fields)
        self.session.add(campaign)
        self.session.flush()
        logger.info("campaign_created", campaign_id=campaign.id, owner_id=owner_id)
        return campaign

    def get_by_id(self, campaign_id: str) -> Campaign | None:
        """Get campaign by ID."""
        return self.session.get(Campaign, campaign_id)

    def get_for_owner(self, campaign_id: str, owner_id: int) -> Campaign | None:
        """Get a campaign only if it belongs to the owner."""
        return self.session.scalar(
            select(Campaign).where(Campaign.id == campaign_id, Campaign.owner_id == owner_id)
        )

    def get_active_by_slug(self, slug: str) -> Campaign | None:
        """Get a published campaign by its public slug."""
        return self.session.scalar(
            select(Campaign).where(Campaign.slug == slug, Campaign.status == CampaignStatus.ACTIVE)
        )

    def slug_exists(self, slug: str) -> bool:
        return self.session.scalar(select(Campaign.id).where(Campaign.slug == slug)) is not None

    def list_for_owner(self, owner_id: int) -> list[Campaign]:
        """List an owner's campaigns, newest first."""
        return list(
            self.session.scalars(
                select(Campaign)
                .where(Campaign.owner_id == owner_id)
                .order_by(Campaign.created_at.desc())
            )
        )


class EntryRepository:
    """Repository for Entry entities."""

    def __init__(self, session: Session):
        self.session = session

    def add(self, entry: Entry) -> Entry:
        """Insert an entry and flush so constraint violations surface here."""
        self.session.add(entry)
        self.session.flush()
        return entry

    def get_by_id(self, entry_id: str) -> Entry | None:
        return self.session.get(Entry, entry_id)

    def get_for_update(self, entry_id: str) -> Entry | None:
        """Get an entry with its row locked for the rest of the transaction."""
        return self.session.scalar(
            select(Entry).where(Entry.id == entry_id).with_for_update()
        )

    def record_bonus_action(self, entry_id: str, action_id: str, points: int) -> None:
        """Insert a completion row. Raises IntegrityError if the action was already completed."""
        self.session.add(BonusActionCompletion(entry_id=entry_id, action_id=action_id, points=points))
        self.session.flush()

    def email_exists(self, campaign_id: str, email: str) -> bool:
        """Check whether an email already entered the campaign (case-insensitive)."""
        return self.session.scalar(
            select(Entry.id).where(
                Entry.campaign_id == campaign_id,
                func.lower(Entry.email) == email.lower(),
            )
        ) is not None

    def code_exists(self, referral_code: str) -> bool:
        return self.session.scalar(
            select(Entry.id).where(Entry.referral_code == referral_code)
        ) is not None

    def get_by_referral_code(self, campaign_id: str, referral_code: str) -> Entry | None:
        """Exact referral code match within one campaign."""
        return self.session.scalar(
            select(Entry).where(
                Entry.campaign_id == campaign_id,
                Entry.referral_code == referral_code,
            )
        )

    def get_in_campaign(self, campaign_id: str, entry_id: str) -> Entry | None:
        return self.session.scalar(
            select(Entry).where(Entry.campaign_id == campaign_id, Entry.id == entry_id)
        )

    def increment_points(self, entry_id: str, amount: int) -> None:
        """Atomically add points to an entry (UPDATE ... SET points = points + n)."""
        self.session.execute(
            update(Entry)
            .where(Entry.id == entry_id)
            .values(points=Entry.points + amount)
            .execution_options(synchronize_session=False)
        )
        logger.debug("entry_points_incremented", entry_id=entry_id, amount=amount)

    def list_for_campaign(self, campaign_id: str, search: str | None = None) -> list[Entry]:
        """List a campaign's entries, newest first.

        Args:
            campaign_id: Campaign ID
            search: Optional case-insensitive substring of name or email

        Returns:
            Entries
        """
        stmt = select(Entry).where(Entry.campaign_id == campaign_id)
        if search and search.strip():
            pattern = f"%{search.strip().lower()}%"
            stmt = stmt.where(
                or_(func.lower(Entry.email).like(pattern), func.lower(Entry.name).like(pattern))
            )
        return list(self.session.scalars(stmt.order_by(Entry.created_at.desc())))

    def count_for_campaign(self, campaign_id: str) -> int:
        return self.session.scalar(
            select(func.count(Entry.id)).where(Entry.campaign_id == campaign_id)
        ) or 0
