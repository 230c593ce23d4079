"""Entry service: admitting participants and tracking their points."""

from sqlalchemy.exc import IntegrityError

from prizejet.errors import (
    CampaignClosedError,
    DuplicateEntryError,
    NotFoundError,
    UpstreamError,
    ValidationError,
)
from prizejet.logging_config import get_logger
from prizejet.referral.service import ReferralService
from prizejet.storage.db import Database
from prizejet.storage.models import Campaign, CampaignStatus, Entry, utcnow
from prizejet.storage.repo import CampaignRepository, EntryRepository

logger = get_logger(__name__)

BASE_ENTRY_POINTS = 1  # Points for the act of entering


class EntryService:
    """Service for campaign entries."""

    def __init__(self, db: Database, referral_service: ReferralService | None = None):
        """Initialize entry service.

        Args:
            db: Database handle
            referral_service: Referral code and credit handling
        """
        self.db = db
        self.referrals = referral_service or ReferralService()
        self.logger = get_logger(__name__)

    def submit_entry(
        self,
        campaign_id: str,
        name: str,
        email: str,
        referral_code: str | None = None,
        referrer_id: str | None = None,
        ip_address: str | None = None,
    ) -> Entry:
        """Admit a participant into a campaign.

        Args:
            campaign_id: Campaign to enter
            name: Participant name
            email: Participant email
            referral_code: Code from the link the participant arrived through
            referrer_id: Referrer entry ID, used only without a code
            ip_address: Client IP as seen by the server

        Returns:
            The new entry

        Raises:
            NotFoundError: Campaign missing or not published
            CampaignClosedError: Campaign past its end date
            ValidationError: Name or email empty
            DuplicateEntryError: Email already entered this campaign
        """
        name = (name or "").strip()
        email = (email or "").strip().lower()

        with self.db.session() as session:
            campaign = self._open_campaign(CampaignRepository(session).get_by_id(campaign_id))

            if not name or not email:
                raise ValidationError("Please provide both your name and email.")

            entries = EntryRepository(session)
            if entries.email_exists(campaign.id, email):
                raise DuplicateEntryError()

            referrer = self.referrals.resolve_referrer(
                session, campaign.id, referral_code=referral_code, referrer_id=referrer_id
            )

            entry = Entry(
                campaign_id=campaign.id,
                name=name,
                email=email,
                referral_code=self.referrals.allocate_code(session),
                referrer_id=referrer.id if referrer else None,
                points=BASE_ENTRY_POINTS,
                ip_address=ip_address,
                bonus_actions_completed=[],
            )
            try:
                entries.add(entry)
            except IntegrityError as exc:
                session.rollback()
                # Lost a race: either the same email or the same referral code
                if entries.email_exists(campaign_id, email):
                    raise DuplicateEntryError() from exc
                self.logger.error("entry_insert_conflict", campaign_id=campaign_id, error=str(exc.orig))
                raise UpstreamError("Could not save the entry, please try again.") from exc

            if referrer is not None:
                self.referrals.credit_referrer(session, campaign, referrer)

            self.logger.info(
                "entry_created",
                campaign_id=campaign.id,
                entry_id=entry.id,
                referrer_id=entry.referrer_id,
            )
            return entry

    def get_entry(self, entry_id: str) -> Entry:
        """Get an entry by ID.

        Raises:
            NotFoundError: If the entry does not exist
        """
        with self.db.session() as session:
            entry = EntryRepository(session).get_by_id(entry_id)
            if entry is None:
                raise NotFoundError("Entry not found.")
            return entry

    def complete_bonus_action(self, entry_id: str, action_id: str) -> Entry:
        """Mark a bonus action complete for an entry and award its points.

        Completing the same action twice is a no-op.

        Args:
            entry_id: Entry completing the action
            action_id: Bonus action ID from the campaign's entry options

        Returns:
            The updated entry
        """
        with self.db.session() as session:
            entries = EntryRepository(session)
            entry = entries.get_for_update(entry_id)
            if entry is None:
                raise NotFoundError("Entry not found.")

            campaign = self._open_campaign(entry.campaign)

            action = campaign.find_bonus_action(action_id)
            if action is None:
                raise NotFoundError("Bonus action not found.")

            if action_id in (entry.bonus_actions_completed or []):
                return entry

            points = int(action.get("points", 0))
            try:
                entries.record_bonus_action(entry.id, action_id, points)
            except IntegrityError:
                # A concurrent request completed it first
                session.rollback()
                session.refresh(entry)
                self.logger.info("bonus_action_already_completed", entry_id=entry_id, action_id=action_id)
                return entry

            # Reload so completions of other actions committed meanwhile are kept
            session.refresh(entry)
            entry.bonus_actions_completed = [*(entry.bonus_actions_completed or []), action_id]
            session.flush()
            entries.increment_points(entry.id, points)
            session.refresh(entry)

            self.logger.info(
                "bonus_action_completed",
                entry_id=entry.id,
                action_id=action_id,
                points=points,
            )
            return entry

    def list_entries(self, campaign_id: str, search: str | None = None) -> list[Entry]:
        """List a campaign's entries, newest first, optionally filtered by name/email."""
        with self.db.session() as session:
            return EntryRepository(session).list_for_campaign(campaign_id, search=search)

    def count_entries(self, campaign_id: str) -> int:
        with self.db.session() as session:
            return EntryRepository(session).count_for_campaign(campaign_id)

    def _open_campaign(self, campaign: Campaign | None) -> Campaign:
        """Check that a campaign is accepting entries."""
        if campaign is None or campaign.status != CampaignStatus.ACTIVE:
            raise NotFoundError("Campaign not found or no longer active.")
        if campaign.has_ended(utcnow()):
            raise CampaignClosedError()
        return campaign
