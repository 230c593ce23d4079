"""Referral service for referral codes and referrer credit."""

import secrets
import string

from sqlalchemy.orm import Session

from prizejet.errors import UpstreamError
from prizejet.logging_config import get_logger
from prizejet.settings import settings
from prizejet.storage.models import Campaign, Entry
from prizejet.storage.repo import EntryRepository

logger = get_logger(__name__)

# Base-36: digits and lowercase letters
REFERRAL_ALPHABET = string.digits + string.ascii_lowercase


def generate_referral_code(length: int | None = None) -> str:
    """Generate a random referral code.

    Format: 8 base-36 characters by default, e.g. ``k3x9q2ab``.
    """
    length = length or settings.referral_code_length
    return "".join(secrets.choice(REFERRAL_ALPHABET) for _ in range(length))


class ReferralService:
    """Allocates referral codes and resolves and credits referrers."""

    def __init__(self, code_length: int | None = None, max_attempts: int | None = None):
        self.code_length = code_length or settings.referral_code_length
        self.max_attempts = max_attempts or settings.referral_code_attempts
        self.logger = get_logger(__name__)

    def allocate_code(self, session: Session) -> str:
        """Generate a referral code not used by any entry.

        Args:
            session: Open database session

        Returns:
            Unused referral code

        Raises:
            UpstreamError: If every attempt collided
        """
        entries = EntryRepository(session)
        for attempt in range(self.max_attempts):
            code = generate_referral_code(self.code_length)
            if not entries.code_exists(code):
                return code
            self.logger.warning("referral_code_collision", attempt=attempt + 1)

        raise UpstreamError("Could not allocate a unique referral code.")

    def resolve_referrer(
        self,
        session: Session,
        campaign_id: str,
        referral_code: str | None = None,
        referrer_id: str | None = None,
    ) -> Entry | None:
        """Find the entry that referred a new participant.

        The referral code wins over a raw referrer ID. Anything that does not
        resolve to an entry of the same campaign is ignored.

        Args:
            session: Open database session
            campaign_id: Campaign being entered
            referral_code: Code from the participant's link
            referrer_id: Referrer entry ID, if the client already knows it

        Returns:
            Referrer entry or None for a direct entry
        """
        entries = EntryRepository(session)

        code = (referral_code or "").strip()
        if code:
            referrer = entries.get_by_referral_code(campaign_id, code)
            if referrer is None:
                self.logger.info("referral_code_unresolved", campaign_id=campaign_id, code=code)
            return referrer

        if referrer_id:
            return entries.get_in_campaign(campaign_id, referrer_id)

        return None

    def credit_referrer(self, session: Session, campaign: Campaign, referrer: Entry) -> int:
        """Award the campaign's referral points to a referrer.

        Args:
            session: Open database session
            campaign: Campaign the referral happened in
            referrer: Entry to credit

        Returns:
            Points awarded (0 when referrals are disabled)
        """
        if not campaign.referral_enabled:
            return 0

        points = campaign.referral_points
        EntryRepository(session).increment_points(referrer.id, points)

        self.logger.info(
            "referrer_credited",
            campaign_id=campaign.id,
            referrer_id=referrer.id,
            points=points,
        )
        return points
