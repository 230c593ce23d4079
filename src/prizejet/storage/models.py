"""Database models for campaigns and their entries."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import uuid4

from sqlalchemy import JSON, DateTime, Enum as SQLEnum, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def utcnow() -> datetime:
    """Current time as a naive UTC datetime (the storage convention)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _new_id() -> str:
    return str(uuid4())


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class CampaignStatus(str, Enum):
    """Campaign lifecycle states.

    Only DRAFT and ACTIVE are stored. ENDED is derived from the end date.
    """
    DRAFT = "draft"
    ACTIVE = "active"
    ENDED = "ended"


class Campaign(Base):
    """A time-boxed giveaway owned by a marketer."""

    __tablename__ = "campaigns"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    owner_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("user_accounts.id"), nullable=False, index=True
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    featured_image: Mapped[str | None] = mapped_column(String(1000), nullable=True)

    start_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    end_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    status: Mapped[CampaignStatus] = mapped_column(
        SQLEnum(CampaignStatus), default=CampaignStatus.DRAFT, nullable=False
    )
    slug: Mapped[str | None] = mapped_column(String(255), unique=True, nullable=True, index=True)

    # Prize
    prize_title: Mapped[str] = mapped_column(String(255), nullable=False)
    prize_description: Mapped[str] = mapped_column(Text, nullable=False)
    num_winners: Mapped[int] = mapped_column(Integer, default=1, nullable=False)

    # Entry rules and integrations
    entry_options: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    points_config: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    pro_features: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    entries: Mapped[list["Entry"]] = relationship(
        "Entry", back_populates="campaign", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Campaign(id={self.id}, title='{self.title}', status={self.status})>"

    @property
    def referral_enabled(self) -> bool:
        return bool((self.entry_options or {}).get("referral_enabled", True))

    @property
    def referral_points(self) -> int:
        return int((self.points_config or {}).get("referral_points", 10))

    @property
    def bonus_actions(self) -> list[dict[str, Any]]:
        return list((self.entry_options or {}).get("bonus_actions", []))

    def find_bonus_action(self, action_id: str) -> dict[str, Any] | None:
        for action in self.bonus_actions:
            if action.get("id") == action_id:
                return action
        return None

    def has_ended(self, now: datetime | None = None) -> bool:
        return (now or utcnow()) > self.end_date

    def effective_status(self, now: datetime | None = None) -> CampaignStatus:
        """Status as presented to users: ENDED once the end date has passed."""
        if self.has_ended(now):
            return CampaignStatus.ENDED
        return self.status


class Entry(Base):
    """One participant's admission into a campaign."""

    __tablename__ = "campaign_entries"
    __table_args__ = (
        UniqueConstraint("campaign_id", "email", name="uq_campaign_entries_campaign_email"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    campaign_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("campaigns.id"), nullable=False, index=True
    )

    email: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    referral_code: Mapped[str] = mapped_column(String(32), unique=True, nullable=False, index=True)
    referrer_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("campaign_entries.id"), nullable=True, index=True
    )

    points: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    ip_address: Mapped[str | None] = mapped_column(String(64), nullable=True)
    bonus_actions_completed: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    campaign: Mapped["Campaign"] = relationship("Campaign", back_populates="entries")

    def __repr__(self) -> str:
        return f"<Entry(id={self.id}, email='{self.email}', points={self.points})>"


class BonusActionCompletion(Base):
    """One bonus action completed by one entry.

    At most one row per (entry, action); the points are awarded only by the
    transaction that inserts it.
    """

    __tablename__ = "bonus_action_completions"
    __table_args__ = (
        UniqueConstraint("entry_id", "action_id", name="uq_bonus_action_completions_entry_action"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    entry_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("campaign_entries.id"), nullable=False, index=True
    )
    action_id: Mapped[str] = mapped_column(String(64), nullable=False)
    points: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<BonusActionCompletion(entry_id={self.entry_id}, action_id='{self.action_id}')>"
