"""Authentication models for campaign owners."""

from enum import Enum

from sqlalchemy import Boolean, Column, DateTime, Enum as SQLEnum, Integer, String

from prizejet.storage.models import Base, utcnow


class SubscriptionTier(str, Enum):
    """Subscription tier levels."""
    FREE = "free"  # Core campaign features
    PRO = "pro"    # Autoresponder and webhook integrations


class UserAccount(Base):
    """Marketer account that owns campaigns."""
    __tablename__ = "user_accounts"

    id = Column(Integer, primary_key=True)

    # Identity
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=True)
    password_hash = Column(String(255), nullable=False)

    # Subscription
    subscription_tier = Column(SQLEnum(SubscriptionTier), default=SubscriptionTier.FREE, nullable=False)

    # Status
    is_active = Column(Boolean, default=True)

    # Timestamps
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<UserAccount(id={self.id}, email={self.email}, tier={self.subscription_tier})>"

    @property
    def is_pro(self) -> bool:
        return self.subscription_tier == SubscriptionTier.PRO
