"""Campaign configuration schemas."""

import secrets
from datetime import datetime, timezone
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class BonusActionType(str, Enum):
    """Kinds of bonus action a participant can complete."""
    SOCIAL_SHARE = "social_share"
    VISIT_LINK = "visit_link"
    CUSTOM = "custom"


class AutoresponderProvider(str, Enum):
    MAILCHIMP = "mailchimp"
    CONVERTKIT = "convertkit"
    NONE = "none"


class BonusAction(BaseModel):
    """An optional task worth extra points."""
    id: str = Field(default_factory=lambda: secrets.token_hex(4))
    type: BonusActionType
    title: str = Field(..., min_length=1)
    points: int = Field(..., ge=1)
    link: str | None = None


class EntryOptions(BaseModel):
    email_opt_in: Literal[True] = True
    referral_enabled: bool = True
    bonus_actions: list[BonusAction] = Field(default_factory=list)

    @field_validator("bonus_actions")
    @classmethod
    def unique_action_ids(cls, actions: list[BonusAction]) -> list[BonusAction]:
        ids = [action.id for action in actions]
        if len(ids) != len(set(ids)):
            raise ValueError("Bonus action IDs must be unique")
        return actions


class PointsConfig(BaseModel):
    referral_points: int = Field(default=10, ge=1)


class AutoresponderIntegration(BaseModel):
    enabled: bool = False
    provider: AutoresponderProvider = AutoresponderProvider.NONE
    api_key: str | None = None
    list_id: str | None = None


class ProFeatures(BaseModel):
    autoresponder_integration: AutoresponderIntegration = Field(default_factory=AutoresponderIntegration)
    webhook_url: str | None = None

    @property
    def in_use(self) -> bool:
        """True if any integration that needs a Pro subscription is configured."""
        return self.autoresponder_integration.enabled or bool(self.webhook_url)


class CampaignInput(BaseModel):
    """Fields an owner supplies when creating or editing a campaign."""
    title: str = Field(..., min_length=3, max_length=255)
    description: str = Field(..., min_length=10)
    featured_image: str | None = None
    start_date: datetime
    end_date: datetime
    prize_title: str = Field(..., min_length=3, max_length=255)
    prize_description: str = Field(..., min_length=10)
    num_winners: int = Field(default=1, ge=1, le=100)
    entry_options: EntryOptions = Field(default_factory=EntryOptions)
    points_config: PointsConfig = Field(default_factory=PointsConfig)
    pro_features: ProFeatures = Field(default_factory=ProFeatures)

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "title": "Summer Giveaway",
            "description": "Win a brand new bike this summer.",
            "start_date": "2026-06-01T00:00:00Z",
            "end_date": "2026-06-30T23:59:59Z",
            "prize_title": "Road bike",
            "prize_description": "A carbon road bike in your size.",
            "num_winners": 1,
            "entry_options": {
                "referral_enabled": True,
                "bonus_actions": [
                    {"type": "visit_link", "title": "Visit our shop", "points": 5, "link": "https://example.com"}
                ],
            },
            "points_config": {"referral_points": 10},
        }
    })

    @field_validator("start_date", "end_date")
    @classmethod
    def to_naive_utc(cls, value: datetime) -> datetime:
        return _naive_utc(value)

    @model_validator(mode="after")
    def end_after_start(self) -> "CampaignInput":
        if self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date")
        return self

    def to_columns(self) -> dict:
        """Column values for the Campaign model."""
        return {
            "title": self.title.strip(),
            "description": self.description,
            "featured_image": self.featured_image,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "prize_title": self.prize_title,
            "prize_description": self.prize_description,
            "num_winners": self.num_winners,
            "entry_options": self.entry_options.model_dump(mode="json"),
            "points_config": self.points_config.model_dump(mode="json"),
            "pro_features": self.pro_features.model_dump(mode="json"),
        }


class CampaignResponse(BaseModel):
    """Owner view of a campaign."""
    id: str
    title: str
    description: str
    featured_image: str | None = None
    start_date: datetime
    end_date: datetime
    status: str
    stored_status: str
    slug: str | None = None
    public_url: str | None = None
    prize_title: str
    prize_description: str
    num_winners: int
    entry_options: EntryOptions
    points_config: PointsConfig
    pro_features: ProFeatures
    created_at: datetime
    updated_at: datetime


class PublicBonusAction(BaseModel):
    id: str
    type: BonusActionType
    title: str
    points: int
    link: str | None = None


class PublicCampaignResponse(BaseModel):
    """Participant view of a published campaign."""
    id: str
    slug: str
    title: str
    description: str
    featured_image: str | None = None
    start_date: datetime
    end_date: datetime
    status: str
    is_ended: bool
    prize_title: str
    prize_description: str
    num_winners: int
    referral_enabled: bool
    referral_points: int
    bonus_actions: list[PublicBonusAction]
