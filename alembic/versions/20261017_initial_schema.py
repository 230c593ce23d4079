"""Initial database schema

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-17

Creates owner accounts, campaigns and campaign entries.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create all initial tables."""

    # User accounts table
    op.create_table(
        "user_accounts",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("subscription_tier", sa.Enum("FREE", "PRO", name="subscriptiontier"), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=True, default=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_user_accounts_email", "user_accounts", ["email"], unique=True)

    # Campaigns table
    op.create_table(
        "campaigns",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("owner_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("featured_image", sa.String(1000), nullable=True),
        sa.Column("start_date", sa.DateTime(), nullable=False),
        sa.Column("end_date", sa.DateTime(), nullable=False),
        sa.Column("status", sa.Enum("DRAFT", "ACTIVE", "ENDED", name="campaignstatus"), nullable=False),
        sa.Column("slug", sa.String(255), nullable=True),
        sa.Column("prize_title", sa.String(255), nullable=False),
        sa.Column("prize_description", sa.Text(), nullable=False),
        sa.Column("num_winners", sa.Integer(), nullable=False, default=1),
        sa.Column("entry_options", sa.JSON(), nullable=False),
        sa.Column("points_config", sa.JSON(), nullable=False),
        sa.Column("pro_features", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["owner_id"], ["user_accounts.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_campaigns_owner_id", "campaigns", ["owner_id"], unique=False)
    op.create_index("ix_campaigns_slug", "campaigns", ["slug"], unique=True)

    # Campaign entries table
    op.create_table(
        "campaign_entries",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("campaign_id", sa.String(36), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("referral_code", sa.String(32), nullable=False),
        sa.Column("referrer_id", sa.String(36), nullable=True),
        sa.Column("points", sa.Integer(), nullable=False, default=1),
        sa.Column("ip_address", sa.String(64), nullable=True),
        sa.Column("bonus_actions_completed", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["campaign_id"], ["campaigns.id"]),
        sa.ForeignKeyConstraint(["referrer_id"], ["campaign_entries.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("campaign_id", "email", name="uq_campaign_entries_campaign_email"),
    )
    op.create_index("ix_campaign_entries_campaign_id", "campaign_entries", ["campaign_id"], unique=False)
    op.create_index("ix_campaign_entries_referral_code", "campaign_entries", ["referral_code"], unique=True)
    op.create_index("ix_campaign_entries_referrer_id", "campaign_entries", ["referrer_id"], unique=False)


def downgrade() -> None:
    """Drop all tables."""
    op.drop_index("ix_campaign_entries_referrer_id", table_name="campaign_entries")
    op.drop_index("ix_campaign_entries_referral_code", table_name="campaign_entries")
    op.drop_index("ix_campaign_entries_campaign_id", table_name="campaign_entries")
    op.drop_table("campaign_entries")

    op.drop_index("ix_campaigns_slug", table_name="campaigns")
    op.drop_index("ix_campaigns_owner_id", table_name="campaigns")
    op.drop_table("campaigns")

    op.drop_index("ix_user_accounts_email", table_name="user_accounts")
    op.drop_table("user_accounts")
