"""Add bonus_action_completions

Revision ID: 002_bonus_action_completions
Revises: 001_initial
Create Date: 2026-10-18

One row per completed bonus action. The unique (entry_id, action_id)
constraint lets only one request award the action's points.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "002_bonus_action_completions"
down_revision: Union[str, None] = "001_initial"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create bonus_action_completions."""
    op.create_table(
        "bonus_action_completions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("entry_id", sa.String(36), nullable=False),
        sa.Column("action_id", sa.String(64), nullable=False),
        sa.Column("points", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["entry_id"], ["campaign_entries.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("entry_id", "action_id", name="uq_bonus_action_completions_entry_action"),
    )
    op.create_index(
        "ix_bonus_action_completions_entry_id",
        "bonus_action_completions",
        ["entry_id"],
        unique=False
    )


def downgrade() -> None:
    """Drop bonus_action_completions."""
    op.drop_index("ix_bonus_action_completions_entry_id", table_name="bonus_action_completions")
    op.drop_table("bonus_action_completions")
