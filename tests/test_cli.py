"""
Tests for the operator CLI
"""

import pytest
from typer.testing import CliRunner

from prizejet.auth.models import SubscriptionTier
from prizejet.cli import app

runner = CliRunner()


@pytest.fixture
def db_args(db):
    return ["--database-url", db.database_url]


def test_stats(db_args, make_campaign, entry_service):
    campaign = make_campaign()
    ann = entry_service.submit_entry(campaign.id, name="Ann", email="ann@example.com")
    entry_service.submit_entry(campaign.id, name="Bob", email="bob@example.com", referral_code=ann.referral_code)

    result = runner.invoke(app, [*db_args, "stats", campaign.id])

    assert result.exit_code == 0
    assert "Total entries: 2" in result.output
    assert "50.0%" in result.output


def test_unknown_campaign(db_args):
    result = runner.invoke(app, [*db_args, "leaderboard", "missing"])

    assert result.exit_code == 1
    assert "not found" in result.output


def test_export(db_args, make_campaign, entry_service, tmp_path):
    campaign = make_campaign()
    entry_service.submit_entry(campaign.id, name="Ann", email="ann@example.com")
    output = tmp_path / "out.csv"

    result = runner.invoke(app, [*db_args, "export", campaign.id, "-o", str(output)])

    assert result.exit_code == 0
    assert output.read_text(encoding="utf-8").splitlines()[1].startswith("Ann,ann@example.com,1,No,")


def test_set_tier(db_args, owner, auth_service):
    result = runner.invoke(app, [*db_args, "set-tier", "owner@example.com", "pro"])

    assert result.exit_code == 0
    user = auth_service.authenticate("owner@example.com", "password123")
    assert user.subscription_tier == SubscriptionTier.PRO


def test_set_tier_unknown_user(db_args):
    result = runner.invoke(app, [*db_args, "set-tier", "nobody@example.com", "pro"])
    assert result.exit_code == 1
