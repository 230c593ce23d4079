"""
PyTest configuration and fixtures
"""

import os
from datetime import timedelta

import pytest

os.environ.setdefault("PRIZEJET_ENV", "test")
os.environ.setdefault("PRIZEJET_LOG_LEVEL", "WARNING")

from prizejet.auth.local import LocalAuthService  # noqa: E402
from prizejet.auth.models import SubscriptionTier  # noqa: E402
from prizejet.campaigns.schemas import CampaignInput  # noqa: E402
from prizejet.campaigns.service import CampaignService  # noqa: E402
from prizejet.entries.service import EntryService  # noqa: E402
from prizejet.storage.db import Database  # noqa: E402
from prizejet.storage.models import utcnow  # noqa: E402


@pytest.fixture
def db(tmp_path):
    """Fresh SQLite database per test"""
    database = Database(f"sqlite:///{tmp_path / 'test.db'}", echo=False)
    database.create_tables()
    yield database
    database.dispose()


@pytest.fixture
def auth_service(db):
    return LocalAuthService(db)


@pytest.fixture
def owner(auth_service):
    return auth_service.create_user("owner@example.com", "password123", name="Owner")


@pytest.fixture
def pro_owner(auth_service):
    auth_service.create_user("pro@example.com", "password123", name="Pro Owner")
    return auth_service.set_subscription_tier("pro@example.com", SubscriptionTier.PRO)


@pytest.fixture
def campaign_service(db):
    return CampaignService(db)


@pytest.fixture
def entry_service(db):
    return EntryService(db)


def campaign_fields(**overrides):
    """Valid campaign input, running from yesterday for a month"""
    now = utcnow()
    fields = {
        "title": "Summer Giveaway",
        "description": "Win a brand new bike this summer.",
        "start_date": now - timedelta(days=1),
        "end_date": now + timedelta(days=30),
        "prize_title": "Road bike",
        "prize_description": "A carbon road bike in your size.",
        "num_winners": 1,
    }
    fields.update(overrides)
    return fields


@pytest.fixture
def make_campaign(campaign_service, owner):
    """Factory for campaigns; published unless told otherwise"""

    def _make(publish: bool = True, user=None, **overrides):
        user = user or owner
        campaign = campaign_service.create_campaign(user, CampaignInput(**campaign_fields(**overrides)))
        if publish:
            campaign = campaign_service.publish(user, campaign.id)
        return campaign

    return _make
