"""
Tests for entry admission, referral credit and bonus actions
"""

import threading
from datetime import timedelta

import pytest

from prizejet.analytics.stats import entry_counts
from prizejet.errors import (
    CampaignClosedError,
    DuplicateEntryError,
    NotFoundError,
    UpstreamError,
    ValidationError,
)
from prizejet.referral.service import REFERRAL_ALPHABET, ReferralService, generate_referral_code
from prizejet.storage.models import utcnow
from prizejet.storage.repo import EntryRepository


class TestSubmitEntry:
    def test_direct_entry(self, make_campaign, entry_service):
        campaign = make_campaign()

        entry = entry_service.submit_entry(
            campaign.id, name="  Ann  ", email=" Ann@Example.com ", ip_address="203.0.113.7"
        )

        assert entry.name == "Ann"
        assert entry.email == "ann@example.com"
        assert entry.points == 1
        assert entry.referrer_id is None
        assert entry.ip_address == "203.0.113.7"
        assert len(entry.referral_code) == 8

    def test_referral_credits_referrer(self, make_campaign, entry_service):
        campaign = make_campaign()
        ann = entry_service.submit_entry(campaign.id, name="Ann", email="ann@example.com")

        bob = entry_service.submit_entry(
            campaign.id, name="Bob", email="bob@example.com", referral_code=ann.referral_code
        )

        assert bob.referrer_id == ann.id
        assert bob.points == 1
        assert entry_service.get_entry(ann.id).points == 11

        counts = entry_counts(entry_service.list_entries(campaign.id))
        assert counts.total == 2
        assert counts.referral == 1
        assert counts.referral_rate == 50.0

    def test_custom_referral_points(self, make_campaign, entry_service):
        campaign = make_campaign(points_config={"referral_points": 25})
        ann = entry_service.submit_entry(campaign.id, name="Ann", email="ann@example.com")

        entry_service.submit_entry(campaign.id, name="Bob", email="bob@example.com", referral_code=ann.referral_code)

        assert entry_service.get_entry(ann.id).points == 26

    def test_referrer_id_used_without_code(self, make_campaign, entry_service):
        campaign = make_campaign()
        ann = entry_service.submit_entry(campaign.id, name="Ann", email="ann@example.com")

        bob = entry_service.submit_entry(campaign.id, name="Bob", email="bob@example.com", referrer_id=ann.id)

        assert bob.referrer_id == ann.id
        assert entry_service.get_entry(ann.id).points == 11

    def test_unknown_code_is_direct_entry(self, make_campaign, entry_service):
        campaign = make_campaign()

        entry = entry_service.submit_entry(
            campaign.id, name="Bob", email="bob@example.com", referral_code="nosuchcd"
        )

        assert entry.referrer_id is None

    def test_code_from_other_campaign_ignored(self, make_campaign, entry_service):
        first = make_campaign()
        second = make_campaign(title="Winter Giveaway")
        ann = entry_service.submit_entry(first.id, name="Ann", email="ann@example.com")

        bob = entry_service.submit_entry(
            second.id, name="Bob", email="bob@example.com", referral_code=ann.referral_code
        )

        assert bob.referrer_id is None
        assert entry_service.get_entry(ann.id).points == 1

    def test_referral_disabled_awards_nothing(self, make_campaign, entry_service):
        campaign = make_campaign(entry_options={"referral_enabled": False})
        ann = entry_service.submit_entry(campaign.id, name="Ann", email="ann@example.com")

        entry_service.submit_entry(campaign.id, name="Bob", email="bob@example.com", referral_code=ann.referral_code)

        assert entry_service.get_entry(ann.id).points == 1

    def test_duplicate_email_case_insensitive(self, make_campaign, entry_service):
        campaign = make_campaign()
        entry_service.submit_entry(campaign.id, name="Ann", email="ann@example.com")

        with pytest.raises(DuplicateEntryError):
            entry_service.submit_entry(campaign.id, name="Ann again", email="ANN@example.com")

        assert entry_service.count_entries(campaign.id) == 1

    def test_same_email_in_another_campaign(self, make_campaign, entry_service):
        first = make_campaign()
        second = make_campaign(title="Winter Giveaway")
        entry_service.submit_entry(first.id, name="Ann", email="ann@example.com")

        entry = entry_service.submit_entry(second.id, name="Ann", email="ann@example.com")

        assert entry.campaign_id == second.id

    def test_storage_conflict_reported_as_duplicate(self, make_campaign, entry_service, monkeypatch):
        campaign = make_campaign()
        ann = entry_service.submit_entry(campaign.id, name="Ann", email="ann@example.com")
        real_email_exists = EntryRepository.email_exists
        checks = []

        def first_check_misses(self, campaign_id, email):
            # A concurrent submission that passed the pre-check
            checks.append(email)
            return False if len(checks) == 1 else real_email_exists(self, campaign_id, email)

        monkeypatch.setattr(EntryRepository, "email_exists", first_check_misses)

        with pytest.raises(DuplicateEntryError):
            entry_service.submit_entry(
                campaign.id, name="Ann", email="ann@example.com", referral_code=ann.referral_code
            )

        assert entry_service.count_entries(campaign.id) == 1
        assert entry_service.get_entry(ann.id).points == 1

    def test_referral_code_conflict_is_not_a_duplicate(self, make_campaign, entry_service, monkeypatch):
        campaign = make_campaign()
        ann = entry_service.submit_entry(campaign.id, name="Ann", email="ann@example.com")
        monkeypatch.setattr(ReferralService, "allocate_code", lambda self, session: ann.referral_code)

        with pytest.raises(UpstreamError):
            entry_service.submit_entry(
                campaign.id, name="Bob", email="bob@example.com", referral_code=ann.referral_code
            )

        assert entry_service.count_entries(campaign.id) == 1
        assert entry_service.get_entry(ann.id).points == 1

    @pytest.mark.parametrize("name,email", [("", "ann@example.com"), ("Ann", "  ")])
    def test_missing_fields(self, make_campaign, entry_service, name, email):
        campaign = make_campaign()

        with pytest.raises(ValidationError):
            entry_service.submit_entry(campaign.id, name=name, email=email)

    def test_draft_campaign_not_found(self, make_campaign, entry_service):
        campaign = make_campaign(publish=False)

        with pytest.raises(NotFoundError):
            entry_service.submit_entry(campaign.id, name="Ann", email="ann@example.com")

    def test_unknown_campaign_not_found(self, entry_service):
        with pytest.raises(NotFoundError):
            entry_service.submit_entry("missing", name="Ann", email="ann@example.com")

    def test_ended_campaign_closed(self, make_campaign, entry_service):
        now = utcnow()
        campaign = make_campaign(start_date=now - timedelta(days=10), end_date=now - timedelta(days=1))

        with pytest.raises(CampaignClosedError):
            entry_service.submit_entry(campaign.id, name="Ann", email="ann@example.com")

    def test_list_entries_search(self, make_campaign, entry_service):
        campaign = make_campaign()
        entry_service.submit_entry(campaign.id, name="Ann Lee", email="ann@example.com")
        entry_service.submit_entry(campaign.id, name="Bob", email="bob@shop.io")

        assert [e.name for e in entry_service.list_entries(campaign.id, search="SHOP")] == ["Bob"]
        assert [e.name for e in entry_service.list_entries(campaign.id, search="lee")] == ["Ann Lee"]
        assert len(entry_service.list_entries(campaign.id)) == 2

    def test_get_entry_missing(self, entry_service):
        with pytest.raises(NotFoundError):
            entry_service.get_entry("missing")


class TestBonusActions:
    @pytest.fixture
    def campaign(self, make_campaign):
        return make_campaign(entry_options={
            "bonus_actions": [
                {"id": "share1", "type": "social_share", "title": "Share on X", "points": 5},
            ],
        })

    def test_complete_awards_points_once(self, campaign, entry_service):
        entry = entry_service.submit_entry(campaign.id, name="Ann", email="ann@example.com")

        done = entry_service.complete_bonus_action(entry.id, "share1")
        again = entry_service.complete_bonus_action(entry.id, "share1")

        assert done.points == 6
        assert done.bonus_actions_completed == ["share1"]
        assert again.points == 6
        assert entry_service.get_entry(entry.id).points == 6

    def test_unknown_action(self, campaign, entry_service):
        entry = entry_service.submit_entry(campaign.id, name="Ann", email="ann@example.com")

        with pytest.raises(NotFoundError):
            entry_service.complete_bonus_action(entry.id, "nope")

    def test_unknown_entry(self, entry_service):
        with pytest.raises(NotFoundError):
            entry_service.complete_bonus_action("missing", "share1")


class TestReferralCodes:
    def test_code_format(self):
        code = generate_referral_code()
        assert len(code) == 8
        assert set(code) <= set(REFERRAL_ALPHABET)

    def test_allocation_gives_up_after_collisions(self, db, monkeypatch):
        monkeypatch.setattr(EntryRepository, "code_exists", lambda self, code: True)
        service = ReferralService(max_attempts=3)

        with db.session() as session, pytest.raises(UpstreamError):
            service.allocate_code(session)


def run_together(count, target):
    """Start ``count`` threads that call ``target(i)`` at the same moment."""
    barrier = threading.Barrier(count)
    results, errors = [], []

    def worker(i):
        barrier.wait()
        try:
            results.append(target(i))
        except Exception as exc:  # collected for the assertion below
            errors.append(exc)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(count)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)
    return results, errors


class TestConcurrency:
    def test_simultaneous_referrals_all_credited(self, make_campaign, entry_service):
        campaign = make_campaign()
        ann = entry_service.submit_entry(campaign.id, name="Ann", email="ann@example.com")

        results, errors = run_together(
            8,
            lambda i: entry_service.submit_entry(
                campaign.id, name=f"Friend {i}", email=f"friend{i}@example.com", referral_code=ann.referral_code
            ),
        )

        assert errors == []
        assert len(results) == 8
        assert all(entry.referrer_id == ann.id for entry in results)
        assert entry_service.get_entry(ann.id).points == 1 + 10 * len(results)

    def test_simultaneous_bonus_action_awarded_once(self, make_campaign, entry_service):
        campaign = make_campaign(entry_options={
            "bonus_actions": [{"id": "share1", "type": "social_share", "title": "Share on X", "points": 5}],
        })
        ann = entry_service.submit_entry(campaign.id, name="Ann", email="ann@example.com")

        results, errors = run_together(6, lambda i: entry_service.complete_bonus_action(ann.id, "share1"))

        assert errors == []
        assert len(results) == 6
        entry = entry_service.get_entry(ann.id)
        assert entry.points == 6
        assert entry.bonus_actions_completed == ["share1"]

    def test_simultaneous_different_actions_all_kept(self, make_campaign, entry_service):
        actions = [
            {"id": f"act{i}", "type": "custom", "title": f"Action {i}", "points": 2}
            for i in range(4)
        ]
        campaign = make_campaign(entry_options={"bonus_actions": actions})
        ann = entry_service.submit_entry(campaign.id, name="Ann", email="ann@example.com")

        _, errors = run_together(4, lambda i: entry_service.complete_bonus_action(ann.id, f"act{i}"))

        assert errors == []
        entry = entry_service.get_entry(ann.id)
        assert entry.points == 1 + 2 * 4
        assert sorted(entry.bonus_actions_completed) == ["act0", "act1", "act2", "act3"]
