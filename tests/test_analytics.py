"""
Tests for dashboard analytics
"""

from datetime import date, datetime, timedelta
from types import SimpleNamespace

import pytest

from prizejet.analytics.stats import (
    Countdown,
    daily_stats,
    entry_counts,
    filter_entries,
    leaderboard,
    referral_counts,
    time_left,
    top_referrers,
)
from prizejet.errors import ValidationError


def make_entry(entry_id, referrer_id=None, points=1, created_at=None, name=None, email=None, bonus=None):
    return SimpleNamespace(
        id=entry_id,
        name=name or entry_id.upper(),
        email=email or f"{entry_id}@example.com",
        points=points,
        referrer_id=referrer_id,
        created_at=created_at or datetime(2026, 10, 3, 12, 0),
        bonus_actions_completed=bonus or [],
    )


class TestEntryCounts:
    def test_empty(self):
        counts = entry_counts([])
        assert counts.total == 0
        assert counts.referral_rate == 0.0

    def test_direct_and_referral(self):
        entries = [make_entry("a"), make_entry("b", referrer_id="a")]
        counts = entry_counts(entries)

        assert counts.total == 2
        assert counts.direct == 1
        assert counts.referral == 1
        assert counts.referral_rate == 50.0


class TestDailyStats:
    def test_window_is_zero_filled_and_chronological(self):
        entries = [
            make_entry("a", created_at=datetime(2026, 10, 3, 12, 0)),
            make_entry("b", referrer_id="a", created_at=datetime(2026, 10, 2, 23, 30)),
            make_entry("old", created_at=datetime(2026, 9, 1, 8, 0)),
        ]

        stats = daily_stats(entries, today=date(2026, 10, 3), days=14)

        assert len(stats) == 14
        assert stats[0].date == date(2026, 9, 20)
        assert stats[-1].date == date(2026, 10, 3)
        assert stats[-1].label == "Oct 03"
        assert (stats[-1].entries, stats[-1].referrals) == (1, 0)
        assert (stats[-2].entries, stats[-2].referrals) == (1, 1)
        assert sum(day.entries for day in stats) == 2

    def test_buckets_by_local_date(self):
        # 02:00 UTC is still the previous evening in New York
        entries = [make_entry("a", created_at=datetime(2026, 10, 3, 2, 0))]

        stats = daily_stats(entries, today=date(2026, 10, 3), days=2, tz="America/New_York")

        assert [(bucket.date, bucket.entries) for bucket in stats] == [
            (date(2026, 10, 2), 1),
            (date(2026, 10, 3), 0),
        ]

    def test_unknown_timezone(self):
        with pytest.raises(ValidationError):
            daily_stats([], today=date(2026, 10, 3), tz="Mars/Olympus_Mons")


class TestReferrers:
    def test_referral_counts(self):
        entries = [make_entry("a"), make_entry("b", referrer_id="a"), make_entry("c", referrer_id="a")]
        assert referral_counts(entries) == {"a": 2}

    def test_top_referrers_skip_zero_and_keep_tie_order(self):
        entries = [
            make_entry("a"),
            make_entry("b"),
            make_entry("c"),
            make_entry("d", referrer_id="b"),
            make_entry("e", referrer_id="a"),
            make_entry("f", referrer_id="b"),
            make_entry("g", referrer_id="c"),
        ]

        top = top_referrers(entries, limit=5)

        assert [row.entry_id for row in top] == ["b", "a", "c"]
        assert [row.referrals for row in top] == [2, 1, 1]

    def test_top_referrers_limit(self):
        entries = [make_entry("a"), make_entry("b"), make_entry("c", referrer_id="a"), make_entry("d", referrer_id="b")]
        assert len(top_referrers(entries, limit=1)) == 1


class TestLeaderboard:
    def test_ranked_by_points(self):
        entries = [
            make_entry("a", points=11),
            make_entry("b", referrer_id="a", points=6, bonus=["share"]),
            make_entry("c", points=6),
            make_entry("d", points=1),
        ]

        rows = leaderboard(entries, limit=3)

        assert [row.entry_id for row in rows] == ["a", "b", "c"]
        assert [row.rank for row in rows] == [1, 2, 3]
        assert rows[0].referrals == 1
        assert rows[1].bonus_actions == 1


def test_filter_entries():
    entries = [
        make_entry("a", name="Ann Lee", email="ann@example.com"),
        make_entry("b", name="Bob", email="bob@shop.io"),
    ]

    assert [e.id for e in filter_entries(entries, "SHOP")] == ["b"]
    assert [e.id for e in filter_entries(entries, "lee")] == ["a"]
    assert len(filter_entries(entries, "  ")) == 2


def test_time_left():
    now = datetime(2026, 10, 3, 12, 0, 0)
    end = now + timedelta(days=1, hours=2, minutes=3, seconds=4)

    assert time_left(end, now) == Countdown(days=1, hours=2, minutes=3, seconds=4)
    assert time_left(now - timedelta(seconds=1), now) == Countdown()
