"""Campaign analytics derived from a campaign's entries.

Everything here is a pure function of an in-memory sequence of entries, so
the dashboard recomputes it on every load. Anything with the Entry
attributes (``id``, ``name``, ``email``, ``points``, ``referrer_id``,
``created_at``, ``bonus_actions_completed``) works.
"""

import datetime as dt
from collections import Counter
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Iterable, Protocol, Sequence
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel

from prizejet.errors import ValidationError


class EntryLike(Protocol):
    id: str
    name: str
    email: str
    points: int
    referrer_id: str | None
    created_at: datetime
    bonus_actions_completed: list[str]


class EntryCounts(BaseModel):
    total: int
    direct: int
    referral: int
    referral_rate: float


class DailyStat(BaseModel):
    date: dt.date
    label: str  # e.g. "Oct 03"
    entries: int
    referrals: int


class TopReferrer(BaseModel):
    entry_id: str
    name: str
    email: str
    referrals: int


class LeaderboardRow(BaseModel):
    rank: int
    entry_id: str
    name: str
    email: str
    points: int
    referrals: int
    bonus_actions: int


class Countdown(BaseModel):
    days: int = 0
    hours: int = 0
    minutes: int = 0
    seconds: int = 0


def resolve_timezone(name: str | None) -> tzinfo:
    """Look up an IANA time zone; empty or "UTC" means UTC."""
    if not name or name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValidationError(f"Unknown time zone: {name}") from exc


def entry_counts(entries: Sequence[EntryLike]) -> EntryCounts:
    total = len(entries)
    direct = sum(1 for entry in entries if not entry.referrer_id)
    referral = total - direct
    rate = referral / total * 100 if total else 0.0
    return EntryCounts(total=total, direct=direct, referral=referral, referral_rate=rate)


def _local_date(moment: datetime, zone: tzinfo) -> date:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(zone).date()


def daily_stats(
    entries: Iterable[EntryLike],
    today: date | None = None,
    days: int = 14,
    tz: str | None = None,
) -> list[DailyStat]:
    """Entries and referrals per calendar day over a trailing window.

    Args:
        entries: Campaign entries
        today: Last day of the window (defaults to today in ``tz``)
        days: Window length
        tz: IANA time zone used to assign entries to days

    Returns:
        Exactly ``days`` buckets, oldest first, zero-filled
    """
    zone = resolve_timezone(tz)
    if today is None:
        today = datetime.now(zone).date()

    buckets: dict[date, list[int]] = {
        today - timedelta(days=offset): [0, 0] for offset in range(days - 1, -1, -1)
    }

    for entry in entries:
        bucket = buckets.get(_local_date(entry.created_at, zone))
        if bucket is None:
            continue
        bucket[0] += 1
        if entry.referrer_id:
            bucket[1] += 1

    return [
        DailyStat(date=day, label=day.strftime("%b %d"), entries=counts[0], referrals=counts[1])
        for day, counts in sorted(buckets.items())
    ]


def referral_counts(entries: Iterable[EntryLike]) -> Counter:
    """Number of entries naming each entry as their referrer."""
    return Counter(entry.referrer_id for entry in entries if entry.referrer_id)


def top_referrers(entries: Sequence[EntryLike], limit: int = 5) -> list[TopReferrer]:
    """Entries that referred the most participants.

    Entries with no referrals are left out; ties keep the input order.
    """
    counts = referral_counts(entries)
    ranked = sorted(
        (entry for entry in entries if counts[entry.id] > 0),
        key=lambda entry: counts[entry.id],
        reverse=True,
    )
    return [
        TopReferrer(entry_id=entry.id, name=entry.name, email=entry.email, referrals=counts[entry.id])
        for entry in ranked[:limit]
    ]


def leaderboard(entries: Sequence[EntryLike], limit: int = 20) -> list[LeaderboardRow]:
    """Entries ranked by points; ties keep the input order."""
    counts = referral_counts(entries)
    ranked = sorted(entries, key=lambda entry: entry.points, reverse=True)
    return [
        LeaderboardRow(
            rank=position,
            entry_id=entry.id,
            name=entry.name,
            email=entry.email,
            points=entry.points,
            referrals=counts[entry.id],
            bonus_actions=len(entry.bonus_actions_completed or []),
        )
        for position, entry in enumerate(ranked[:limit], start=1)
    ]


def filter_entries(entries: Iterable[EntryLike], search: str | None) -> list[EntryLike]:
    """Case-insensitive substring match on name or email."""
    term = (search or "").strip().lower()
    if not term:
        return list(entries)
    return [
        entry for entry in entries
        if term in entry.email.lower() or term in entry.name.lower()
    ]


def time_left(end_date: datetime, now: datetime) -> Countdown:
    """Remaining time until ``end_date``; all zeros once it has passed."""
    remaining = int((end_date - now).total_seconds())
    if remaining <= 0:
        return Countdown()
    days, remaining = divmod(remaining, 86400)
    hours, remaining = divmod(remaining, 3600)
    minutes, seconds = divmod(remaining, 60)
    return Countdown(days=days, hours=hours, minutes=minutes, seconds=seconds)
