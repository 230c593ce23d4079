"""Dashboard analytics for campaigns."""

from prizejet.analytics.stats import (
    Countdown,
    DailyStat,
    EntryCounts,
    LeaderboardRow,
    TopReferrer,
    daily_stats,
    entry_counts,
    filter_entries,
    leaderboard,
    referral_counts,
    time_left,
    top_referrers,
)

__all__ = [
    "Countdown",
    "DailyStat",
    "EntryCounts",
    "LeaderboardRow",
    "TopReferrer",
    "daily_stats",
    "entry_counts",
    "filter_entries",
    "leaderboard",
    "referral_counts",
    "time_left",
    "top_referrers",
]
