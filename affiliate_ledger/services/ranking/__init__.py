"""Affiliate ranking."""

from affiliate_ledger.services.ranking.leaderboard import (
    AffiliateRankingEntry,
    compute_leaderboard,
    eligible_affiliates,
    level_for_rank,
)
from affiliate_ledger.services.ranking.service import (
    LeaderboardPage,
    LeaderboardService,
    LeaderboardStats,
)

__all__ = [
    "AffiliateRankingEntry",
    "LeaderboardPage",
    "LeaderboardService",
    "LeaderboardStats",
    "compute_leaderboard",
    "eligible_affiliates",
    "level_for_rank",
]
