"""
Affiliate leaderboard computation.

Pure function over commissions and affiliates; recomputed on every
request and never stored.

Ordering: total earnings descending, then affiliate ID ascending, so equal
earners keep the same relative order across runs.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol

from affiliate_ledger.config.business_constants import DEFAULT_LEVEL, LEVEL_BANDS


class CommissionLike(Protocol):
    affiliate_id: int
    commission_amount: Decimal
    status: str


class AffiliateLike(Protocol):
    id: int
    display_name: str | None


@dataclass(frozen=True)
class AffiliateRankingEntry:
    """One leaderboard row."""

    affiliate_id: int
    display_name: str
    total_earnings: Decimal
    referral_count: int
    rank: int
    level: str


def level_for_rank(
    rank: int,
    bands: Sequence[tuple[int, str]] = LEVEL_BANDS,
    default: str = DEFAULT_LEVEL,
) -> str:
    """
    Get level label for a 1-based rank.

    Examples:
        >>> level_for_rank(1)
        'Legends'
        >>> level_for_rank(21)
        'Starter'
    """
    if rank < 1:
        return default
    for last_rank, label in bands:
        if rank <= last_rank:
            return label
    return default


def eligible_affiliates(affiliates: Iterable) -> list:
    """
    Affiliates allowed on the leaderboard.

    Only affiliates that completed onboarding and have a display name.
    """
    return [
        affiliate
        for affiliate in affiliates
        if getattr(affiliate, "onboarding_completed", False)
        and (getattr(affiliate, "display_name", None) or "").strip()
    ]


def compute_leaderboard(
    commissions: Iterable[CommissionLike],
    affiliates: Iterable[AffiliateLike],
    statuses: Iterable[str] | None = None,
    bands: Sequence[tuple[int, str]] = LEVEL_BANDS,
) -> list[AffiliateRankingEntry]:
    """
    Rank affiliates by summed commission amount.

    Every affiliate passed in appears, including those with no
    commissions; commissions of affiliates not passed in are ignored.
    Affiliates with zero earnings get the default (lowest) level
    regardless of rank.

    Args:
        commissions: Commission records (amounts in reference currency)
        affiliates: Affiliates to rank (already filtered for eligibility)
        statuses: Only count commissions in these statuses (None = all)
        bands: Level bands as (last rank, label), ascending

    Returns:
        Entries ordered by rank
    """
    by_id: dict[int, AffiliateLike] = {}
    for affiliate in affiliates:
        by_id.setdefault(affiliate.id, affiliate)

    allowed = {str(s) for s in statuses} if statuses is not None else None

    earnings: dict[int, Decimal] = {affiliate_id: Decimal("0") for affiliate_id in by_id}
    counts: dict[int, int] = {affiliate_id: 0 for affiliate_id in by_id}

    for commission in commissions:
        affiliate_id = commission.affiliate_id
        if affiliate_id not in by_id:
            continue
        if allowed is not None and commission.status not in allowed:
            continue
        earnings[affiliate_id] += Decimal(commission.commission_amount)
        counts[affiliate_id] += 1

    ordered = sorted(by_id, key=lambda affiliate_id: (-earnings[affiliate_id], affiliate_id))

    entries = []
    for rank, affiliate_id in enumerate(ordered, start=1):
        total = earnings[affiliate_id]
        entries.append(
            AffiliateRankingEntry(
                affiliate_id=affiliate_id,
                display_name=(by_id[affiliate_id].display_name or "").strip(),
                total_earnings=total,
                referral_count=counts[affiliate_id],
                rank=rank,
                level=level_for_rank(rank, bands) if total > 0 else DEFAULT_LEVEL,
            )
        )

    return entries
