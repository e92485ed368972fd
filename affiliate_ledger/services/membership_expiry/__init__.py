"""Membership expiry notifications."""

from affiliate_ledger.services.membership_expiry.sweeper import (
    ExpiryTarget,
    MembershipExpirySweeper,
    SweepResult,
)
from affiliate_ledger.services.membership_expiry.windows import (
    ExpiryWindow,
    compute_windows,
)

__all__ = [
    "ExpiryTarget",
    "ExpiryWindow",
    "MembershipExpirySweeper",
    "SweepResult",
    "compute_windows",
]
