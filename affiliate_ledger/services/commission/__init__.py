"""
Commission services package.

- ledger: idempotent commission recording
- status_machine: payout state transitions
- admin: administrative actions with explicit results
- statistics: listing and aggregate totals
"""

from affiliate_ledger.services.commission.admin import ActionResult, CommissionAdminService
from affiliate_ledger.services.commission.ledger import CommissionLedger, CommissionResult
from affiliate_ledger.services.commission.statistics import (
    CommissionListItem,
    CommissionOverview,
    CommissionPage,
    CommissionStatisticsService,
)
from affiliate_ledger.services.commission.status_machine import (
    ACTION_TARGETS,
    ALLOWED_TRANSITIONS,
    CommissionStatusMachine,
    can_transition,
    target_for_action,
)

__all__ = [
    # Ledger
    "CommissionLedger",
    "CommissionResult",
    # Status machine
    "ACTION_TARGETS",
    "ALLOWED_TRANSITIONS",
    "CommissionStatusMachine",
    "can_transition",
    "target_for_action",
    # Admin
    "ActionResult",
    "CommissionAdminService",
    # Statistics
    "CommissionListItem",
    "CommissionOverview",
    "CommissionPage",
    "CommissionStatisticsService",
]
