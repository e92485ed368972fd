"""Referral resolution."""

from affiliate_ledger.services.referral.resolver import ReferralResolver

__all__ = ["ReferralResolver"]
