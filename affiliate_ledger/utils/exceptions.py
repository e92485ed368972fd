"""
Domain exceptions.

Categorized exception types for the commission ledger, status machine
and referral resolution. Each carries a ``retryable`` flag so callers
(webhook handlers, actors) know whether retrying the whole operation
makes sense.
"""


class AffiliateLedgerError(Exception):
    """Base class for all affiliate ledger errors."""

    retryable: bool = False


class ValidationError(AffiliateLedgerError):
    """Input rejected before any write."""


class InvalidAmount(ValidationError):
    """Payment amount is non-positive, non-finite or too large to store."""

    def __init__(self, amount: object) -> None:
        self.amount = amount
        super().__init__(f"Invalid payment amount: {amount!r}")


class InvalidAction(ValidationError):
    """Unknown administrative commission action."""

    def __init__(self, action: object) -> None:
        self.action = action
        super().__init__(f"Invalid action: {action!r}")


class NotFoundError(AffiliateLedgerError):
    """Referenced entity does not exist."""


class ReferralNotFound(NotFoundError):
    """Referral code does not belong to any active affiliate."""

    def __init__(self, referral_code: str) -> None:
        self.referral_code = referral_code
        super().__init__(f"Referral code not found: {referral_code!r}")


class CommissionNotFound(NotFoundError):
    """Commission ID does not exist."""

    def __init__(self, commission_id: int) -> None:
        self.commission_id = commission_id
        super().__init__(f"Commission not found: {commission_id}")


class InvalidTransition(AffiliateLedgerError):
    """Requested status transition is not allowed from the current status."""

    def __init__(self, commission_id: int, current: str, requested: str) -> None:
        self.commission_id = commission_id
        self.current = current
        self.requested = requested
        super().__init__(
            f"Commission {commission_id} cannot move from {current} to {requested}"
        )


class StoreError(AffiliateLedgerError):
    """Persistence failure; safe to retry the whole operation."""

    retryable = True


class InsertFailed(StoreError):
    """Commission insert failed for a reason other than a duplicate payment."""

    def __init__(self, payment_id: str, reason: str) -> None:
        self.payment_id = payment_id
        super().__init__(f"Failed to record commission for payment {payment_id}: {reason}")


class AffiliateNotFound(NotFoundError):
    """Affiliate ID does not exist."""

    def __init__(self, affiliate_id: int) -> None:
        self.affiliate_id = affiliate_id
        super().__init__(f"Affiliate not found: {affiliate_id}")
