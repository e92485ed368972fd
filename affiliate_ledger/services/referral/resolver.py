"""
Referral resolver.

Maps a shareable referral code to the active affiliate that owns it.
"""

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_ledger.models.affiliate import Affiliate
from affiliate_ledger.repositories.affiliate_repository import AffiliateRepository
from affiliate_ledger.utils.exceptions import ReferralNotFound, StoreError
from affiliate_ledger.validators.common import normalize_referral_code


class ReferralResolver:
    """Read-only lookup of affiliates by referral code."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize resolver."""
        self.session = session
        self.affiliate_repo = AffiliateRepository(session)

    async def resolve(self, referral_code: str | None) -> Affiliate:
        """
        Resolve referral code to its affiliate.

        Args:
            referral_code: Code embedded in payment metadata

        Returns:
            Active affiliate owning the code

        Raises:
            ReferralNotFound: Code is blank, unknown or owned by a
                deactivated affiliate
            StoreError: Lookup failed
        """
        code = normalize_referral_code(referral_code)
        if code is None:
            raise ReferralNotFound(referral_code or "")

        try:
            affiliate = await self.affiliate_repo.get_active_by_referral_code(code)
        except SQLAlchemyError as e:
            logger.exception(
                "Referral lookup failed", extra={"referral_code": code}
            )
            raise StoreError("Referral lookup failed") from e

        if affiliate is None:
            logger.info(
                "Referral code did not resolve to an active affiliate",
                extra={"referral_code": code},
            )
            raise ReferralNotFound(code)

        return affiliate
