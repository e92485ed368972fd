"""
Currency normalizer.

Converts amounts recorded in local currencies into the reference currency
using a static rate table. No state, no I/O.
"""

from decimal import Decimal

from loguru import logger

from affiliate_ledger.config.ledger_config import LedgerConfig
from affiliate_ledger.validators.common import normalize_currency_code


class CurrencyNormalizer:
    """
    Reference-currency converter.

    Rates are units of local currency per one reference unit, so
    ``normalize(100, "GHS")`` with ``{"GHS": 14}`` yields ``100 / 14``.
    Unknown currency codes pass through unchanged: they are treated as
    already being in the reference currency.
    """

    def __init__(self, config: LedgerConfig) -> None:
        """
        Initialize normalizer.

        Args:
            config: Ledger configuration carrying the rate table
        """
        self.config = config

    @property
    def reference_currency(self) -> str:
        """Reference currency code."""
        return self.config.reference_currency

    def normalize(self, amount: Decimal, currency: str | None) -> Decimal:
        """
        Express amount in the reference currency.

        Args:
            amount: Amount in ``currency``
            currency: ISO currency code (empty means reference currency)

        Returns:
            Amount in reference currency (unrounded)
        """
        code = normalize_currency_code(currency, default=self.reference_currency)

        if code == self.reference_currency:
            return amount

        rate = self.config.rate_table.get(code)
        if rate is None:
            logger.warning(
                "Unknown currency, treating amount as reference currency",
                extra={"currency": code, "amount": str(amount)},
            )
            return amount

        return amount / rate

