"""
Ledger configuration object.

Bundles the rate table and commission defaults so they can be injected
into the normalizer and the ledger instead of read from module globals.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from types import MappingProxyType

from affiliate_ledger.config.business_constants import (
    DEFAULT_COMMISSION_RATE,
    DEFAULT_CURRENCY_RATES,
    REFERENCE_CURRENCY,
)
from affiliate_ledger.models.types import RATE_QUANTUM


def quantize_rate(rate: Decimal) -> Decimal:
    """
    Round a commission rate to the precision stored on commissions.

    Examples:
        >>> quantize_rate(Decimal("0.33333"))
        Decimal('0.3333')
    """
    return rate.quantize(RATE_QUANTUM, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class LedgerConfig:
    """
    Read-only commission configuration.

    Attributes:
        rate_table: Currency code -> units per 1 reference unit
        default_commission_rate: Rate used when an affiliate has no override,
            rounded to four decimal places
        reference_currency: Currency every commission is recorded in
    """

    rate_table: Mapping[str, Decimal] = field(
        default_factory=lambda: dict(DEFAULT_CURRENCY_RATES)
    )
    default_commission_rate: Decimal = DEFAULT_COMMISSION_RATE
    reference_currency: str = REFERENCE_CURRENCY

    def __post_init__(self) -> None:
        normalized = {
            code.upper(): Decimal(str(rate))
            for code, rate in self.rate_table.items()
        }
        for code, rate in normalized.items():
            if not rate.is_finite() or rate <= 0:
                raise ValueError(f"Invalid exchange rate for {code}: {rate}")

        rate = Decimal(str(self.default_commission_rate))
        if not rate.is_finite():
            raise ValueError(f"Invalid default commission rate: {rate}")
        rate = quantize_rate(rate)
        if rate <= 0 or rate > 1:
            raise ValueError(f"Invalid default commission rate: {rate}")

        object.__setattr__(self, "rate_table", MappingProxyType(normalized))
        object.__setattr__(self, "default_commission_rate", rate)
        object.__setattr__(
            self, "reference_currency", self.reference_currency.upper()
        )

    @classmethod
    def from_settings(cls) -> "LedgerConfig":
        """Build config from application settings."""
        from affiliate_ledger.config.settings import settings

        return cls(
            default_commission_rate=settings.default_commission_rate,
            reference_currency=settings.reference_currency,
        )
