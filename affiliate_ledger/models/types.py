"""
Standard type definitions for database models.

Provides consistent types for monetary and rate fields across all models.
"""

from decimal import Decimal

from sqlalchemy import DECIMAL

# Standard money type for amounts and commissions
# Precision: 18 digits total, 8 after decimal point
# Range: up to 9,999,999,999.99999999
MoneyType = DECIMAL(18, 8)

# Commission rate as a fraction (0.6000 = 60%)
# Precision: 6 digits total, 4 after decimal point
RateType = DECIMAL(6, 4)

# Smallest representable step of each column
MONEY_QUANTUM = Decimal(1).scaleb(-MoneyType.scale)
RATE_QUANTUM = Decimal(1).scaleb(-RateType.scale)

# Amounts must stay strictly below this to fit a MoneyType column
MONEY_UPPER_BOUND = Decimal(10) ** (MoneyType.precision - MoneyType.scale)

# Currency code length (ISO 4217)
CURRENCY_CODE_LENGTH = 3
