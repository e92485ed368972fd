"""
Business logic constants for the affiliate ledger.

Central location for commission, currency and ranking rules.
Must not import settings: settings imports this module for its defaults.
"""

from decimal import Decimal


# Every aggregated commission amount is expressed in this currency
REFERENCE_CURRENCY = "USD"

# Units of local currency per 1 unit of the reference currency
DEFAULT_CURRENCY_RATES: dict[str, Decimal] = {
    "GHS": Decimal("14"),
    "NGN": Decimal("1600"),
    "XOF": Decimal("600"),
    "XAF": Decimal("600"),
    "EUR": Decimal("0.92"),
    "GBP": Decimal("0.79"),
}

# Share of the normalized payment amount paid to the referring affiliate
DEFAULT_COMMISSION_RATE = Decimal("0.60")

# Commission type recorded for learner referrals
COMMISSION_TYPE_LEARNER_REFERRAL = "learner_referral"

# Leaderboard level bands: (last rank in band, label), ascending
LEVEL_BANDS: tuple[tuple[int, str], ...] = (
    (3, "Legends"),
    (6, "Champions"),
    (10, "Elites"),
    (15, "Rising Stars"),
    (20, "Dream Chasers"),
)
DEFAULT_LEVEL = "Starter"

# Membership expiry thresholds (days relative to today)
SEVEN_DAY_WARNING_OFFSET_DAYS = 7
DAY_OF_WARNING_OFFSET_DAYS = 0
EXPIRED_OFFSET_DAYS = -1

# Renewal page path appended to settings.site_url
MEMBERSHIP_RENEWAL_PATH = "/dashboard/learner/membership"
