"""Unit tests for reference-currency normalization."""

from decimal import Decimal

import pytest

from affiliate_ledger.config.ledger_config import LedgerConfig
from affiliate_ledger.services.currency.normalizer import CurrencyNormalizer


@pytest.fixture
def normalizer():
    return CurrencyNormalizer(LedgerConfig())


class TestNormalize:
    """Tests for CurrencyNormalizer.normalize."""

    def test_reference_currency_passes_through(self, normalizer):
        """USD amounts are returned unchanged."""
        assert normalizer.normalize(Decimal("200"), "USD") == Decimal("200")

    def test_local_currency_divided_by_rate(self, normalizer):
        """GHS is divided by 14 units per USD."""
        assert normalizer.normalize(Decimal("140"), "GHS") == Decimal("10")

    @pytest.mark.parametrize(
        "currency,amount,expected",
        [
            ("NGN", "16000", "10"),
            ("XOF", "6000", "10"),
            ("XAF", "600", "1"),
        ],
    )
    def test_default_rate_table(self, normalizer, currency, amount, expected):
        """Default table converts West African currencies."""
        assert normalizer.normalize(Decimal(amount), currency) == Decimal(expected)

    def test_unknown_currency_passes_through(self, normalizer):
        """Unknown codes are treated as reference currency."""
        assert normalizer.normalize(Decimal("100"), "ZZZ") == Decimal("100")

    def test_lowercase_and_blank_codes(self, normalizer):
        """Codes are case-insensitive; blank means reference currency."""
        assert normalizer.normalize(Decimal("28"), " ghs ") == Decimal("2")
        assert normalizer.normalize(Decimal("5"), "") == Decimal("5")
        assert normalizer.normalize(Decimal("5"), None) == Decimal("5")

    def test_custom_rate_table(self):
        """Injected rate table replaces the defaults."""
        config = LedgerConfig(rate_table={"GHS": Decimal("10")})
        normalizer = CurrencyNormalizer(config)

        assert normalizer.normalize(Decimal("100"), "GHS") == Decimal("10")
        # NGN not in the custom table
        assert normalizer.normalize(Decimal("100"), "NGN") == Decimal("100")


class TestLedgerConfig:
    """Tests for LedgerConfig validation."""

    def test_codes_are_uppercased(self):
        config = LedgerConfig(rate_table={"ghs": 14}, reference_currency="usd")

        assert config.rate_table["GHS"] == Decimal("14")
        assert config.reference_currency == "USD"

    def test_rate_table_is_read_only(self):
        config = LedgerConfig()

        with pytest.raises(TypeError):
            config.rate_table["GHS"] = Decimal("1")

    @pytest.mark.parametrize("rate", ["0", "-2", "NaN"])
    def test_invalid_exchange_rate_rejected(self, rate):
        with pytest.raises(ValueError):
            LedgerConfig(rate_table={"GHS": Decimal(rate)})

    @pytest.mark.parametrize("rate", ["0", "1.5", "-0.1"])
    def test_invalid_commission_rate_rejected(self, rate):
        with pytest.raises(ValueError):
            LedgerConfig(default_commission_rate=Decimal(rate))

    def test_commission_rate_rounded_to_stored_precision(self):
        """The rate applied is the rate a commission row can hold."""
        config = LedgerConfig(default_commission_rate=Decimal("0.33333"))

        assert config.default_commission_rate == Decimal("0.3333")

    @pytest.mark.parametrize("rate", ["0.00001", "NaN"])
    def test_commission_rate_vanishing_or_non_finite_rejected(self, rate):
        with pytest.raises(ValueError):
            LedgerConfig(default_commission_rate=Decimal(rate))
