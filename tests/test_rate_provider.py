"""
Rate Provider Tests - connect, curves, quotes and error handling.
"""
import asyncio
from decimal import Decimal

import pytest

from fxbackend.application.rate_provider import PROBE_SOURCE_AMOUNT, RateProvider
from fxbackend.domain.errors import (
    AmbiguousAmountError,
    AssetsNotTradedError,
    InvalidAmountError,
    InvalidConfigurationError,
    MissingParameterError,
    NoAmountSpecifiedError,
    RateFetchError,
)

from tests.conftest import EUR_LEDGER, JPY_LEDGER, PAIRS, USD_LEDGER, FakeRateSource


def _provider(source, spread=0.01, **kwargs):
    kwargs.setdefault("currency_with_ledger_pairs", PAIRS)
    return RateProvider(spread=spread, source=source, **kwargs)


class TestConstruction:
    def test_currencies_from_pairs(self, source):
        provider = _provider(source)
        assert provider.currencies == ["USD", "EUR", "JPY"]
        assert provider.spread == Decimal("0.01")
        assert provider.connected is False

    def test_extra_currencies(self, source):
        provider = _provider(source, currencies=["gbp"])
        assert provider.currencies == ["GBP", "USD", "EUR", "JPY"]

    def test_currencies_only(self, source):
        provider = RateProvider(currencies=["EUR", "JPY"], source=source)
        assert provider.currencies == ["EUR", "JPY"]
        assert len(provider.pairs) == 0

    @pytest.mark.parametrize("config", [{"USD": "EUR"}, {}, "", set()])
    def test_unsupported_pair_shape(self, source, config):
        with pytest.raises(InvalidConfigurationError, match="Unexpected type"):
            RateProvider(currency_with_ledger_pairs=config, currencies=["EUR"], source=source)

    @pytest.mark.parametrize("spread", [-0.1, 1, 1.5])
    def test_spread_out_of_range(self, source, spread):
        with pytest.raises(InvalidConfigurationError, match="Spread"):
            _provider(source, spread=spread)

    def test_nothing_to_quote(self, source):
        with pytest.raises(InvalidConfigurationError, match="No ledger pairs"):
            RateProvider(currency_with_ledger_pairs=[], currencies=[], source=source)

    def test_unknown_curve_probe(self, source):
        with pytest.raises(InvalidConfigurationError, match="curve probe"):
            _provider(source, curve_probe="sometimes")


class TestConnect:
    @pytest.mark.asyncio
    async def test_connect_populates_rate_table(self, source):
        provider = _provider(source)
        await provider.connect()

        assert provider.connected is True
        table = provider.rate_table
        assert table.base == "USD"
        assert table.rate_for("USD") == Decimal("1")
        assert table.rate_for("EUR") == Decimal("0.9")
        assert table.fetched_at is not None
        assert source.requested == [["USD", "EUR", "JPY"]]

    @pytest.mark.asyncio
    async def test_second_connect_does_not_fetch(self, source):
        provider = _provider(source)
        await provider.connect()
        await provider.connect()
        assert source.calls == 1

    @pytest.mark.asyncio
    async def test_concurrent_connects_share_one_fetch(self):
        source = FakeRateSource({"EUR": "0.9", "JPY": "110.37"}, delay=0.05)
        provider = _provider(source)

        await asyncio.gather(*(provider.connect() for _ in range(5)))

        assert source.calls == 1
        assert provider.connected is True

    @pytest.mark.asyncio
    async def test_failed_connect_can_be_retried(self):
        source = FakeRateSource({"EUR": "0.9"}, error=RateFetchError("Yahoo YQL request failed"))
        provider = _provider(source)

        with pytest.raises(RateFetchError):
            await provider.connect()
        assert provider.connected is False
        assert len(provider.rate_table) == 1  # base currency only

        source.error = None
        await provider.connect()
        assert provider.connected is True
        assert source.calls == 2

    @pytest.mark.asyncio
    async def test_concurrent_waiters_all_see_failure(self):
        source = FakeRateSource(delay=0.05, error=RateFetchError("down"))
        provider = _provider(source)

        results = await asyncio.gather(
            *(provider.connect() for _ in range(3)), return_exceptions=True
        )

        assert all(isinstance(r, RateFetchError) for r in results)
        assert source.calls == 1

    @pytest.mark.asyncio
    async def test_unavailable_rate_is_skipped(self):
        source = FakeRateSource({"EUR": "0.9"})
        provider = _provider(source)
        await provider.connect()

        assert provider.connected is True
        assert provider.rate_table.skipped == ("JPY",)
        with pytest.raises(AssetsNotTradedError, match="JPY"):
            await provider.get_quote(source_ledger=USD_LEDGER, destination_ledger=JPY_LEDGER,
                                     source_amount="1")


class TestRefresh:
    @pytest.mark.asyncio
    async def test_refresh_replaces_snapshot(self, source):
        provider = _provider(source)
        await provider.connect()
        before = provider.rate_table

        source.rates["EUR"] = Decimal("0.95")
        table = await provider.refresh()

        assert table is provider.rate_table
        assert table is not before
        assert before.rate_for("EUR") == Decimal("0.9")
        assert table.rate_for("EUR") == Decimal("0.95")
        assert source.calls == 2

    @pytest.mark.asyncio
    async def test_failed_refresh_keeps_previous_snapshot(self, source):
        provider = _provider(source)
        await provider.connect()
        before = provider.rate_table

        source.error = RateFetchError("down")
        with pytest.raises(RateFetchError):
            await provider.refresh()

        assert provider.rate_table is before
        assert provider.connected is True


class TestStatus:
    @pytest.mark.asyncio
    async def test_status_before_and_after_connect(self, source):
        provider = _provider(source)
        assert await provider.get_status() == {"backendStatus": "OK"}
        await provider.connect()
        assert await provider.get_status() == {"backendStatus": "OK"}

    @pytest.mark.asyncio
    async def test_status_when_fetch_failed(self):
        provider = _provider(FakeRateSource(error=RateFetchError("down")))
        with pytest.raises(RateFetchError):
            await provider.connect()
        assert await provider.get_status() == {"backendStatus": "OK"}


class TestGetQuote:
    @pytest.mark.asyncio
    async def test_source_amount_example(self):
        provider = _provider(FakeRateSource({"USD": "1", "EUR": "0.9"}))
        await provider.connect()

        quote = await provider.get_quote(
            source_ledger=USD_LEDGER,
            destination_ledger=EUR_LEDGER,
            source_amount=100000000,
        )

        assert quote == {
            "source_ledger": USD_LEDGER,
            "destination_ledger": EUR_LEDGER,
            "source_amount": "100000000",
            "destination_amount": "89100000",
        }

    @pytest.mark.asyncio
    async def test_destination_amount(self, source):
        provider = _provider(source)
        await provider.connect()

        quote = await provider.get_quote(
            source_ledger=USD_LEDGER,
            destination_ledger=EUR_LEDGER,
            destination_amount="89100000",
        )

        assert quote["source_amount"] == "100000000"
        assert quote["destination_amount"] == "89100000"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("src, dst", [
        (USD_LEDGER, EUR_LEDGER),
        (EUR_LEDGER, USD_LEDGER),
        (USD_LEDGER, JPY_LEDGER),
    ])
    async def test_matches_rate_formula(self, source, src, dst):
        provider = _provider(source, spread=0.003)
        await provider.connect()
        table = provider.rate_table
        pair = provider.pairs.resolve(src, dst)
        expected_rate = (table.rate_for(pair.destination_currency)
                         / table.rate_for(pair.source_currency)) * (Decimal(1) - Decimal("0.003"))

        quote = await provider.get_quote(source_ledger=src, destination_ledger=dst, source_amount="12345.67")

        assert abs(Decimal(quote["destination_amount"]) - Decimal("12345.67") * expected_rate) < Decimal("1e-12")

    @pytest.mark.asyncio
    async def test_inverse_consistent(self, source):
        provider = _provider(source, spread=0.003)
        await provider.connect()

        forward = await provider.get_quote(source_ledger=USD_LEDGER, destination_ledger=JPY_LEDGER,
                                           source_amount="987654.321")
        backward = await provider.get_quote(source_ledger=USD_LEDGER, destination_ledger=JPY_LEDGER,
                                            destination_amount=forward["destination_amount"])

        assert abs(Decimal(backward["source_amount"]) - Decimal("987654.321")) < Decimal("1e-15")

    @pytest.mark.asyncio
    async def test_zero_spread(self, source):
        provider = _provider(source, spread=0)
        await provider.connect()
        quote = await provider.get_quote(source_ledger=USD_LEDGER, destination_ledger=EUR_LEDGER,
                                         source_amount="100")
        assert quote["destination_amount"] == "90"

    @pytest.mark.asyncio
    async def test_currency_codes(self, source):
        provider = RateProvider(spread=0.01, currencies=["USD", "EUR"], source=source)
        await provider.connect()
        quote = await provider.get_quote(source_currency="usd", destination_currency="EUR",
                                         source_amount="100")
        assert quote["source_ledger"] == "USD"
        assert quote["destination_ledger"] == "EUR"
        assert quote["destination_amount"] == "89.1"

    @pytest.mark.asyncio
    async def test_no_amount_specified(self, source):
        provider = _provider(source)
        await provider.connect()
        with pytest.raises(NoAmountSpecifiedError):
            await provider.get_quote(source_ledger=USD_LEDGER, destination_ledger=EUR_LEDGER)

    @pytest.mark.asyncio
    async def test_both_amounts(self, source):
        provider = _provider(source)
        await provider.connect()
        with pytest.raises(AmbiguousAmountError):
            await provider.get_quote(source_ledger=USD_LEDGER, destination_ledger=EUR_LEDGER,
                                     source_amount="1", destination_amount="1")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", ["abc", "-5", "NaN", "Infinity", True])
    async def test_invalid_amount(self, source, amount):
        provider = _provider(source)
        await provider.connect()
        with pytest.raises(InvalidAmountError):
            await provider.get_quote(source_ledger=USD_LEDGER, destination_ledger=EUR_LEDGER,
                                     source_amount=amount)

    @pytest.mark.asyncio
    async def test_pair_not_configured(self, source):
        provider = _provider(source)
        await provider.connect()
        with pytest.raises(AssetsNotTradedError, match="does not trade"):
            await provider.get_quote(source_ledger=EUR_LEDGER, destination_ledger=JPY_LEDGER,
                                     source_amount="1")

    @pytest.mark.asyncio
    async def test_before_connect(self, source):
        provider = _provider(source)
        with pytest.raises(AssetsNotTradedError):
            await provider.get_quote(source_ledger=USD_LEDGER, destination_ledger=EUR_LEDGER,
                                     source_amount="1")
        assert source.calls == 0

    @pytest.mark.asyncio
    async def test_missing_ledger(self, source):
        provider = _provider(source)
        await provider.connect()
        with pytest.raises(MissingParameterError, match="destination_ledger"):
            await provider.get_quote(source_ledger=USD_LEDGER, source_amount="1")


class TestGetCurve:
    @pytest.mark.asyncio
    async def test_fixed_probe(self):
        provider = _provider(FakeRateSource({"USD": "1", "EUR": "0.9"}))
        await provider.connect()

        curve = await provider.get_curve(source_ledger=USD_LEDGER, destination_ledger=EUR_LEDGER,
                                         source_amount="5")

        assert curve == {"points": [[0, 0], [PROBE_SOURCE_AMOUNT, 89100000]]}

    @pytest.mark.asyncio
    async def test_requested_probe(self, source):
        provider = _provider(source, curve_probe="requested")
        await provider.connect()

        curve = await provider.get_curve(source_ledger=USD_LEDGER, destination_ledger=EUR_LEDGER,
                                         source_amount="1000")
        assert curve["points"] == [[0, 0], [1000, 891]]

        without_amount = await provider.get_curve(source_ledger=USD_LEDGER, destination_ledger=EUR_LEDGER)
        assert without_amount["points"][1][0] == PROBE_SOURCE_AMOUNT

    @pytest.mark.asyncio
    async def test_custom_probe_amount(self, source):
        provider = _provider(source, probe_source_amount=1000)
        await provider.connect()
        curve = await provider.get_curve(source_ledger=USD_LEDGER, destination_ledger=EUR_LEDGER)
        assert curve["points"] == [[0, 0], [1000, 891]]

    @pytest.mark.asyncio
    async def test_fractional_destination(self, source):
        provider = _provider(source, spread=0, probe_source_amount=1)
        await provider.connect()
        curve = await provider.get_curve(source_currency="USD", destination_currency="EUR")
        assert curve["points"] == [[0, 0], [1, 0.9]]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("src, dst", [
        (USD_LEDGER, EUR_LEDGER),
        (EUR_LEDGER, USD_LEDGER),
        (USD_LEDGER, JPY_LEDGER),
    ])
    async def test_first_point_is_origin(self, source, src, dst):
        provider = _provider(source)
        await provider.connect()
        curve = await provider.get_curve(source_ledger=src, destination_ledger=dst)
        assert curve["points"][0] == [0, 0]

    @pytest.mark.asyncio
    async def test_currency_codes(self, source):
        provider = RateProvider(spread=0.01, currencies=["USD", "EUR"], source=source)
        await provider.connect()
        curve = await provider.get_curve(source_currency="USD", destination_currency="EUR")
        assert curve["points"][1] == [PROBE_SOURCE_AMOUNT, 89100000]

    @pytest.mark.asyncio
    async def test_currency_without_rate(self, source):
        provider = RateProvider(currencies=["USD", "EUR"], source=source)
        await provider.connect()
        with pytest.raises(AssetsNotTradedError, match="GBP"):
            await provider.get_curve(source_currency="USD", destination_currency="GBP")

    @pytest.mark.asyncio
    async def test_missing_parameters(self, source):
        provider = _provider(source)
        await provider.connect()
        with pytest.raises(MissingParameterError):
            await provider.get_curve()
        with pytest.raises(MissingParameterError, match="destination_currency"):
            await provider.get_curve(source_currency="USD")

    @pytest.mark.asyncio
    async def test_unknown_ledgers(self, source):
        provider = _provider(source)
        await provider.connect()
        with pytest.raises(AssetsNotTradedError):
            await provider.get_curve(source_ledger="https://nope.example", destination_ledger=EUR_LEDGER)


class TestSubmitPayment:
    @pytest.mark.asyncio
    async def test_submit_payment_is_noop(self, source):
        provider = _provider(source)
        assert await provider.submit_payment({"id": "abc", "source_amount": "1"}) is None
        assert source.calls == 0
