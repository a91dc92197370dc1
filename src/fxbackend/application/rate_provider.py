# src/fxbackend/application/rate_provider.py
"""
Rate Provider - Spread-Adjusted Curves and Quotes for a Routing Host

This module contains the backend a payment-routing connector talks to. It
fetches a rate table from a finance API rate source, keeps it as an
immutable in-memory snapshot and converts amounts between the currencies
of configured ledger pairs, marking every rate down by the spread.

Files that USE this module:
- fxbackend.app (composition root builds a RateProvider from settings)
- tests.test_rate_provider (unit tests)

Files that this module USES:
- fxbackend.adapters.providers (RateSource implementations)
- fxbackend.application.ledger_pairs (ledger -> currency resolution)
- fxbackend.domain (models and errors)
- fxbackend.config (defaults for spread, pairs and curve probe)
"""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional, Tuple

from fxbackend.adapters.providers import RateSource, build_rate_source
from fxbackend.application.ledger_pairs import LedgerPairIndex, currencies_from
from fxbackend.config import settings
from fxbackend.domain.errors import (
    AmbiguousAmountError,
    AssetsNotTradedError,
    InvalidAmountError,
    InvalidConfigurationError,
    MissingParameterError,
    NoAmountSpecifiedError,
)
from fxbackend.domain.models import BackendStatus, Curve, Quote, RateTable
from fxbackend.shared.validators import parse_amount, validate_spread

log = logging.getLogger(__name__)

# Fixed (large) source amount used for the non-origin point of a curve
PROBE_SOURCE_AMOUNT = 100000000

CURVE_PROBE_FIXED = "fixed"
CURVE_PROBE_REQUESTED = "requested"


class RateProvider:
    """
    Connector backend that quotes from a finance API rate table.

    The rate table is fetched once by connect() and replaced only by an
    explicit refresh(). Concurrent connect()/refresh() calls share a single
    in-flight fetch.
    """

    def __init__(
        self,
        spread: Optional[float] = None,
        currency_with_ledger_pairs: Any = None,
        currencies: Optional[list[str]] = None,
        source: Optional[RateSource] = None,
        curve_probe: Optional[str] = None,
        probe_source_amount: Optional[int] = None,
    ):
        """
        Initialize the backend.

        Args:
            spread: Fraction the raw rate is marked down by (defaults to settings.spread)
            currency_with_ledger_pairs: Ordered [source asset, destination asset] pairs,
                or an object exposing them via to_list() (defaults to settings.ledger_pairs)
            currencies: Extra currency codes to fetch, for currency-code requests
                (defaults to settings.currencies)
            source: Rate source (defaults to the one named by settings.rate_source)
            curve_probe: "fixed" or "requested" (defaults to settings.curve_probe)
            probe_source_amount: Probe amount for curves (defaults to settings.probe_source_amount)

        Raises:
            InvalidConfigurationError: On an unsupported pair shape, bad currency
                code, spread outside [0, 1) or nothing to quote
        """
        spread = settings.spread if spread is None else spread
        if not validate_spread(spread):
            raise InvalidConfigurationError(f"Spread must be in [0, 1): {spread!r}")
        self.spread = Decimal(str(spread))

        if currency_with_ledger_pairs is None and currencies is None:
            currency_with_ledger_pairs = settings.ledger_pairs
            currencies = settings.currencies
        self.pairs = LedgerPairIndex([] if currency_with_ledger_pairs is None else currency_with_ledger_pairs)
        self.currencies = currencies_from(list(currencies or []) + self.pairs.currencies)
        if not self.currencies:
            raise InvalidConfigurationError("No ledger pairs or currencies configured")

        self.curve_probe = curve_probe or settings.curve_probe
        if self.curve_probe not in (CURVE_PROBE_FIXED, CURVE_PROBE_REQUESTED):
            raise InvalidConfigurationError(f"Unknown curve probe mode: {self.curve_probe!r}")
        self.probe_source_amount = Decimal(
            probe_source_amount or settings.probe_source_amount or PROBE_SOURCE_AMOUNT
        )

        self.source = source or build_rate_source(settings.rate_source)
        self._table = RateTable.empty(self.source.base_currency)
        self._connected = False
        self._lock = asyncio.Lock()
        self._inflight: Optional[asyncio.Future] = None

        log.info(
            "RateProvider configured: source=%s, pairs=%d, currencies=%s, spread=%s, curve_probe=%s",
            self.source.name, len(self.pairs), ",".join(self.currencies), self.spread, self.curve_probe,
        )

    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def rate_table(self) -> RateTable:
        """Current rate table snapshot (empty until connected)."""
        return self._table

    async def connect(self) -> None:
        """
        Fetch the rate table unless already connected.

        Raises:
            RateFetchError: If the fetch fails; the backend stays unconnected
                and a later call retries
        """
        if self._connected:
            return
        await self._fetch_shared()

    async def refresh(self) -> RateTable:
        """
        Fetch a new rate table and swap it in.

        On failure the previous table stays in place and the error propagates.
        """
        return await self._fetch_shared()

    async def _fetch_shared(self) -> RateTable:
        async with self._lock:
            task = self._inflight
            if task is None or task.done():
                task = asyncio.ensure_future(self._fetch())
                self._inflight = task
                task.add_done_callback(self._clear_inflight)
            else:
                log.debug("Joining in-flight rate fetch")
        return await asyncio.shield(task)

    def _clear_inflight(self, task: asyncio.Future) -> None:
        if self._inflight is task:
            self._inflight = None

    async def _fetch(self) -> RateTable:
        loop = asyncio.get_running_loop()
        rates = await loop.run_in_executor(None, self.source.fetch_rates, list(self.currencies))

        base = self.source.base_currency
        skipped = tuple(c for c in self.currencies if c not in rates and c != base)
        table = RateTable(
            base=base,
            rates=rates,
            fetched_at=datetime.now(timezone.utc),
            skipped=skipped,
        )
        self._table = table
        self._connected = True
        if skipped:
            log.warning("Rate table has no rate for: %s", ", ".join(skipped))
        log.info("Rate table loaded from %s: %d rates", self.source.name, len(table))
        return table

    async def get_status(self) -> dict:
        return BackendStatus().to_json()

    def _resolve_currencies(
        self,
        source_ledger: Optional[str],
        destination_ledger: Optional[str],
        source_currency: Optional[str],
        destination_currency: Optional[str],
    ) -> Tuple[str, str]:
        if source_currency or destination_currency:
            if not source_currency:
                raise MissingParameterError("Missing parameter: source_currency")
            if not destination_currency:
                raise MissingParameterError("Missing parameter: destination_currency")
            return source_currency.upper(), destination_currency.upper()

        if not source_ledger:
            raise MissingParameterError("Missing parameter: source_ledger or source_currency")
        if not destination_ledger:
            raise MissingParameterError("Missing parameter: destination_ledger or destination_currency")

        pair = self.pairs.resolve(source_ledger, destination_ledger)
        if pair is None:
            raise AssetsNotTradedError("Connector does not trade those assets")
        return pair.source_currency, pair.destination_currency

    def _adjusted_rate(self, source_currency: str, destination_currency: str) -> Decimal:
        """Destination units per source unit, marked down by the spread."""
        table = self._table
        source_rate = table.rate_for(source_currency)
        destination_rate = table.rate_for(destination_currency)
        if source_rate is None or destination_rate is None:
            missing = source_currency if source_rate is None else destination_currency
            raise AssetsNotTradedError(f"No rate for currency: {missing}")
        rate = destination_rate / source_rate
        return rate * (Decimal("1") - self.spread)

    @staticmethod
    def _amount(name: str, value: Any) -> Decimal:
        amount = parse_amount(value)
        if amount is None:
            raise InvalidAmountError(f"Invalid {name}: {value!r}")
        return amount

    async def get_curve(
        self,
        source_ledger: Optional[str] = None,
        destination_ledger: Optional[str] = None,
        source_amount: Any = None,
        source_currency: Optional[str] = None,
        destination_currency: Optional[str] = None,
        **_ignored: Any,
    ) -> dict:
        """
        Get a two-point linear curve for a currency or ledger pair.

        Returns:
            {"points": [[0, 0], [source_amount, destination_amount]]}

        Raises:
            MissingParameterError: If the source or destination identifier is missing
            AssetsNotTradedError: If the pair is not configured or a rate is missing
        """
        src, dst = self._resolve_currencies(
            source_ledger, destination_ledger, source_currency, destination_currency
        )
        rate = self._adjusted_rate(src, dst)

        probe = self.probe_source_amount
        if self.curve_probe == CURVE_PROBE_REQUESTED and source_amount is not None:
            probe = self._amount("source_amount", source_amount)

        curve = Curve(source_amount=probe, destination_amount=probe * rate)
        log.debug("Curve %s->%s rate=%s points=%s", src, dst, rate, curve.points)
        return curve.to_json()

    async def get_quote(
        self,
        source_ledger: Optional[str] = None,
        destination_ledger: Optional[str] = None,
        source_amount: Any = None,
        destination_amount: Any = None,
        source_currency: Optional[str] = None,
        destination_currency: Optional[str] = None,
        **_ignored: Any,
    ) -> dict:
        """
        Convert a fixed source amount, or a fixed destination amount, across a pair.

        Returns:
            {"source_ledger", "destination_ledger", "source_amount", "destination_amount"}
            with amounts as plain decimal strings

        Raises:
            NoAmountSpecifiedError: If neither amount is given
            AmbiguousAmountError: If both amounts are given
            InvalidAmountError: If the given amount is not a non-negative number
            MissingParameterError: If the source or destination identifier is missing
            AssetsNotTradedError: If the pair is not configured or a rate is missing
        """
        if source_amount is None and destination_amount is None:
            raise NoAmountSpecifiedError("Must provide either source_amount or destination_amount")
        if source_amount is not None and destination_amount is not None:
            raise AmbiguousAmountError("Provide only one of source_amount or destination_amount")

        src, dst = self._resolve_currencies(
            source_ledger, destination_ledger, source_currency, destination_currency
        )
        rate = self._adjusted_rate(src, dst)

        if source_amount is not None:
            src_amount = self._amount("source_amount", source_amount)
            dst_amount = src_amount * rate
        else:
            dst_amount = self._amount("destination_amount", destination_amount)
            src_amount = dst_amount / rate

        quote = Quote(
            source_ledger=source_ledger or src,
            destination_ledger=destination_ledger or dst,
            source_amount=src_amount,
            destination_amount=dst_amount,
        )
        log.debug("Quote %s->%s rate=%s %s", src, dst, rate, quote.to_json())
        return quote.to_json()

    async def submit_payment(self, payment: Any = None) -> None:
        """Quoting only: payments are settled elsewhere, so this accepts and ignores them."""
        log.debug("submit_payment ignored: %r", payment)
