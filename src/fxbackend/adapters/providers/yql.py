# src/fxbackend/adapters/providers/yql.py
"""
Yahoo Finance YQL Rate Source

Fetches exchange rates through the structured currency-exchange query
endpoint (yahoo.finance.xchange table). One request covers every
configured currency:

    select * from yahoo.finance.xchange where pair in ("USDEUR", "USDJPY")

Response shape:
    {"query": {"results": {"rate": [{"id": "USDEUR", "Rate": "0.9000"}, ...]}}}

Files that USE this module:
- fxbackend.app (default source when FX_RATE_SOURCE=yql)
- tests.test_providers (unit tests)

Files that this module USES:
- fxbackend.adapters.providers.base (RateSource interface)
- fxbackend.config (settings for endpoint and timeout)
"""
import logging
from decimal import Decimal
from typing import Dict, Optional, Sequence

from fxbackend.adapters.providers.base import RateSource
from fxbackend.config import settings
from fxbackend.domain.errors import RateFetchError

log = logging.getLogger(__name__)


class YqlRateSource(RateSource):
    name = "Yahoo YQL"

    def __init__(
        self,
        base_url: Optional[str] = None,
        env: Optional[str] = None,
        base_currency: Optional[str] = None,
        timeout: Optional[int] = None,
    ):
        """
        Initialize the YQL rate source.

        Args:
            base_url: Optional custom endpoint (defaults to settings.yql_url)
            env: Optional data-source environment (defaults to settings.yql_env)
            base_currency: Optional base currency (defaults to settings.base_currency)
            timeout: Optional HTTP timeout in seconds (defaults to settings.http_timeout_seconds)
        """
        self.url = base_url or settings.yql_url
        self.env = env or settings.yql_env
        self.base_currency = (base_currency or settings.base_currency).upper()
        self.timeout = timeout or settings.http_timeout_seconds

    def build_query(self, currencies: Sequence[str]) -> str:
        base = self.base_currency
        pairs = '", "'.join(base + code for code in currencies)
        return f'select * from yahoo.finance.xchange where pair in ("{pairs}")'

    def fetch_rates(self, currencies: Sequence[str]) -> Dict[str, Decimal]:
        params = {
            "q": self.build_query(currencies),
            "env": self.env,
            "format": "json",
        }
        data = self._get_json(self.url, params=params)

        try:
            quotes = data["query"]["results"]["rate"]
        except (KeyError, TypeError) as e:
            log.error("Yahoo YQL unexpected schema: %s", data)
            raise RateFetchError("Yahoo YQL response missing 'query.results.rate'", payload=data) from e

        # a single pair comes back as an object instead of a list
        if isinstance(quotes, dict):
            quotes = [quotes]
        if not isinstance(quotes, list):
            raise RateFetchError("Yahoo YQL 'rate' field is not a list", payload=data)

        rates: Dict[str, Decimal] = {}
        for quote in quotes:
            if not isinstance(quote, dict) or not isinstance(quote.get("id"), str):
                log.warning("Yahoo YQL skipping malformed record: %r", quote)
                continue
            currency = quote["id"][len(self.base_currency):len(self.base_currency) + 3].upper()
            rate = self._parse_rate(quote.get("Rate"))
            if rate is None:
                log.warning("Yahoo YQL has no rate for currency %s (reported %r), skipping",
                            currency, quote.get("Rate"))
                continue
            rates[currency] = rate

        log.info("Yahoo YQL returned %d rates for %d requested currencies", len(rates), len(currencies))
        return rates
