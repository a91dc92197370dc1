# src/fxbackend/adapters/providers/symbols.py
"""
Yahoo Finance Symbols-Quote Rate Source

Fetches the "allcurrencies" quote list and keeps the requested currencies.
Each resource looks like:

    {"resource": {"classname": "Quote",
                  "fields": {"name": "USD/EUR", "symbol": "EUR=X", "price": "0.9000"}}}

The symbol's first three characters are the currency code and the price
is units of that currency per 1 USD.

Files that USE this module:
- fxbackend.app (source when FX_RATE_SOURCE=symbols)
- tests.test_providers (unit tests)
"""
import logging
from decimal import Decimal
from typing import Dict, Optional, Sequence

from fxbackend.adapters.providers.base import RateSource
from fxbackend.config import settings
from fxbackend.domain.errors import RateFetchError

log = logging.getLogger(__name__)


class SymbolsRateSource(RateSource):
    name = "Yahoo symbols"

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[int] = None):
        self.url = base_url or settings.symbols_url
        self.base_currency = "USD"
        self.timeout = timeout or settings.http_timeout_seconds

    def fetch_rates(self, currencies: Sequence[str]) -> Dict[str, Decimal]:
        data = self._get_json(self.url, params={"format": "json"})

        try:
            resources = data["list"]["resources"]
        except (KeyError, TypeError) as e:
            log.error("Yahoo symbols unexpected schema: %s", data)
            raise RateFetchError("Yahoo symbols response missing 'list.resources'", payload=data) from e
        if not isinstance(resources, list):
            raise RateFetchError("Yahoo symbols 'resources' field is not a list", payload=data)

        wanted = {code.upper() for code in currencies}
        rates: Dict[str, Decimal] = {}
        for entry in resources:
            resource = entry.get("resource") if isinstance(entry, dict) else None
            if not isinstance(resource, dict) or resource.get("classname") != "Quote":
                continue
            fields = resource.get("fields") or {}
            symbol = fields.get("symbol")
            if not isinstance(symbol, str) or len(symbol) < 3:
                continue
            currency = symbol[:3].upper()
            if currency not in wanted:
                continue
            rate = self._parse_rate(fields.get("price"))
            if rate is None:
                log.warning("Yahoo symbols has no price for currency %s (reported %r), skipping",
                            currency, fields.get("price"))
                continue
            rates[currency] = rate

        missing = sorted(wanted - set(rates) - {self.base_currency})
        if missing:
            log.warning("Yahoo symbols has no quote for: %s", ", ".join(missing))
        log.info("Yahoo symbols returned %d rates for %d requested currencies", len(rates), len(wanted))
        return rates
