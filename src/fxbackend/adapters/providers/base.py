# src/fxbackend/adapters/providers/base.py
"""
Base Rate Source Interface

This module defines the abstract base class for finance API rate sources.
A source fetches per-unit prices of a list of currencies versus its base
currency and maps every transport or schema failure to RateFetchError.

Files that USE this module:
- fxbackend.adapters.providers.yql (YqlRateSource implements RateSource)
- fxbackend.adapters.providers.symbols (SymbolsRateSource implements RateSource)
- fxbackend.application.rate_provider (RateProvider awaits RateSource.fetch_rates)
"""
import logging
from abc import ABC, abstractmethod
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional, Sequence

import requests

from fxbackend.domain.errors import RateFetchError

log = logging.getLogger(__name__)


class RateSource(ABC):
    name: str = "rate-source"
    base_currency: str = "USD"
    timeout: int = 10

    @abstractmethod
    def fetch_rates(self, currencies: Sequence[str]) -> Dict[str, Decimal]:
        """
        Return currency code -> units of that currency per 1 base currency.

        Currencies without a usable rate are left out of the result.
        """
        raise NotImplementedError

    def _get_json(self, url: str, params: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        """
        GET a JSON object, mapping every failure to RateFetchError.

        Raises:
            RateFetchError: On timeout, connection or HTTP error, invalid JSON
                or a non-object payload
        """
        try:
            log.info("Fetching rate table from %s", self.name)
            resp = requests.get(url, params=params, timeout=self.timeout)
            resp.raise_for_status()
        except requests.exceptions.Timeout as e:
            log.error("%s timeout after %d seconds", self.name, self.timeout)
            raise RateFetchError(f"{self.name} timeout after {self.timeout}s") from e
        except requests.exceptions.HTTPError as e:
            status_code = getattr(e.response, "status_code", None)
            payload = getattr(e.response, "text", None)
            log.error("%s HTTP error %s: %s", self.name, status_code, e)
            raise RateFetchError(
                f"{self.name} HTTP error: {e}", status_code=status_code, payload=payload
            ) from e
        except requests.exceptions.RequestException as e:
            log.error("%s request failed: %s", self.name, e)
            raise RateFetchError(f"{self.name} request failed: {e}") from e

        try:
            data = resp.json()
        except ValueError as e:
            log.error("%s returned invalid JSON: %s", self.name, e)
            raise RateFetchError(f"{self.name} returned invalid JSON", payload=resp.text) from e

        if not isinstance(data, dict):
            log.error("%s unexpected response type: %r", self.name, type(data))
            raise RateFetchError(f"{self.name} returned non-dict JSON", payload=data)
        return data

    @staticmethod
    def _parse_rate(raw: Any) -> Optional[Decimal]:
        """Parse a reported price; "N/A", empty, non-numeric or non-positive yields None."""
        if raw is None or isinstance(raw, bool):
            return None
        text = str(raw).strip()
        if not text or text.upper() == "N/A":
            return None
        try:
            value = Decimal(text)
        except InvalidOperation:
            return None
        if not value.is_finite() or value <= 0:
            return None
        return value
