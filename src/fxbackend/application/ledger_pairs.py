# src/fxbackend/application/ledger_pairs.py
"""
Ledger Pairs - Configured Trading Pairs and Ledger Resolution

Parses the configured ledger-pair list once and answers which currencies a
(source ledger, destination ledger) request trades between.

Asset strings carry the currency code in their first three characters and
the ledger identifier from index 4 on, e.g. "EUR@https://eur-ledger.example".
A request ledger matches a configured asset when the asset's ledger part
starts with it, so "https://eur-ledger.example" matches
"EUR@https://eur-ledger.example/accounts".

Files that USE this module:
- fxbackend.application.rate_provider (RateProvider resolves ledgers here)
- tests.test_ledger_pairs (unit tests)
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from fxbackend.domain.errors import InvalidConfigurationError
from fxbackend.domain.models import LedgerPair
from fxbackend.shared.validators import validate_currency_code, validate_ledger_asset

log = logging.getLogger(__name__)

_LEDGER_OFFSET = 4


def _pair_list(config: Any) -> List[Sequence[str]]:
    """
    Accept a list/tuple of pairs, or an object exposing an ordered list through
    to_list() (or the camelCase toArray() of host-side collections).
    """
    if isinstance(config, (list, tuple)):
        return list(config)
    for attr in ("to_list", "toArray"):
        method = getattr(config, attr, None)
        if callable(method):
            return list(method())
    raise InvalidConfigurationError(
        f"Unexpected type for currency_with_ledger_pairs: {type(config).__name__}"
    )


def parse_asset(asset: str) -> Tuple[str, str]:
    """
    Split a ledger asset string into (currency code, ledger).

    Raises:
        InvalidConfigurationError: If the string is not "CCC@<ledger>"
    """
    if not validate_ledger_asset(asset):
        raise InvalidConfigurationError(f"Invalid ledger asset: {asset!r}")
    return asset[:3].upper(), asset[_LEDGER_OFFSET:]


class LedgerPairIndex:
    """Ordered ledger pairs plus a lookup map built at configuration time."""

    def __init__(self, config: Any):
        pairs: List[LedgerPair] = []
        for raw in _pair_list(config):
            if isinstance(raw, str) or len(raw) != 2:
                raise InvalidConfigurationError(f"Ledger pair must have two assets: {raw!r}")
            src_asset, dst_asset = raw[0], raw[1]
            src_currency, src_ledger = parse_asset(src_asset)
            dst_currency, dst_ledger = parse_asset(dst_asset)
            pairs.append(LedgerPair(
                source_asset=src_asset,
                destination_asset=dst_asset,
                source_ledger=src_ledger,
                destination_ledger=dst_ledger,
                source_currency=src_currency,
                destination_currency=dst_currency,
            ))
        self.pairs: Tuple[LedgerPair, ...] = tuple(pairs)

        # each configured ledger key maps to the first pair in configuration
        # order that matches it, exact or by prefix
        self._by_ledgers: Dict[Tuple[str, str], LedgerPair] = {}
        for pair in self.pairs:
            key = (pair.source_ledger, pair.destination_ledger)
            if key not in self._by_ledgers:
                self._by_ledgers[key] = self._first_match(*key)
        log.debug("Indexed %d ledger pairs", len(self.pairs))

    def __len__(self) -> int:
        return len(self.pairs)

    def __iter__(self):
        return iter(self.pairs)

    @property
    def currencies(self) -> List[str]:
        """Currencies referenced by the pairs, in configuration order, without duplicates."""
        seen: Dict[str, None] = {}
        for pair in self.pairs:
            seen.setdefault(pair.source_currency)
            seen.setdefault(pair.destination_currency)
        return list(seen)

    def _first_match(self, source_ledger: str, destination_ledger: str) -> Optional[LedgerPair]:
        for candidate in self.pairs:
            if (candidate.source_ledger.startswith(source_ledger)
                    and candidate.destination_ledger.startswith(destination_ledger)):
                return candidate
        return None

    def resolve(self, source_ledger: str, destination_ledger: str) -> Optional[LedgerPair]:
        """
        Find the configured pair for a ledger request.

        The first pair in configuration order whose ledgers start with the
        requested ones wins. Configured ledger keys are answered from the map
        built at construction; other requests are scanned once and remembered.
        """
        if not source_ledger or not destination_ledger:
            return None
        key = (source_ledger, destination_ledger)
        pair = self._by_ledgers.get(key)
        if pair is not None:
            return pair
        pair = self._first_match(source_ledger, destination_ledger)
        if pair is not None:
            self._by_ledgers[key] = pair
        return pair


def currencies_from(codes: Iterable[str]) -> List[str]:
    """Normalize a configured currency list to unique upper-case codes."""
    out: List[str] = []
    for code in codes:
        upper = str(code).upper()
        if not validate_currency_code(upper):
            raise InvalidConfigurationError(f"Invalid currency code: {code!r}")
        if upper not in out:
            out.append(upper)
    return out
