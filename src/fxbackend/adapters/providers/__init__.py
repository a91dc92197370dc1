# src/fxbackend/adapters/providers/__init__.py
"""
Rate Source Adapters - Finance API Clients

All sources implement the RateSource interface.
"""

from fxbackend.adapters.providers.base import RateSource
from fxbackend.adapters.providers.symbols import SymbolsRateSource
from fxbackend.adapters.providers.yql import YqlRateSource
from fxbackend.domain.errors import InvalidConfigurationError

SOURCES = {
    "yql": YqlRateSource,
    "symbols": SymbolsRateSource,
}


def build_rate_source(name: str) -> RateSource:
    """Create the rate source registered under name ("yql" or "symbols")."""
    try:
        return SOURCES[name]()
    except KeyError:
        raise InvalidConfigurationError(f"Unknown rate source: {name!r}") from None


__all__ = [
    "RateSource",
    "SymbolsRateSource",
    "YqlRateSource",
    "SOURCES",
    "build_rate_source",
]
