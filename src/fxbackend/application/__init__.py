# src/fxbackend/application/__init__.py
"""
Application Layer - Use Cases and Services

This package contains the rate backend and ledger-pair resolution.
"""

from fxbackend.application.ledger_pairs import LedgerPairIndex
from fxbackend.application.rate_provider import PROBE_SOURCE_AMOUNT, RateProvider

__all__ = [
    "LedgerPairIndex",
    "PROBE_SOURCE_AMOUNT",
    "RateProvider",
]
