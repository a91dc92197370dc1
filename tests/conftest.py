"""
Shared fixtures - fake rate sources and ledger pair configurations.
"""
import threading
import time
from decimal import Decimal

import pytest

from fxbackend.adapters.providers.base import RateSource

USD_LEDGER = "https://usd-ledger.example"
EUR_LEDGER = "https://eur-ledger.example"
JPY_LEDGER = "https://jpy-ledger.example"

PAIRS = [
    [f"USD@{USD_LEDGER}", f"EUR@{EUR_LEDGER}"],
    [f"EUR@{EUR_LEDGER}", f"USD@{USD_LEDGER}"],
    [f"USD@{USD_LEDGER}", f"JPY@{JPY_LEDGER}"],
]


class FakeRateSource(RateSource):
    """In-memory source counting fetches; optionally slow or failing."""

    name = "fake"

    def __init__(self, rates=None, delay: float = 0.0, error: Exception = None):
        self.rates = {k: Decimal(str(v)) for k, v in (rates or {}).items()}
        self.delay = delay
        self.error = error
        self.calls = 0
        self.requested = []
        self._lock = threading.Lock()

    def fetch_rates(self, currencies):
        with self._lock:
            self.calls += 1
            self.requested.append(list(currencies))
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return {c: r for c, r in self.rates.items() if c in currencies}


@pytest.fixture
def source():
    return FakeRateSource({"EUR": "0.9", "JPY": "110.37"})


@pytest.fixture
def pairs():
    return [list(p) for p in PAIRS]
