# src/fxbackend/domain/models.py
"""
Domain Models - Pure Business Objects

Value objects exchanged between the rate sources, the rate backend and the
routing host:
- Rate table snapshots
- Ledger pairs
- Curves and quotes
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from types import MappingProxyType
from typing import Mapping, Optional


def format_amount(value: Decimal) -> str:
    """Render a Decimal as a plain (non-exponent) string without trailing zeros."""
    normalized = value.normalize()
    if normalized == 0:
        return "0"
    return format(normalized, "f")


def _number(value: Decimal):
    """Render a Decimal as int when integral, float otherwise (curve points are JSON numbers)."""
    normalized = value.normalize()
    if normalized == normalized.to_integral_value():
        return int(normalized)
    return float(normalized)


@dataclass(frozen=True)
class RateTable:
    """
    Immutable snapshot of exchange rates versus a base currency.

    Attributes:
        base: Base currency code (rates are units of currency per 1 base)
        rates: Mapping of currency code to rate
        fetched_at: When the snapshot was fetched (None for the empty table)
        skipped: Currencies the source reported without a usable rate
    """
    base: str
    rates: Mapping[str, Decimal] = field(default_factory=dict)
    fetched_at: Optional[datetime] = None
    skipped: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        rates = dict(self.rates)
        rates.setdefault(self.base, Decimal("1"))
        object.__setattr__(self, "rates", MappingProxyType(rates))

    @classmethod
    def empty(cls, base: str) -> RateTable:
        return cls(base=base)

    def rate_for(self, currency: str) -> Optional[Decimal]:
        return self.rates.get(currency)

    def __len__(self) -> int:
        return len(self.rates)


@dataclass(frozen=True)
class LedgerPair:
    """
    A configured association authorizing trades from one ledger to another.

    Attributes:
        source_asset: Raw configured source asset (e.g. "USD@https://usd-ledger.example")
        destination_asset: Raw configured destination asset
        source_ledger: Ledger URI part of the source asset
        destination_ledger: Ledger URI part of the destination asset
        source_currency: Three-letter currency code of the source asset
        destination_currency: Three-letter currency code of the destination asset
    """
    source_asset: str
    destination_asset: str
    source_ledger: str
    destination_ledger: str
    source_currency: str
    destination_currency: str


@dataclass(frozen=True)
class Curve:
    """Two-point linear amount curve through the origin."""
    source_amount: Decimal
    destination_amount: Decimal

    @property
    def points(self) -> list[list]:
        return [[0, 0], [_number(self.source_amount), _number(self.destination_amount)]]

    def to_json(self) -> dict:
        return {"points": self.points}


@dataclass(frozen=True)
class Quote:
    """Exact conversion between a source and a destination amount."""
    source_ledger: str
    destination_ledger: str
    source_amount: Decimal
    destination_amount: Decimal

    def to_json(self) -> dict:
        return {
            "source_ledger": self.source_ledger,
            "destination_ledger": self.destination_ledger,
            "source_amount": format_amount(self.source_amount),
            "destination_amount": format_amount(self.destination_amount),
        }


@dataclass(frozen=True)
class BackendStatus:
    backend_status: str = "OK"

    def to_json(self) -> dict:
        return {"backendStatus": self.backend_status}
