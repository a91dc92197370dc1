# src/fxbackend/domain/__init__.py
"""
Domain Layer - Pure Business Objects

This package contains domain models and the error taxonomy.
No dependencies on infrastructure or external systems.
"""

from fxbackend.domain.models import (
    BackendStatus,
    Curve,
    LedgerPair,
    Quote,
    RateTable,
    format_amount,
)
from fxbackend.domain.errors import (
    AmbiguousAmountError,
    AssetsNotTradedError,
    DomainError,
    InvalidAmountError,
    InvalidConfigurationError,
    MissingParameterError,
    NoAmountSpecifiedError,
    RateFetchError,
)

__all__ = [
    "BackendStatus",
    "Curve",
    "LedgerPair",
    "Quote",
    "RateTable",
    "format_amount",
    "DomainError",
    "AmbiguousAmountError",
    "AssetsNotTradedError",
    "InvalidAmountError",
    "InvalidConfigurationError",
    "MissingParameterError",
    "NoAmountSpecifiedError",
    "RateFetchError",
]
