# src/fxbackend/shared/__init__.py
"""
Shared Utilities - Cross-cutting Concerns

This package contains shared utilities used across all layers:
- Validation
- Logging configuration
"""

from fxbackend.shared.validators import (
    parse_amount,
    validate_currency_code,
    validate_ledger_asset,
    validate_spread,
)
from fxbackend.shared.logging_conf import setup_logging

__all__ = [
    "parse_amount",
    "validate_currency_code",
    "validate_ledger_asset",
    "validate_spread",
    "setup_logging",
]
