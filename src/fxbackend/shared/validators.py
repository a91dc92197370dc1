# src/fxbackend/shared/validators.py
"""
Input Validation Utilities - Configuration and Request Validation

This module provides validation functions for currency codes, ledger asset
strings, spreads and amounts. They are used by the settings validators and
by the rate backend when it parses configuration and requests.

Files that USE this module:
- fxbackend.config.settings (field validators)
- fxbackend.application.ledger_pairs (asset string parsing)
- fxbackend.application.rate_provider (amount parsing)
"""
import re
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

_CURRENCY_RE = re.compile(r"^[A-Z]{3}$")


def validate_currency_code(code: str) -> bool:
    """
    Validate a three-letter ISO 4217 style currency code.

    Args:
        code: Currency code to validate (must already be upper-case)

    Returns:
        True if valid, False otherwise
    """
    if not code:
        return False
    return bool(_CURRENCY_RE.match(code))


def validate_ledger_asset(asset: str) -> bool:
    """
    Validate a ledger asset string of the form "CCC@<ledger>".

    The first three characters carry the currency code and the ledger
    identifier starts at index 4.
    """
    if not isinstance(asset, str) or len(asset) < 5:
        return False
    return validate_currency_code(asset[:3].upper()) and asset[3] == "@"


def validate_spread(spread: float) -> bool:
    """Spread is a fraction in [0, 1)."""
    try:
        value = Decimal(str(spread))
    except InvalidOperation:
        return False
    return Decimal("0") <= value < Decimal("1")


def parse_amount(value: Any) -> Optional[Decimal]:
    """
    Parse an amount into a non-negative Decimal.

    Args:
        value: int, str, float or Decimal amount

    Returns:
        Decimal amount, or None if the value is not a finite non-negative number
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except InvalidOperation:
        return None
    if not amount.is_finite() or amount < 0:
        return None
    return amount
