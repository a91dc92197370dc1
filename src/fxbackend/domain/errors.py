# src/fxbackend/domain/errors.py
"""
Domain Errors - Business Logic Exceptions

This module defines domain-specific exceptions raised by the rate backend
and its rate sources. Every error surfaced to the routing host derives
from DomainError.
"""
from typing import Any, Optional


class DomainError(Exception):
    """Base exception for domain errors."""
    pass


class AssetsNotTradedError(DomainError):
    """Raised when a currency or ledger pair has no configured pair or no rate."""
    pass


class NoAmountSpecifiedError(DomainError):
    """Raised when a quote request carries neither a source nor a destination amount."""
    pass


class AmbiguousAmountError(DomainError):
    """Raised when a quote request carries both a source and a destination amount."""
    pass


class InvalidAmountError(DomainError):
    """Raised when an amount is not a non-negative number."""
    pass


class MissingParameterError(DomainError):
    """Raised when a source or destination identifier is missing."""
    pass


class InvalidConfigurationError(DomainError):
    """Raised when the backend is constructed with an unsupported configuration."""
    pass


class RateFetchError(DomainError):
    """
    Raised when the rate table cannot be fetched or parsed.

    Attributes:
        status_code: HTTP status code when the failure came from the server
        payload: Raw response body (decoded JSON or text) when available
    """

    def __init__(self, message: str, *, status_code: Optional[int] = None, payload: Any = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload
