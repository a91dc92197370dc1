# src/fxbackend/__init__.py
"""
fxbackend - Finance API Rate Backend for Payment Routing

Fetches currency exchange rates from a finance API once, keeps them in
memory and answers spread-adjusted curve and quote requests for a
payment-routing connector.
"""

__version__ = "0.3.0"

from fxbackend.application.rate_provider import RateProvider  # noqa: E402

__all__ = ["RateProvider", "__version__"]
