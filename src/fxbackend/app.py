# src/fxbackend/app.py
"""
Application Entry Point - Backend Wiring and Rate Probe

This module is the composition root: it configures logging from settings,
builds a RateProvider with the configured rate source and pairs, connects
it and logs the adjusted rate of every configured pair. Hosts embedding the
backend call build_provider() and drive the coroutines themselves.

Files that USE this module:
- fxbackend console script (python -m fxbackend / fxbackend)

Files that this module USES:
- fxbackend.shared.logging_conf (setup_logging)
- fxbackend.config (settings)
- fxbackend.application.rate_provider (RateProvider)
"""

from __future__ import annotations

import asyncio
import logging
import sys

from fxbackend.application.rate_provider import RateProvider
from fxbackend.config import settings
from fxbackend.domain.errors import DomainError
from fxbackend.shared.logging_conf import setup_logging

log = logging.getLogger(__name__)


def build_provider() -> RateProvider:
    """Create a RateProvider from settings."""
    return RateProvider(
        spread=settings.spread,
        currency_with_ledger_pairs=settings.ledger_pairs,
        currencies=settings.currencies,
        curve_probe=settings.curve_probe,
        probe_source_amount=settings.probe_source_amount,
    )


async def probe(provider: RateProvider) -> int:
    """
    Connect and log one curve per configured pair.

    Returns:
        Number of pairs that could be quoted
    """
    await provider.connect()
    status = await provider.get_status()
    log.info("Backend status: %s", status)

    quoted = 0
    for pair in provider.pairs:
        try:
            curve = await provider.get_curve(
                source_ledger=pair.source_ledger,
                destination_ledger=pair.destination_ledger,
            )
        except DomainError as e:
            log.warning("%s -> %s not quotable: %s", pair.source_asset, pair.destination_asset, e)
            continue
        log.info("%s -> %s curve: %s", pair.source_currency, pair.destination_currency, curve["points"])
        quoted += 1
    return quoted


def main() -> None:
    """Set up logging, build the backend and run the rate probe."""
    setup_logging(
        level=settings.log_level,
        log_file=settings.log_file,
        log_dir=settings.log_dir,
        stdout=settings.log_stdout,
        max_bytes=settings.log_max_bytes,
        backup_count=settings.log_backup_count,
    )
    try:
        provider = build_provider()
        asyncio.run(probe(provider))
    except DomainError as e:
        log.error("Rate probe failed: %s", e)
        sys.exit(1)


if __name__ == "__main__":
    main()
