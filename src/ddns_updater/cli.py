"""
CLI entry point for DDNS Updater.

This module provides the command-line interface for a single update run.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import TYPE_CHECKING

from ddns_updater.config import ConfigValidationError, load_config, parse_args
from ddns_updater.discovery import AddressProbe
from ddns_updater.errors import DDNSError, DeadlineExceededError
from ddns_updater.logging_config import setup_logging
from ddns_updater.providers.cloudflare import CloudFlareProvider
from ddns_updater.updater import update_dns

if TYPE_CHECKING:
    from ddns_updater.config import Config
    from ddns_updater.models import AddressRecord


logger = logging.getLogger(__name__)


async def run(config: Config) -> list[AddressRecord]:
    """
    Run one update within the configured deadline.

    Parameters
    ----------
    config : Config
        Loaded configuration (domain and API token must be set).

    Returns
    -------
    list[AddressRecord]
        The records as stored by the provider.

    Raises
    ------
    DDNSError
        If any pipeline stage fails or the deadline expires.
    """
    probe = AddressProbe(
        trace_url=config.probe.trace_url,
        timeout=config.probe.timeout,
    )
    provider = CloudFlareProvider(
        config.cloudflare.api_token or "",
        api_base=config.cloudflare.api_base,
        timeout=config.cloudflare.timeout,
    )
    try:
        async with asyncio.timeout(config.update.deadline):
            return await update_dns(config.update.domain or "", probe, provider)
    except TimeoutError as e:
        msg = f"Update did not finish within {config.update.deadline:g}s."
        raise DeadlineExceededError(msg) from e


def main() -> None:
    """
    Update the A/AAAA records of a domain once.

    Parse command-line arguments, load configuration, and run the update.
    Exit with status 1 on any failure.
    """
    args = parse_args()
    try:
        config = load_config(args)
    except ConfigValidationError as e:
        print(e, file=sys.stderr)  # noqa: T201
        sys.exit(1)

    setup_logging(config.logging)

    try:
        asyncio.run(run(config))
    except DDNSError as e:
        logger.critical("Update failed: %s", e)
        sys.exit(1)


if __name__ == "__main__":
    main()
