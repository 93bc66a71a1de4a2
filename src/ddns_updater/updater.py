"""
The update pipeline.

Split the domain, discover both public addresses, then submit the record
set to the provider. Each stage raises on failure; nothing is submitted
unless both addresses were discovered.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from ddns_updater.domain import split_domain
from ddns_updater.errors import ProviderError
from ddns_updater.records import build_record_set

if TYPE_CHECKING:
    from ddns_updater.discovery import AddressProbe
    from ddns_updater.models import AddressRecord
    from ddns_updater.providers.base import BaseDNSProvider


logger = logging.getLogger(__name__)


async def update_dns(
    domain: str,
    probe: AddressProbe,
    provider: BaseDNSProvider,
) -> list[AddressRecord]:
    """
    Point the A and AAAA records of a domain at the caller's public addresses.

    Parameters
    ----------
    domain : str
        Fully qualified domain name (at least three labels).
    probe : AddressProbe
        Public address discovery.
    provider : BaseDNSProvider
        DNS provider client.

    Returns
    -------
    list[AddressRecord]
        The records as stored by the provider.

    Raises
    ------
    DomainError
        If the domain has fewer than three labels.
    DiscoveryError
        If either address cannot be discovered.
    ProviderError
        If the provider fails the update.
    """
    start_time = time.monotonic()

    zone, subdomain = split_domain(domain)
    logger.info('Parsed domain: zone="%s" subdomain="%s".', zone, subdomain)

    records = await build_record_set(subdomain, probe.discover)

    result = await provider.set_records(zone, records)
    duration = time.monotonic() - start_time

    if not result.success:
        logger.warning(
            "[%s] status=error message=%s duration=%.2fs",
            provider.name,
            result.message,
            duration,
        )
        raise ProviderError(result.message)

    logger.info(
        "[%s] status=success records=%s duration=%.2fs",
        provider.name,
        ", ".join(f"{r.record_type} {r.name}={r.value}" for r in result.records),
        duration,
    )
    return result.records
