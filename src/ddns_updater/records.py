"""
Record set assembly.

Builds one address record per family from the discovered public addresses.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ddns_updater.models import RECORD_TTL, AddressRecord, RecordType

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable
    from ipaddress import IPv4Address, IPv6Address


# Order in which records are discovered and submitted
RECORD_TYPES: tuple[RecordType, ...] = (RecordType.A, RecordType.AAAA)


logger = logging.getLogger(__name__)


async def build_record_set(
    subdomain: str,
    discover: Callable[[RecordType], Awaitable[IPv4Address | IPv6Address]],
) -> list[AddressRecord]:
    """
    Discover both public addresses and build the record set.

    Discovery runs sequentially (A first). The first failure propagates
    unchanged, so a record set is either complete or not built at all.

    Parameters
    ----------
    subdomain : str
        The host record name shared by both records.
    discover : Callable[[RecordType], Awaitable[IPv4Address | IPv6Address]]
        Address discovery coroutine, usually `AddressProbe.discover`.

    Returns
    -------
    list[AddressRecord]
        Exactly two records, A then AAAA.
    """
    records: list[AddressRecord] = []
    for record_type in RECORD_TYPES:
        address = await discover(record_type)
        record = AddressRecord(
            record_type=record_type,
            name=subdomain,
            value=str(address),
            ttl=RECORD_TTL,
        )
        records.append(record)
        logger.info('Will set %s record to "%s".', record_type, record.value)
    return records
