"""
Base class for DNS providers.

This module defines the abstract base class that the DNS provider
implementation must inherit from.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ddns_updater.models import AddressRecord


class ProviderResult:
    """
    Result of a provider operation.

    Attributes
    ----------
    success : bool
        Whether the operation was successful.
    message : str
        Human-readable message.
    records : list[AddressRecord]
        The records as stored by the provider after the operation.
    zone_id : str | None
        The zone ID (CloudFlare).
    record_ids : list[str]
        Provider IDs of the written records, in submission order.
    """

    def __init__(
        self,
        *,
        success: bool,
        message: str,
        records: list[AddressRecord] | None = None,
        zone_id: str | None = None,
        record_ids: list[str] | None = None,
    ) -> None:
        """
        Initialize a ProviderResult.

        Parameters
        ----------
        success : bool
            Whether the operation was successful.
        message : str
            Human-readable message.
        records : list[AddressRecord] | None, optional
            The records as stored by the provider.
        zone_id : str | None, optional
            The zone ID.
        record_ids : list[str] | None, optional
            Provider IDs of the written records.
        """
        self.success = success
        self.message = message
        self.records = records or []
        self.zone_id = zone_id
        self.record_ids = record_ids or []

    def __repr__(self) -> str:
        return (
            f"ProviderResult(success={self.success!r}, message={self.message!r}, "
            f"records={len(self.records)})"
        )


class BaseDNSProvider(ABC):
    """
    Abstract base class for DNS providers.

    Implementations must provide the `set_records` method.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """
        Get the provider name.

        Returns
        -------
        str
            Provider name identifier.
        """
        ...

    @abstractmethod
    async def set_records(
        self,
        zone: str,
        records: list[AddressRecord],
    ) -> ProviderResult:
        """
        Create or replace DNS records in a zone.

        Every record matching the name and type of a submitted record is
        replaced; missing records are created. Records are always written,
        even if the stored value is already current.

        Parameters
        ----------
        zone : str
            The DNS zone (root domain name, e.g., "example.com").
        records : list[AddressRecord]
            The records to write; names are relative to the zone.

        Returns
        -------
        ProviderResult
            The result of the operation.
        """
        ...

    def build_fqdn(self, zone: str, record: str) -> str:
        """
        Build the fully qualified domain name.

        Parameters
        ----------
        zone : str
            The DNS zone (root domain).
        record : str
            The host record name.

        Returns
        -------
        str
            The FQDN.
        """
        if record in {"@", ""}:
            return zone
        return f"{record}.{zone}"

    def relative_name(self, zone: str, fqdn: str) -> str:
        """
        Strip the zone suffix from a fully qualified name.

        Parameters
        ----------
        zone : str
            The DNS zone (root domain).
        fqdn : str
            The fully qualified domain name.

        Returns
        -------
        str
            The host record name, or "@" for the zone apex.
        """
        if fqdn == zone:
            return "@"
        return fqdn.removesuffix(f".{zone}")
