"""
Data models for DDNS Updater.

This module defines the record types handled by the updater and the
address record submitted to the DNS provider.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from typing import Final


# Fixed TTL of every record written by the updater (5 minutes)
RECORD_TTL: Final[int] = 300


class RecordType(StrEnum):
    """
    Supported DNS record types.

    Attributes
    ----------
    A : str
        IPv4 address record.
    AAAA : str
        IPv6 address record.
    """

    A = "A"
    AAAA = "AAAA"

    @property
    def ip_version(self) -> int:
        """
        Get the IP version carried by this record type.

        Returns
        -------
        int
            4 for A records, 6 for AAAA records.
        """
        return 4 if self is RecordType.A else 6


class AddressRecord(BaseModel):
    """
    A single A/AAAA record to be written to the provider.

    Attributes
    ----------
    record_type : RecordType
        The type of DNS record (A or AAAA).
    name : str
        The host record name relative to the zone (e.g., "home").
    value : str
        The IP address literal.
    ttl : int
        Time to live in seconds.
    """

    record_type: RecordType = Field(..., alias="type")
    name: str = Field(..., min_length=1, description="Host record name")
    value: str = Field(..., min_length=1, description="IP address literal")
    ttl: int = Field(default=RECORD_TTL, ge=1, le=86400, description="TTL in seconds")

    model_config = {"populate_by_name": True}
