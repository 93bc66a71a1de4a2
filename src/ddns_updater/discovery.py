"""
Public address discovery.

The caller's public address is read from CloudFlare's trace endpoint, which
echoes the observed client address as an ``ip=<address>`` line in a
``key=value`` plain-text body. Each probe is pinned to one address family
by binding the HTTP transport to the matching wildcard local address, so an
IPv4 probe can never leave over IPv6 (and vice versa).
"""

from __future__ import annotations

import ipaddress
import logging
from typing import TYPE_CHECKING

import httpx
from starlette import status as st_status

from ddns_updater.errors import (
    AddressNotFoundError,
    AddressParseError,
    DiscoveryTransportError,
    UnsupportedRecordTypeError,
)
from ddns_updater.models import RecordType

if TYPE_CHECKING:
    from collections.abc import Callable
    from typing import Final

    IPAddress = ipaddress.IPv4Address | ipaddress.IPv6Address


# Diagnostic endpoint echoing the caller's address
DEFAULT_TRACE_URL: Final[str] = "https://cloudflare.com/cdn-cgi/trace"

# HTTP timeout in seconds
DEFAULT_TIMEOUT: Final[float] = 10.0

# Wildcard local address per record type, restricting the socket family
LOCAL_ADDRESSES: Final[dict[RecordType, str]] = {
    RecordType.A: "0.0.0.0",  # noqa: S104
    RecordType.AAAA: "::",
}


logger = logging.getLogger(__name__)


def family_transport(record_type: RecordType) -> httpx.AsyncBaseTransport:
    """
    Build an HTTP transport restricted to the address family of a record type.

    Parameters
    ----------
    record_type : RecordType
        A for IPv4, AAAA for IPv6.

    Returns
    -------
    httpx.AsyncBaseTransport
        A transport whose connections are bound to the family's wildcard address.
    """
    return httpx.AsyncHTTPTransport(local_address=LOCAL_ADDRESSES[record_type])


def parse_trace(body: str) -> str:
    """
    Extract the raw ``ip`` value from a trace response body.

    Parameters
    ----------
    body : str
        Response body, one ``key=value`` pair per line.

    Returns
    -------
    str
        The value of the first ``ip`` line.

    Raises
    ------
    AddressNotFoundError
        If no line has the key ``ip``.
    """
    for line in body.splitlines():
        key, sep, value = line.partition("=")
        if sep and key == "ip":
            return value.strip()
    msg = "No address found in trace response."
    raise AddressNotFoundError(msg)


class AddressProbe:
    """
    Discover the caller's public IPv4 or IPv6 address.

    Parameters
    ----------
    trace_url : str, optional
        URL of the trace endpoint.
    timeout : float, optional
        HTTP timeout in seconds.
    transport_factory : Callable[[RecordType], httpx.AsyncBaseTransport] | None, optional
        Builds the transport used for a record type. Defaults to
        `family_transport`; tests inject `httpx.MockTransport` here.
    """

    def __init__(
        self,
        trace_url: str = DEFAULT_TRACE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport_factory: Callable[[RecordType], httpx.AsyncBaseTransport]
        | None = None,
    ) -> None:
        self.trace_url = trace_url
        self.timeout = timeout
        self._transport_factory = transport_factory or family_transport

    async def discover(self, record_type: RecordType | str) -> IPAddress:
        """
        Discover the public address for a record type.

        Parameters
        ----------
        record_type : RecordType | str
            "A" for the IPv4 address, "AAAA" for the IPv6 address.

        Returns
        -------
        IPv4Address | IPv6Address
            The discovered address, always of the requested family.

        Raises
        ------
        UnsupportedRecordTypeError
            If the record type is neither A nor AAAA.
        DiscoveryTransportError
            If the request fails or the endpoint returns a non-200 status.
        AddressNotFoundError
            If the response has no ``ip=`` line.
        AddressParseError
            If the value is not an IP literal of the requested family.
        """
        try:
            rtype = RecordType(record_type)
        except ValueError as e:
            msg = f'Unsupported record type: "{record_type}".'
            raise UnsupportedRecordTypeError(msg) from e

        transport = self._transport_factory(rtype)
        async with httpx.AsyncClient(transport=transport, timeout=self.timeout) as client:
            try:
                response = await client.get(self.trace_url)
            except httpx.HTTPError as e:
                msg = f"[{rtype}] Request to {self.trace_url} failed: {e!r}"
                raise DiscoveryTransportError(msg) from e

        logger.debug(
            "[%s] GET %s -> %d",
            rtype,
            self.trace_url,
            response.status_code,
        )

        if response.status_code != st_status.HTTP_200_OK:
            msg = (
                f"[{rtype}] Trace endpoint returned HTTP {response.status_code}."
            )
            raise DiscoveryTransportError(msg)

        raw = parse_trace(response.text)
        try:
            address = ipaddress.ip_address(raw)
        except ValueError as e:
            msg = f'[{rtype}] Invalid address in trace response: "{raw}".'
            raise AddressParseError(msg) from e

        if address.version != rtype.ip_version:
            msg = (
                f"[{rtype}] Expected an IPv{rtype.ip_version} address, "
                f'got "{address}".'
            )
            raise AddressParseError(msg)

        return address
