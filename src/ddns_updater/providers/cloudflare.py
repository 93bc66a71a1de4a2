"""
CloudFlare DNS provider implementation.

This module implements the CloudFlare DNS API v4 for writing A/AAAA records.
Only API Token authentication is supported (not Global API Key).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx
from starlette import status as st_status

from ddns_updater.models import AddressRecord, RecordType
from ddns_updater.providers.base import BaseDNSProvider, ProviderResult

if TYPE_CHECKING:
    from typing import Final


# CloudFlare API base URL
CF_API_BASE: Final[str] = "https://api.cloudflare.com/client/v4"

# HTTP timeout in seconds
HTTP_TIMEOUT: Final[float] = 10.0


logger = logging.getLogger(__name__)


def _json_body(response: httpx.Response) -> dict[str, Any] | None:
    """
    Decode a CloudFlare API response body.

    Parameters
    ----------
    response : httpx.Response
        The API response.

    Returns
    -------
    dict[str, Any] | None
        The decoded JSON object, or None if the body is not a JSON object
        (e.g. an HTML page from a proxy).
    """
    try:
        data = response.json()
    except ValueError:
        logger.error("[cloudflare] Response is not JSON: '%s'", response.text[:200])  # noqa: TRY400
        return None
    if not isinstance(data, dict):
        logger.error("[cloudflare] Unexpected response body: '%s'", response.text[:200])
        return None
    return data


def _error_message(data: dict[str, Any]) -> str:
    """
    Get the first error message from a CloudFlare API response.

    Parameters
    ----------
    data : dict[str, Any]
        Decoded response body.

    Returns
    -------
    str
        The error message, or "Unknown error".
    """
    errors = data.get("errors") or []
    if errors:
        return str(errors[0].get("message", "Unknown error"))
    return "Unknown error"


class CloudFlareProvider(BaseDNSProvider):
    """
    CloudFlare DNS provider.

    Uses CloudFlare API v4 with API Token authentication. The token is
    passed in explicitly; the provider never reads the environment.

    Parameters
    ----------
    api_token : str
        CloudFlare API Token with DNS edit permission on the zone.
    api_base : str, optional
        API base URL.
    timeout : float, optional
        HTTP timeout in seconds.
    transport : httpx.AsyncBaseTransport | None, optional
        Custom transport (tests inject `httpx.MockTransport` here).
    """

    def __init__(
        self,
        api_token: str,
        *,
        api_base: str = CF_API_BASE,
        timeout: float = HTTP_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not api_token:
            msg = "Missing required credential: CloudFlare API token"
            raise ValueError(msg)
        self._headers = {
            "Authorization": f"Bearer {api_token}",
            "Content-Type": "application/json",
        }
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @property
    def name(self) -> str:
        """Get the provider name."""
        return "cloudflare"

    async def set_records(
        self,
        zone: str,
        records: list[AddressRecord],
    ) -> ProviderResult:
        """
        Create or replace DNS records in CloudFlare.

        All lookups (zone ID and existing records) are done before the
        first write, so a lookup failure leaves the zone untouched.

        Parameters
        ----------
        zone : str
            The DNS zone (root domain name).
        records : list[AddressRecord]
            The records to write.

        Returns
        -------
        ProviderResult
            The result of the operation.
        """
        async with httpx.AsyncClient(
            timeout=self.timeout,
            transport=self._transport,
        ) as client:
            # Step 1: Get Zone ID
            zone_id = await self._get_zone_id(client, zone)
            if zone_id is None:
                return ProviderResult(
                    success=False,
                    message=f"Zone not found for domain: {zone}",
                )

            logger.debug("[cloudflare] Zone ID for %s: %s", zone, zone_id)

            # Step 2: Query existing records for every submitted record
            existing: list[dict[str, Any] | None] = []
            for record in records:
                fqdn = self.build_fqdn(zone, record.name)
                found = await self._get_records(
                    client,
                    zone_id,
                    fqdn,
                    record.record_type,
                )
                if found is None:
                    return ProviderResult(
                        success=False,
                        message=f"Failed to query DNS records for {fqdn} {record.record_type}",
                        zone_id=zone_id,
                    )
                if len(found) > 1:
                    return ProviderResult(
                        success=False,
                        message=(
                            f"Multiple records ({len(found)}) found for {fqdn} "
                            f"{record.record_type}. "
                            "Please manually clean up duplicate records."
                        ),
                        zone_id=zone_id,
                    )
                existing.append(found[0] if found else None)

            # Step 3: Write records (replace if present, create otherwise)
            written: list[AddressRecord] = []
            record_ids: list[str] = []
            for record, current in zip(records, existing, strict=True):
                fqdn = self.build_fqdn(zone, record.name)
                if current is None:
                    result = await self._create_record(
                        client,
                        zone,
                        zone_id,
                        fqdn,
                        record,
                    )
                else:
                    result = await self._replace_record(
                        client,
                        zone,
                        zone_id,
                        fqdn,
                        record,
                        current,
                    )
                if not result.success:
                    # Report what was already written before the failure
                    result.records = written + result.records
                    result.record_ids = record_ids + result.record_ids
                    return result
                written.extend(result.records)
                record_ids.extend(result.record_ids)

        return ProviderResult(
            success=True,
            message=f"{len(written)} DNS record(s) set in {zone}",
            records=written,
            zone_id=zone_id,
            record_ids=record_ids,
        )

    async def _get_zone_id(
        self,
        client: httpx.AsyncClient,
        zone: str,
    ) -> str | None:
        """
        Get the Zone ID for a domain.

        Parameters
        ----------
        client : httpx.AsyncClient
            HTTP client.
        zone : str
            The DNS zone name.

        Returns
        -------
        str | None
            Zone ID or None if not found.
        """
        url = f"{self.api_base}/zones"
        params = {"name": zone}

        try:
            response = await client.get(url, headers=self._headers, params=params)
        except httpx.RequestError as e:
            logger.error("[cloudflare] Network request failed: '%s'", e)  # noqa: TRY400
            return None

        logger.debug(
            "[cloudflare] GET %s?name=%s -> %d",
            url,
            zone,
            response.status_code,
        )

        if response.status_code != st_status.HTTP_200_OK:
            logger.error("[cloudflare] Failed to get zones: '%s'", response.text)
            return None

        data = _json_body(response)
        logger.debug("[cloudflare] Response: %s", response.text)

        if data is None or not data.get("success"):
            return None

        zones = data.get("result") or []
        if zones:
            return str(zones[0]["id"])
        return None

    async def _get_records(
        self,
        client: httpx.AsyncClient,
        zone_id: str,
        fqdn: str,
        record_type: RecordType,
    ) -> list[dict[str, Any]] | None:
        """
        Get DNS records matching name and type.

        Parameters
        ----------
        client : httpx.AsyncClient
            HTTP client.
        zone_id : str
            The zone ID.
        fqdn : str
            The fully qualified domain name.
        record_type : RecordType
            The record type.

        Returns
        -------
        list[dict[str, Any]] | None
            List of records or None on error.
        """
        url = f"{self.api_base}/zones/{zone_id}/dns_records"
        params = {"name": fqdn, "type": record_type.value}

        try:
            response = await client.get(url, headers=self._headers, params=params)
            logger.debug(
                "[cloudflare] GET %s?name=%s&type=%s -> %d",
                url,
                fqdn,
                record_type,
                response.status_code,
            )

            if response.status_code != st_status.HTTP_200_OK:
                logger.error("[cloudflare] Failed to get records: '%s'", response.text)
                return None

            data = _json_body(response)
            logger.debug("[cloudflare] Response: %s", response.text)

            if data is None or not data.get("success"):
                return None

            return list(data.get("result") or [])

        except httpx.RequestError as e:
            logger.error("[cloudflare] Network request failed: '%s'", e)  # noqa: TRY400
            return None

    async def _create_record(
        self,
        client: httpx.AsyncClient,
        zone: str,
        zone_id: str,
        fqdn: str,
        record: AddressRecord,
    ) -> ProviderResult:
        """
        Create a new DNS record.

        Parameters
        ----------
        client : httpx.AsyncClient
            HTTP client.
        zone : str
            The DNS zone name.
        zone_id : str
            The zone ID.
        fqdn : str
            The fully qualified domain name.
        record : AddressRecord
            The record to create.

        Returns
        -------
        ProviderResult
            The result of the operation.
        """
        url = f"{self.api_base}/zones/{zone_id}/dns_records"
        payload: dict[str, str | int | bool] = {
            "type": record.record_type.value,
            "name": fqdn,
            "content": record.value,
            "ttl": record.ttl,
            "proxied": False,
        }
        return await self._write(client, "POST", url, payload, zone, zone_id, fqdn)

    async def _replace_record(
        self,
        client: httpx.AsyncClient,
        zone: str,
        zone_id: str,
        fqdn: str,
        record: AddressRecord,
        existing: dict[str, Any],
    ) -> ProviderResult:
        """
        Overwrite an existing DNS record.

        Parameters
        ----------
        client : httpx.AsyncClient
            HTTP client.
        zone : str
            The DNS zone name.
        zone_id : str
            The zone ID.
        fqdn : str
            The fully qualified domain name.
        record : AddressRecord
            The new record content.
        existing : dict[str, Any]
            The existing record data.

        Returns
        -------
        ProviderResult
            The result of the operation.
        """
        record_id = existing["id"]
        previous = existing.get("content", "")
        if previous != record.value:
            logger.info(
                '[cloudflare] %s %s: "%s" -> "%s".',
                fqdn,
                record.record_type,
                previous,
                record.value,
            )

        url = f"{self.api_base}/zones/{zone_id}/dns_records/{record_id}"
        payload: dict[str, str | int | bool] = {
            "type": record.record_type.value,
            "name": fqdn,
            "content": record.value,
            "ttl": record.ttl,
            "proxied": bool(existing.get("proxied", False)),
        }
        return await self._write(client, "PUT", url, payload, zone, zone_id, fqdn)

    async def _write(
        self,
        client: httpx.AsyncClient,
        method: str,
        url: str,
        payload: dict[str, str | int | bool],
        zone: str,
        zone_id: str,
        fqdn: str,
    ) -> ProviderResult:
        """Send a record write request and convert the response."""
        try:
            response = await client.request(
                method,
                url,
                headers=self._headers,
                json=payload,
            )
        except httpx.RequestError as e:
            logger.error("[cloudflare] Network request failed: '%s'", e)  # noqa: TRY400
            return ProviderResult(
                success=False,
                message=f"Request error: {e}",
                zone_id=zone_id,
            )

        logger.debug("[cloudflare] %s %s -> %d", method, url, response.status_code)
        logger.debug("[cloudflare] Response: %s", response.text)

        data = _json_body(response) or {}

        if response.status_code == st_status.HTTP_200_OK and data.get("success"):
            result = data.get("result") or {}
            try:
                stored = AddressRecord(
                    record_type=result.get("type", payload["type"]),
                    name=self.relative_name(zone, str(result.get("name", fqdn))),
                    value=str(result.get("content", payload["content"])),
                    ttl=int(result.get("ttl", payload["ttl"])),
                )
            except (ValueError, TypeError) as e:
                # pydantic.ValidationError is a ValueError
                logger.error("[cloudflare] Unexpected record in response: '%s'", e)  # noqa: TRY400
                return ProviderResult(
                    success=False,
                    message=f"Unexpected record returned for {fqdn}",
                    zone_id=zone_id,
                )
            return ProviderResult(
                success=True,
                message=f"DNS record set for {fqdn}",
                records=[stored],
                zone_id=zone_id,
                record_ids=[str(result.get("id", ""))],
            )

        action = "create" if method == "POST" else "update"
        return ProviderResult(
            success=False,
            message=f"Failed to {action} record {fqdn}: {_error_message(data)}",
            zone_id=zone_id,
        )
