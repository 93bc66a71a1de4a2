"""Shared fixtures and fakes for the test suite."""

from __future__ import annotations

import json
from ipaddress import ip_address

import httpx
import pytest

from ddns_updater.discovery import AddressProbe
from ddns_updater.errors import DiscoveryTransportError
from ddns_updater.models import RecordType
from ddns_updater.providers.base import BaseDNSProvider, ProviderResult

TRACE_TEMPLATE = (
    "fl=29f158\n"
    "h=cloudflare.com\n"
    "ip={ip}\n"
    "ts=1760000000.123\n"
    "visit_scheme=https\n"
    "uag=python-httpx/0.27.0\n"
    "colo=AMS\n"
)

PUBLIC_V4 = "203.0.113.7"
PUBLIC_V6 = "2001:db8::1"


def trace_body(ip: str) -> str:
    """Build a trace endpoint response body reporting the given address."""
    return TRACE_TEMPLATE.format(ip=ip)


def trace_probe(bodies: dict[RecordType, str], status: int = 200) -> AddressProbe:
    """Create an AddressProbe answering each record type with a fixed body."""

    def factory(record_type: RecordType) -> httpx.AsyncBaseTransport:
        def handler(_request: httpx.Request) -> httpx.Response:
            return httpx.Response(status, text=bodies[record_type])

        return httpx.MockTransport(handler)

    return AddressProbe(transport_factory=factory)


class FakeDiscover:
    """Address discovery stub returning canned addresses or raising."""

    def __init__(self, addresses: dict[RecordType, str], fail_on: RecordType | None = None):
        self.addresses = addresses
        self.fail_on = fail_on
        self.calls: list[RecordType] = []

    async def discover(self, record_type: RecordType):
        self.calls.append(record_type)
        if record_type == self.fail_on:
            msg = f"no route for {record_type}"
            raise DiscoveryTransportError(msg)
        return ip_address(self.addresses[record_type])


class FakeProvider(BaseDNSProvider):
    """Provider stub recording submitted record sets."""

    def __init__(self, success: bool = True, message: str = "ok"):
        self.success = success
        self.message = message
        self.calls: list[tuple[str, list]] = []

    @property
    def name(self) -> str:
        return "fake"

    async def set_records(self, zone, records):
        self.calls.append((zone, list(records)))
        if not self.success:
            return ProviderResult(success=False, message=self.message)
        return ProviderResult(success=True, message=self.message, records=list(records))


class FakeCloudflareAPI:
    """
    In-memory CloudFlare API v4 served through httpx.MockTransport.

    Records are dicts in the API's shape; ``requests`` keeps every request
    received so tests can assert on the calls made.
    """

    def __init__(self, zones=None, records=None, fail_writes: bool = False):
        self.zones = zones if zones is not None else [{"id": "zone-1", "name": "example.com"}]
        self.records = records if records is not None else []
        self.fail_writes = fail_writes
        self.requests: list[httpx.Request] = []
        self._next_id = 1

    @property
    def writes(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method in {"POST", "PUT"}]

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix("/client/v4")
        params = request.url.params

        if request.method == "GET" and path == "/zones":
            result = [z for z in self.zones if z["name"] == params.get("name")]
            return httpx.Response(200, json={"success": True, "errors": [], "result": result})

        if request.method == "GET" and path.endswith("/dns_records"):
            result = [
                r
                for r in self.records
                if r["name"] == params.get("name") and r["type"] == params.get("type")
            ]
            return httpx.Response(200, json={"success": True, "errors": [], "result": result})

        if request.method in {"POST", "PUT"}:
            if self.fail_writes:
                return httpx.Response(
                    400,
                    json={
                        "success": False,
                        "errors": [{"code": 9005, "message": "Content for A record is invalid."}],
                        "result": None,
                    },
                )
            body = json.loads(request.content)
            if request.method == "POST":
                record_id = f"rec-{self._next_id}"
                self._next_id += 1
            else:
                record_id = path.rsplit("/", 1)[-1]
            stored = {"id": record_id, **body}
            return httpx.Response(200, json={"success": True, "errors": [], "result": stored})

        return httpx.Response(404, json={"success": False, "errors": [{"code": 7003, "message": "No route"}]})


@pytest.fixture
def cf_api() -> FakeCloudflareAPI:
    """Create an empty fake CloudFlare API with the zone example.com."""
    return FakeCloudflareAPI()
