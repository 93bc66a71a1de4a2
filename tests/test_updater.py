"""Tests for the update pipeline."""

from __future__ import annotations

import asyncio

import pytest

from conftest import (
    PUBLIC_V4,
    PUBLIC_V6,
    FakeCloudflareAPI,
    FakeDiscover,
    FakeProvider,
    trace_body,
    trace_probe,
)
from ddns_updater.errors import (
    AddressNotFoundError,
    DiscoveryTransportError,
    DomainError,
    ProviderError,
)
from ddns_updater.models import AddressRecord, RecordType
from ddns_updater.providers.cloudflare import CloudFlareProvider
from ddns_updater.updater import update_dns

ADDRESSES = {RecordType.A: PUBLIC_V4, RecordType.AAAA: PUBLIC_V6}


class TestUpdateDns:
    """Tests for update_dns function."""

    def test_submits_record_set_to_zone(self):
        provider = FakeProvider()
        records = asyncio.run(
            update_dns("home.example.com", FakeDiscover(ADDRESSES), provider),
        )

        expected = [
            AddressRecord(record_type=RecordType.A, name="home", value=PUBLIC_V4, ttl=300),
            AddressRecord(record_type=RecordType.AAAA, name="home", value=PUBLIC_V6, ttl=300),
        ]
        assert provider.calls == [("example.com", expected)]
        assert records == expected

    def test_deep_subdomain(self):
        provider = FakeProvider()
        asyncio.run(update_dns("x.y.a.example.com", FakeDiscover(ADDRESSES), provider))
        zone, submitted = provider.calls[0]
        assert zone == "example.com"
        assert {r.name for r in submitted} == {"x.y.a"}

    def test_invalid_domain_skips_discovery(self):
        discover = FakeDiscover(ADDRESSES)
        provider = FakeProvider()
        with pytest.raises(DomainError):
            asyncio.run(update_dns("example.com", discover, provider))
        assert discover.calls == []
        assert provider.calls == []

    @pytest.mark.parametrize("fail_on", [RecordType.A, RecordType.AAAA])
    def test_discovery_failure_submits_nothing(self, fail_on):
        provider = FakeProvider()
        with pytest.raises(DiscoveryTransportError):
            asyncio.run(
                update_dns("home.example.com", FakeDiscover(ADDRESSES, fail_on=fail_on), provider),
            )
        assert provider.calls == []

    def test_provider_failure_raises(self):
        provider = FakeProvider(success=False, message="Zone not found for domain: example.com")
        with pytest.raises(ProviderError, match="Zone not found"):
            asyncio.run(update_dns("home.example.com", FakeDiscover(ADDRESSES), provider))


class TestEndToEnd:
    """Trace endpoint and CloudFlare API both faked at the HTTP layer."""

    def test_home_example_com(self):
        probe = trace_probe(
            {RecordType.A: trace_body(PUBLIC_V4), RecordType.AAAA: trace_body(PUBLIC_V6)},
        )
        api = FakeCloudflareAPI()
        provider = CloudFlareProvider("token", transport=api.transport())

        records = asyncio.run(update_dns("home.example.com", probe, provider))

        assert [(r.record_type, r.name, r.value, r.ttl) for r in records] == [
            (RecordType.A, "home", "203.0.113.7", 300),
            (RecordType.AAAA, "home", "2001:db8::1", 300),
        ]
        assert api.requests[0].url.params["name"] == "example.com"

    def test_missing_ipv6_line_never_reaches_api(self):
        probe = trace_probe({RecordType.A: trace_body(PUBLIC_V4), RecordType.AAAA: "h=x\n"})
        api = FakeCloudflareAPI()
        provider = CloudFlareProvider("token", transport=api.transport())

        with pytest.raises(AddressNotFoundError):
            asyncio.run(update_dns("home.example.com", probe, provider))
        assert api.requests == []
