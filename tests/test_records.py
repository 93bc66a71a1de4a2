"""Tests for record set assembly."""

from __future__ import annotations

import asyncio

import pytest

from conftest import PUBLIC_V4, PUBLIC_V6, FakeDiscover
from ddns_updater.errors import DiscoveryTransportError
from ddns_updater.models import RECORD_TTL, RecordType
from ddns_updater.records import RECORD_TYPES, build_record_set

ADDRESSES = {RecordType.A: PUBLIC_V4, RecordType.AAAA: PUBLIC_V6}


class TestBuildRecordSet:
    """Tests for build_record_set function."""

    def test_builds_a_then_aaaa(self) -> None:
        fake = FakeDiscover(ADDRESSES)
        records = asyncio.run(build_record_set("home", fake.discover))

        assert [r.record_type for r in records] == [RecordType.A, RecordType.AAAA]
        assert [r.value for r in records] == [PUBLIC_V4, PUBLIC_V6]
        assert {r.name for r in records} == {"home"}
        assert {r.ttl for r in records} == {RECORD_TTL}
        assert fake.calls == list(RECORD_TYPES)

    def test_ttl_is_five_minutes(self) -> None:
        records = asyncio.run(build_record_set("home", FakeDiscover(ADDRESSES).discover))
        assert all(r.ttl == 300 for r in records)  # noqa: PLR2004

    def test_ipv6_value_is_compressed(self) -> None:
        fake = FakeDiscover({RecordType.A: PUBLIC_V4, RecordType.AAAA: "2001:0db8:0:0::0001"})
        records = asyncio.run(build_record_set("home", fake.discover))
        assert records[1].value == "2001:db8::1"

    def test_fails_fast_on_ipv4(self) -> None:
        fake = FakeDiscover(ADDRESSES, fail_on=RecordType.A)
        with pytest.raises(DiscoveryTransportError):
            asyncio.run(build_record_set("home", fake.discover))
        # AAAA is never attempted after A fails
        assert fake.calls == [RecordType.A]

    def test_fails_on_ipv6(self) -> None:
        fake = FakeDiscover(ADDRESSES, fail_on=RecordType.AAAA)
        with pytest.raises(DiscoveryTransportError):
            asyncio.run(build_record_set("home", fake.discover))
        assert fake.calls == [RecordType.A, RecordType.AAAA]
