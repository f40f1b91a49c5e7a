"""Tests for the bucket listing and box selection.

These tests use mocked HTTP responses for the bucket listing.
"""

import httpx
import pytest
import respx
from helpers import BUCKET_URL, LISTING_URL, box_key, make_listing

from bento_sync.catalog.entry import CatalogEntry
from bento_sync.catalog.listing import (
    Catalog,
    ListingError,
    build_entries,
    fetch_listing,
    parse_listing,
    select_latest,
)
from bento_sync.catalog.versions import MalformedConstraint


class TestParseListing:
    """Tests for parse_listing function."""

    def test_keeps_only_virtualbox_boxes(self, listing_xml, listing_records):
        """Should drop keys outside the prefix or without the .box suffix."""
        records = parse_listing(listing_xml)
        keys = [key for key, _ in records]

        assert "vagrant/vmware/opscode_centos-7.0_chef-provisionerless.box" not in keys
        assert "vagrant/virtualbox/README.txt" not in keys
        assert len(records) == len(listing_records) - 2

    def test_preserves_order_and_etag(self):
        body = make_listing([(box_key("centos-6.5"), '"abc"'), (box_key("centos-6.0"), '"def"')])
        assert parse_listing(body) == [
            (box_key("centos-6.5"), '"abc"'),
            (box_key("centos-6.0"), '"def"'),
        ]

    def test_without_namespace(self):
        body = make_listing([(box_key("centos-6.5"), "abc")], namespace="")
        assert parse_listing(body) == [(box_key("centos-6.5"), "abc")]

    def test_accepts_bytes(self, listing_xml):
        assert parse_listing(listing_xml.encode("utf-8")) == parse_listing(listing_xml)

    def test_skips_records_without_etag(self):
        body = (
            "<ListBucketResult>"
            f"<Contents><Key>{box_key('centos-6.5')}</Key></Contents>"
            f"<Contents><ETag>x</ETag></Contents>"
            f"<Contents><Key>{box_key('centos-6.0')}</Key><ETag>y</ETag></Contents>"
            "</ListBucketResult>"
        )
        assert parse_listing(body) == [(box_key("centos-6.0"), "y")]

    def test_custom_prefix(self, listing_xml):
        records = parse_listing(listing_xml, key_prefix="vagrant/vmware/")
        assert records == [
            ("vagrant/vmware/opscode_centos-7.0_chef-provisionerless.box", '"vmw"')
        ]

    def test_malformed_xml(self):
        """Should raise ListingError with parse_error code."""
        with pytest.raises(ListingError) as exc_info:
            parse_listing("<ListBucketResult><Contents>")
        assert exc_info.value.code == "parse_error"


class TestFetchListing:
    """Tests for fetch_listing function."""

    @respx.mock
    def test_fetch_success(self, listing_xml):
        respx.get(LISTING_URL).mock(return_value=httpx.Response(200, text=listing_xml))

        with httpx.Client() as client:
            records = fetch_listing(client, BUCKET_URL)

        assert (box_key("centos-6.5"), '"c65"') in records

    @respx.mock
    def test_http_error(self):
        respx.get(LISTING_URL).mock(return_value=httpx.Response(403))

        with httpx.Client() as client, pytest.raises(ListingError) as exc_info:
            fetch_listing(client, BUCKET_URL)

        assert exc_info.value.code == "http_error"

    @respx.mock
    def test_timeout_error(self):
        respx.get(LISTING_URL).mock(
            side_effect=httpx.TimeoutException("Connection timed out")
        )

        with httpx.Client() as client, pytest.raises(ListingError) as exc_info:
            fetch_listing(client, BUCKET_URL)

        assert exc_info.value.code == "timeout"

    @respx.mock
    def test_network_error(self):
        respx.get(LISTING_URL).mock(side_effect=httpx.ConnectError("refused"))

        with httpx.Client() as client, pytest.raises(ListingError) as exc_info:
            fetch_listing(client, BUCKET_URL)

        assert exc_info.value.code == "network_error"


class TestBuildEntries:
    """Tests for build_entries function."""

    def test_drops_unrecognized_names(self, listing_xml):
        entries = build_entries(parse_listing(listing_xml))

        assert all(isinstance(e, CatalogEntry) for e in entries)
        assert not any("freebsd" in e.remote_path for e in entries)
        assert len(entries) == 12

    def test_drops_keys_escaping_the_prefix(self):
        """A key with '..' segments passes the prefix filter but is dropped."""
        escaping = "vagrant/virtualbox/../../../opscode_centos-6.5_chef-provisionerless.box"
        body = make_listing([(escaping, '"e"'), (box_key("centos-6.0"), '"c60"')])

        records = parse_listing(body)
        entries = build_entries(records)

        assert (escaping, '"e"') in records
        assert [e.remote_path for e in entries] == [box_key("centos-6.0")]


class TestSelectLatest:
    """Tests for select_latest function."""

    def entries(self, *names: str) -> list[CatalogEntry]:
        return [CatalogEntry(box_key(n), f'"{n}"') for n in names]

    def test_pessimistic_selection(self):
        """'~> 6.0' at 32 bits picks the newest 6.x 32-bit box."""
        entries = self.entries("centos-6.0", "centos-6.5", "centos-7.0", "centos-6.5-x86_64")

        selected = select_latest(entries, "centos", "~> 6.0", 32)

        assert selected is not None
        assert selected.remote_path == box_key("centos-6.5")
        assert selected.bitness == 32

    def test_bitness_filter(self):
        entries = self.entries("centos-6.0", "centos-6.5", "centos-7.0", "centos-6.5-x86_64")

        selected = select_latest(entries, "centos", "~> 6.0", 64)

        assert selected is not None
        assert selected.remote_path == box_key("centos-6.5-x86_64")

    def test_i386_counts_as_32_bit(self):
        entries = self.entries("centos-5.10", "centos-5.11-i386")
        selected = select_latest(entries, "centos", "~> 5.0", 32)
        assert selected is not None
        assert selected.remote_path == box_key("centos-5.11-i386")

    def test_default_requirement_picks_newest(self):
        entries = self.entries("debian-7.8", "debian-8.0", "debian-7.10")
        selected = select_latest(entries, "debian")
        assert selected is not None
        assert str(selected.version) == "8.0"

    def test_no_match_returns_none(self):
        entries = self.entries("centos-6.0", "centos-7.0")
        assert select_latest(entries, "centos", "~> 8.0", 32) is None
        assert select_latest(entries, "ubuntu", ">= 0", 32) is None
        assert select_latest([], "centos") is None

    def test_tie_picks_last_listed(self):
        first = CatalogEntry(box_key("centos-6.5"), '"first"')
        second = CatalogEntry("mirror/opscode_centos-6.5.0_chef-provisionerless.box", '"second"')

        assert select_latest([first, second], "centos", "~> 6.0") is second
        assert select_latest([second, first], "centos", "~> 6.0") is first

    def test_malformed_requirement(self):
        with pytest.raises(MalformedConstraint):
            select_latest(self.entries("centos-6.0"), "centos", "newest")


class TestCatalog:
    """Tests for the Catalog class."""

    @respx.mock
    def test_latest(self, listing_xml):
        respx.get(LISTING_URL).mock(return_value=httpx.Response(200, text=listing_xml))

        with httpx.Client() as client:
            catalog = Catalog(client, BUCKET_URL)
            selected = catalog.latest("centos", "~> 6.0", 32)

        assert selected is not None
        assert selected.fingerprint == '"c65"'

    @respx.mock
    def test_listing_fetched_once(self, listing_xml):
        route = respx.get(LISTING_URL).mock(
            return_value=httpx.Response(200, text=listing_xml)
        )

        with httpx.Client() as client:
            catalog = Catalog(client, BUCKET_URL)
            catalog.latest("centos", "~> 6.0", 32)
            catalog.latest("centos", "~> 6.0", 64)
            catalog.latest("ubuntu", "14.04", 32)

        assert route.call_count == 1

    @respx.mock
    def test_listing_failure_propagates(self):
        respx.get(LISTING_URL).mock(return_value=httpx.Response(500))

        with httpx.Client() as client, pytest.raises(ListingError):
            Catalog(client, BUCKET_URL).latest("centos")
