"""Shared fixtures for bento_sync tests."""

import pytest
from helpers import box_key, make_listing


@pytest.fixture
def listing_records() -> list[tuple[str, str]]:
    """Return a representative set of listing records."""
    return [
        (box_key("centos-5.11"), '"c511"'),
        (box_key("centos-5.11-i386"), '"c511-32"'),
        (box_key("centos-6.0"), '"c60"'),
        (box_key("centos-6.5"), '"c65"'),
        (box_key("centos-6.5-x86_64"), '"c65-64"'),
        (box_key("centos-7.0"), '"c70"'),
        (box_key("centos-7.0-x86_64"), '"c70-64"'),
        (box_key("ubuntu-14.04"), '"u1404"'),
        (box_key("ubuntu-14.04-x86_64"), '"u1404-64"'),
        (box_key("ubuntu-14.10"), '"u1410"'),
        (box_key("debian-7.8"), '"d78"'),
        (box_key("debian-7.8-x86_64"), '"d78-64"'),
        ("vagrant/virtualbox/opscode_freebsd-10.1_chef-provisioner.box", '"bad"'),
        ("vagrant/vmware/opscode_centos-7.0_chef-provisionerless.box", '"vmw"'),
        ("vagrant/virtualbox/README.txt", '"readme"'),
    ]


@pytest.fixture
def listing_xml(listing_records: list[tuple[str, str]]) -> str:
    """Return a ListBucketResult document for listing_records."""
    return make_listing(listing_records)
