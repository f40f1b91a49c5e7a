"""Bucket constants and listing builders shared by the tests."""

S3_NAMESPACE = "http://s3.amazonaws.com/doc/2006-03-01/"

BUCKET_URL = "http://bucket.example.com"

LISTING_URL = f"{BUCKET_URL}/"


def make_listing(records: list[tuple[str, str]], namespace: str = S3_NAMESPACE) -> str:
    """Build a ListBucketResult document from (key, etag) pairs."""
    contents = "".join(
        f"<Contents><Key>{key}</Key><ETag>{etag}</ETag>"
        "<Size>1024</Size><StorageClass>STANDARD</StorageClass></Contents>"
        for key, etag in records
    )
    xmlns = f' xmlns="{namespace}"' if namespace else ""
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        f"<ListBucketResult{xmlns}><Name>opscode-vm-bento</Name>"
        f"<IsTruncated>false</IsTruncated>{contents}</ListBucketResult>"
    )


def box_key(name: str) -> str:
    """Return the bucket key of a box, e.g. box_key('centos-6.5')."""
    return f"vagrant/virtualbox/opscode_{name}_chef-provisionerless.box"
