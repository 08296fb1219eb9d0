from __future__ import annotations

import pytest
from botocore.exceptions import ClientError

from imap_dmarc_extractor.domain.errors import ReportStoreError
from imap_dmarc_extractor.infrastructure.storage.s3_store import S3ReportStore, S3StoreConfig


class FakeS3Client:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.calls: list[dict] = []

    def put_object(self, **kwargs):
        if self.error:
            raise self.error
        self.calls.append(kwargs)
        return {"ETag": '"abc"'}


def _cfg(prefix: str = "dmarc-reports") -> S3StoreConfig:
    return S3StoreConfig(
        endpoint="http://localhost:9000",
        region="us-east-1",
        access_key="key",
        secret_key="secret",
        bucket="reports",
        prefix=prefix,
    )


def test_put_writes_under_prefix():
    client = FakeS3Client()
    store = S3ReportStore(_cfg(), client=client)

    stored = store.put(filename="report.xml", data=b"<xml/>")

    assert client.calls[0]["Bucket"] == "reports"
    assert client.calls[0]["Key"] == "dmarc-reports/report.xml"
    assert client.calls[0]["Body"] == b"<xml/>"
    assert stored.location == "s3://reports/dmarc-reports/report.xml"
    assert stored.filename == "report.xml"
    assert stored.size_bytes == 6


def test_empty_prefix_uses_bare_filename():
    client = FakeS3Client()
    S3ReportStore(_cfg(prefix=""), client=client).put(filename="sub/report.xml", data=b"x")
    assert client.calls[0]["Key"] == "report.xml"


def test_client_errors_become_store_errors():
    error = ClientError({"Error": {"Code": "NoSuchBucket", "Message": "missing"}}, "PutObject")
    store = S3ReportStore(_cfg(), client=FakeS3Client(error=error))

    with pytest.raises(ReportStoreError):
        store.put(filename="report.xml", data=b"x")
