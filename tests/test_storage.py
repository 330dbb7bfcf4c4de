from dataclasses import replace
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from app.errors import StoreError
from app.services.storage import S3ArtifactStore, public_url
from app.utils.hash import content_key, sha256_hex


def test_store_uploads_pdf_under_content_key(settings):
    client = MagicMock()
    store = S3ArtifactStore(settings, client=client)
    url = store.store(b"%PDF-1.4 test", "pdf")

    kwargs = client.put_object.call_args.kwargs
    assert kwargs["Bucket"] == "test-bucket"
    assert kwargs["ContentType"] == "application/pdf"
    assert kwargs["Body"] == b"%PDF-1.4 test"
    expected_key = f"documents/fabric/{sha256_hex(b'%PDF-1.4 test')}.pdf"
    assert kwargs["Key"] == expected_key
    assert url == f"https://test-bucket.s3.us-east-1.amazonaws.com/{expected_key}"


def test_client_error_becomes_store_error(settings):
    client = MagicMock()
    client.put_object.side_effect = ClientError({"Error": {"Code": "AccessDenied", "Message": "no"}}, "PutObject")
    with pytest.raises(StoreError):
        S3ArtifactStore(settings, client=client).store(b"%PDF-", "pdf")


def test_unknown_content_kind_is_store_error(settings):
    with pytest.raises(StoreError, match="content kind"):
        S3ArtifactStore(settings, client=MagicMock()).store(b"data", "video")


def test_empty_artifact_is_store_error(settings):
    client = MagicMock()
    with pytest.raises(StoreError):
        S3ArtifactStore(settings, client=client).store(b"", "pdf")
    client.put_object.assert_not_called()


def test_public_url_prefers_public_base(settings):
    s = replace(settings, S3_PUBLIC_BASE_URL="https://cdn.example.com")
    assert public_url(s, "documents/fabric/a b.pdf") == "https://cdn.example.com/documents/fabric/a%20b.pdf"


def test_public_url_for_custom_endpoint(settings):
    s = replace(settings, S3_ENDPOINT="https://minio.local:9000/")
    assert public_url(s, "k.pdf") == "https://minio.local:9000/test-bucket/k.pdf"


def test_content_key_without_prefix():
    assert content_key(prefix="", data=b"x", suffix=".pdf") == f"{sha256_hex(b'x')}.pdf"
