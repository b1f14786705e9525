"""
R2 blob store with a stubbed S3 client
"""

from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from app.storage.cloud_storage import CloudStorageService
from app.storage.cloud_storage.r2_client import build_key, public_url
from app.storage.cloud_storage.types import DEFAULT_MIME, resolve_content_type

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


def _service(client, prefix="media") -> CloudStorageService:
    return CloudStorageService(
        client=client,
        bucket="suppliers",
        prefix=prefix,
        public_base="https://cdn.test",
    )


@pytest.mark.asyncio
async def test_save_puts_object_and_returns_public_url():
    client = MagicMock()

    url = await _service(client).save("logos/u1/1700000000000_logo.png", PNG, content_type="image/png")

    assert url == "https://cdn.test/media/logos/u1/1700000000000_logo.png"
    client.put_object.assert_called_once()
    kwargs = client.put_object.call_args.kwargs
    assert kwargs["Bucket"] == "suppliers"
    assert kwargs["Key"] == "media/logos/u1/1700000000000_logo.png"
    assert kwargs["Body"] == PNG
    assert kwargs["ContentType"] == "image/png"
    assert "immutable" in kwargs["CacheControl"]


@pytest.mark.asyncio
async def test_save_without_prefix():
    client = MagicMock()

    url = await _service(client, prefix="").save("licenses/u1/1_l.pdf", b"%PDF", content_type="application/pdf")

    assert url == "https://cdn.test/licenses/u1/1_l.pdf"
    assert client.put_object.call_args.kwargs["Key"] == "licenses/u1/1_l.pdf"


@pytest.mark.asyncio
async def test_save_propagates_client_errors():
    client = MagicMock()
    client.put_object.side_effect = ClientError(
        {"Error": {"Code": "AccessDenied", "Message": "denied"}}, "PutObject"
    )

    with pytest.raises(ClientError):
        await _service(client).save("logos/u1/1_logo.png", PNG, content_type="image/png")


def test_build_key_strips_slashes():
    assert build_key("/logos/", "u1/", prefix="media") == "media/logos/u1"
    assert build_key("logos", "u1", prefix="") == "logos/u1"


def test_public_url_joins_base():
    assert public_url("/media/a.png", base="https://cdn.test/") == "https://cdn.test/media/a.png"


def test_public_url_requires_base():
    with pytest.raises(RuntimeError):
        public_url("a.png", base="")


@pytest.mark.parametrize(
    "declared,data,expected",
    [
        ("image/png", b"anything", "image/png"),
        ("Image/JPEG; charset=binary", b"anything", "image/jpeg"),
        ("application/octet-stream", PNG, "image/png"),
        (None, PNG, "image/png"),
        (None, b"plain bytes", DEFAULT_MIME),
    ],
)
def test_resolve_content_type(declared, data, expected):
    assert resolve_content_type(declared, data) == expected
