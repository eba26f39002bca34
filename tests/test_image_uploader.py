import asyncio

import httpx
import pytest
from botocore.exceptions import ClientError

from conftest import FakeS3, mock_client
from wedding_backfill.domain.media.service import (
    ImageUploader,
    build_image_key,
    build_source_headers,
    extension_for,
    normalize_content_type,
)
from wedding_backfill.domain.media.storage import R2ImageStorage

PUBLIC = "https://media.test"
SOURCE = "https://cdn0.mariages.net/vendor/1234/960/jpg/photo_1.jpeg"


def upload(handler, s3=None, source_url=SOURCE):
    """Run one upload against mocked HTTP; returns (result, requests, s3)"""
    sent = []
    s3 = s3 or FakeS3()

    def record(request: httpx.Request):
        sent.append(request)
        return handler(request)

    async def go():
        async with mock_client(record) as client:
            storage = R2ImageStorage(client, s3_client=s3, bucket="media", public_base_url=PUBLIC)
            uploader = ImageUploader(client, storage)
            return await uploader.upload(source_url, "partners", "p1", 2)

    return asyncio.run(go()), sent, s3


def not_hosted_then(response):
    def handler(request):
        if request.method == "HEAD":
            return httpx.Response(404)
        return response

    return handler


class TestImageKeys:
    def test_key_layout(self):
        assert build_image_key("establishments", "e1", 3, "png") == (
            "establishments/e1/960/image-3.png"
        )

    @pytest.mark.parametrize(
        "header,expected",
        [
            ("image/png", "image/png"),
            ("image/webp; charset=binary", "image/webp"),
            (None, "image/jpeg"),
            ("", "image/jpeg"),
        ],
    )
    def test_normalize_content_type(self, header, expected):
        assert normalize_content_type(header) == expected

    def test_extension_for(self):
        assert extension_for("image/png") == "png"
        assert extension_for("image/jpeg") == "jpg"
        assert extension_for("application/octet-stream") == "jpg"

    def test_source_headers_identify_as_browser(self):
        headers = build_source_headers("https://www.mariages.net/")
        assert headers["Referer"] == "https://www.mariages.net/"
        assert headers["Origin"] == "https://www.mariages.net"
        assert "Mozilla" in headers["User-Agent"]


class TestImageUploader:
    def test_existing_object_skips_download(self):
        result, sent, s3 = upload(lambda request: httpx.Response(200))

        assert result.success
        assert result.reused
        assert result.url == f"{PUBLIC}/partners/p1/960/image-2.jpg"
        assert [r.method for r in sent] == ["HEAD"]
        assert s3.objects == {}

    def test_downloads_and_uploads(self):
        response = httpx.Response(200, content=b"\x89PNG", headers={"content-type": "image/png"})

        result, sent, s3 = upload(not_hosted_then(response))

        assert result.success
        assert not result.reused
        assert result.key == "partners/p1/960/image-2.png"
        assert result.url == f"{PUBLIC}/partners/p1/960/image-2.png"
        assert [r.method for r in sent] == ["HEAD", "GET"]
        assert sent[1].headers["referer"] == "https://www.mariages.net/"
        stored = s3.objects["partners/p1/960/image-2.png"]
        assert stored["Body"] == b"\x89PNG"
        assert stored["ContentType"] == "image/png"
        assert stored["Bucket"] == "media"

    def test_http_status_error(self):
        result, _, s3 = upload(not_hosted_then(httpx.Response(403)))

        assert not result.success
        assert result.error == "http-status-403"
        assert s3.objects == {}

    def test_download_error(self):
        def handler(request):
            if request.method == "HEAD":
                return httpx.Response(404)
            raise httpx.ReadTimeout("timed out", request=request)

        result, _, _ = upload(handler)

        assert result.error == "download-error"

    def test_head_failure_counts_as_missing(self):
        def handler(request):
            if request.method == "HEAD":
                raise httpx.ConnectError("dns", request=request)
            return httpx.Response(200, content=b"jpeg")

        result, sent, _ = upload(handler)

        assert result.success
        assert result.key == "partners/p1/960/image-2.jpg"
        assert len(sent) == 2

    def test_upload_error(self):
        error = ClientError({"Error": {"Code": "AccessDenied", "Message": "denied"}}, "PutObject")
        response = httpx.Response(200, content=b"jpeg", headers={"content-type": "image/jpeg"})

        result, _, _ = upload(not_hosted_then(response), s3=FakeS3(error=error))

        assert not result.success
        assert result.error == "upload-error"
        assert "denied" in result.detail

    def test_already_hosted_source(self):
        result, sent, _ = upload(
            lambda request: httpx.Response(500), source_url=f"{PUBLIC}/partners/p1/960/image-2.jpg"
        )

        assert result.success
        assert result.reused
        assert sent == []
