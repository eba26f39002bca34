"""
Image migration service - copies scraped gallery images to our bucket.

Destination keys are deterministic ({category}/{entity_id}/{resolution}/image-{n}.{ext}),
so a re-run finds images uploaded by an earlier run with a HEAD request and
does not download them again.
"""

import logging
from typing import Optional

import httpx

from ...config import IMAGE_DOWNLOAD_TIMEOUT_SECONDS, IMAGE_RESOLUTION, IMAGE_SOURCE_REFERER
from ...exceptions import StorageUploadError
from .schemas import DOWNLOAD_ERROR, UPLOAD_ERROR, ImageUploadResult, http_status_error
from .storage import R2ImageStorage

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "image/jpeg"

EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/gif": "gif",
}


def build_source_headers(referer: str = IMAGE_SOURCE_REFERER) -> dict:
    """Browser-like headers; the scraped site rejects unidentified clients"""
    origin = referer.rstrip("/")
    return {
        "User-Agent": (
            "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
        ),
        "Accept": "image/webp,image/apng,image/svg+xml,image/*,*/*;q=0.8",
        "Accept-Language": "fr-FR,fr;q=0.9,en-US;q=0.8,en;q=0.7",
        "Referer": referer,
        "Origin": origin,
    }


def normalize_content_type(header_value: Optional[str]) -> str:
    """'image/png; charset=binary' -> 'image/png'; missing -> image/jpeg"""
    if not header_value:
        return DEFAULT_CONTENT_TYPE
    content_type = header_value.split(";")[0].strip().lower()
    return content_type or DEFAULT_CONTENT_TYPE


def extension_for(content_type: str) -> str:
    return EXTENSIONS.get(content_type.lower(), "jpg")


def build_image_key(
    category: str, entity_id: str, index: int, extension: str = "jpg", resolution: str = IMAGE_RESOLUTION
) -> str:
    return f"{category}/{entity_id}/{resolution}/image-{index}.{extension}"


class ImageUploader:
    """Download one image and re-upload it under its deterministic key"""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        storage: R2ImageStorage,
        resolution: str = IMAGE_RESOLUTION,
        headers: Optional[dict] = None,
        timeout: float = IMAGE_DOWNLOAD_TIMEOUT_SECONDS,
    ):
        self.http_client = http_client
        self.storage = storage
        self.resolution = resolution
        self.headers = headers or build_source_headers()
        self.timeout = timeout

    async def upload(self, source_url: str, category: str, entity_id: str, index: int) -> ImageUploadResult:
        """
        Migrate one image.

        Args:
            source_url: Scraped image URL (external, untrusted)
            category: "establishments" or "partners"
            entity_id: Owning entity id
            index: 1-based position in the gallery

        Returns:
            ImageUploadResult - never raises for download or upload problems
        """
        if self.storage.is_hosted(source_url):
            return ImageUploadResult.uploaded(source_url, source_url, reused=True)

        predicted_key = build_image_key(category, entity_id, index, resolution=self.resolution)
        if await self.storage.exists(predicted_key):
            logger.info(f"  ✅ Image {index} already uploaded")
            return ImageUploadResult.uploaded(
                source_url, self.storage.public_url(predicted_key), key=predicted_key, reused=True
            )

        logger.info(f"  📥 Downloading: {source_url}")
        try:
            resp = await self.http_client.get(
                source_url, headers=self.headers, timeout=self.timeout, follow_redirects=True
            )
        except httpx.HTTPError as e:
            return ImageUploadResult.failed(source_url, DOWNLOAD_ERROR, detail=str(e))

        if not resp.is_success:
            return ImageUploadResult.failed(
                source_url, http_status_error(resp.status_code), detail=resp.reason_phrase
            )

        content_type = normalize_content_type(resp.headers.get("content-type"))
        key = build_image_key(
            category, entity_id, index, extension_for(content_type), resolution=self.resolution
        )

        logger.info(f"  📤 Uploading to: {key}")
        try:
            url = await self.storage.put(key, resp.content, content_type)
        except StorageUploadError as e:
            return ImageUploadResult.failed(source_url, UPLOAD_ERROR, detail=e.reason)

        return ImageUploadResult.uploaded(source_url, url, key=key)
