"""
Object storage for hosted gallery images.

Images live in a public Cloudflare R2 bucket (S3 API through boto3) and are
served from R2_PUBLIC_BASE_URL, so an object's URL can be predicted from its
key and checked with a plain HEAD request.
"""

import logging
from typing import Optional

import boto3
import httpx
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError

from ...config import (
    R2_ACCESS_KEY_ID,
    R2_ACCOUNT_ID,
    R2_BUCKET_NAME,
    R2_PUBLIC_BASE_URL,
    R2_SECRET_ACCESS_KEY,
)
from ...exceptions import StorageUploadError

logger = logging.getLogger(__name__)


def get_r2_client():
    """Get configured boto3 client for Cloudflare R2"""
    return boto3.client(
        "s3",
        endpoint_url=f"https://{R2_ACCOUNT_ID}.r2.cloudflarestorage.com",
        aws_access_key_id=R2_ACCESS_KEY_ID,
        aws_secret_access_key=R2_SECRET_ACCESS_KEY,
        config=Config(signature_version="s3v4"),
        region_name="auto",
    )


class R2ImageStorage:
    """put / public_url / exists on the public media bucket"""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        s3_client=None,
        bucket: str = R2_BUCKET_NAME,
        public_base_url: str = R2_PUBLIC_BASE_URL,
    ):
        self.http_client = http_client
        self._s3_client = s3_client
        self.bucket = bucket
        self.public_base_url = public_base_url.rstrip("/")

    @property
    def s3(self):
        """Lazy load the R2 client"""
        if self._s3_client is None:
            self._s3_client = get_r2_client()
        return self._s3_client

    def public_url(self, key: str) -> str:
        return f"{self.public_base_url}/{key.lstrip('/')}"

    def is_hosted(self, url: Optional[str]) -> bool:
        """True for URLs already served from this bucket"""
        return bool(url) and url.startswith(f"{self.public_base_url}/")

    async def exists(self, key: str) -> bool:
        """HEAD the predicted public URL; any error counts as missing"""
        try:
            resp = await self.http_client.head(self.public_url(key), timeout=10.0)
            return resp.status_code == 200
        except httpx.HTTPError as e:
            logger.debug(f"HEAD failed for {key}: {e}")
            return False

    async def put(self, key: str, content: bytes, content_type: str) -> str:
        """Upload bytes under key and return the public URL"""
        try:
            self.s3.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=content,
                ContentType=content_type,
                CacheControl="public, max-age=31536000, immutable",
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"❌ Failed to upload {key} to R2: {e}")
            raise StorageUploadError(key, str(e)) from e
        logger.info(f"✅ Uploaded {key} ({len(content)} bytes, {content_type})")
        return self.public_url(key)
