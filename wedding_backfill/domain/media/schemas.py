"""Media domain schemas"""

from typing import Optional

from pydantic import BaseModel

DOWNLOAD_ERROR = "download-error"
UPLOAD_ERROR = "upload-error"


def http_status_error(status_code: int) -> str:
    return f"http-status-{status_code}"


class ImageUploadResult(BaseModel):
    """Outcome of migrating one gallery image"""

    success: bool
    source_url: str
    url: Optional[str] = None
    key: Optional[str] = None
    error: Optional[str] = None
    detail: Optional[str] = None
    reused: bool = False

    @classmethod
    def uploaded(cls, source_url: str, url: str, key: Optional[str] = None, reused: bool = False):
        return cls(success=True, source_url=source_url, url=url, key=key, reused=reused)

    @classmethod
    def failed(cls, source_url: str, error: str, detail: Optional[str] = None):
        return cls(success=False, source_url=source_url, error=error, detail=detail)


class ImageCoverageStats(BaseModel):
    """How many entities of one kind have their gallery hosted"""

    entity: str
    total: int
    with_source_images: int
    migrated: int

    @property
    def pending(self) -> int:
        return max(self.with_source_images - self.migrated, 0)
