class BackfillError(Exception):
    """Base error for the backfill jobs"""

    pass


class StorageUploadError(BackfillError):
    """Raised when the object storage rejects an upload"""

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Upload of {key} failed: {reason}")


class SourceCatalogError(BackfillError):
    """Raised when a scraped data file cannot be read"""

    pass
