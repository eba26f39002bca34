"""
Progress checkpoint for resumable batch jobs.

A small JSON snapshot (counters + last processed id) written next to the
process every few entities, so an interrupted run can pick up after the last
saved id. The file is removed once a run completes.
"""

import json
import logging
import os
from pathlib import Path
from typing import Generic, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)


class CheckpointRecord(BaseModel):
    """Batch job progress, serialized with the camelCase keys of the progress files"""

    model_config = ConfigDict(populate_by_name=True)

    total_entities: int = Field(0, alias="totalEntities")
    processed_entities: int = Field(0, alias="processedEntities")
    succeeded: int = Field(0, alias="succeeded")
    failed: int = Field(0, alias="failed")
    skipped_entities: int = Field(0, alias="skippedEntities")
    current_entity: str = Field("", alias="currentEntity")
    last_processed_id: Optional[str] = Field(None, alias="lastProcessedId")

    @property
    def success_rate(self) -> float:
        attempts = self.succeeded + self.failed
        if not attempts:
            return 0.0
        return self.succeeded / attempts * 100

    @property
    def remaining(self) -> int:
        return max(self.total_entities - self.processed_entities, 0)


class GeocodingCheckpoint(CheckpointRecord):
    succeeded: int = Field(0, alias="successfulGeocoding")
    failed: int = Field(0, alias="failedGeocoding")


class ImageUploadCheckpoint(CheckpointRecord):
    succeeded: int = Field(0, alias="uploadedImages")
    failed: int = Field(0, alias="failedImages")


R = TypeVar("R", bound=CheckpointRecord)


class CheckpointStore(Generic[R]):
    """load / save / clear a checkpoint file at a fixed path"""

    def __init__(self, path: Union[str, Path], record_cls: type[R]):
        self.path = Path(path)
        self.record_cls = record_cls

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> Optional[R]:
        """
        Load the saved progress.

        Returns None when there is no file. An unreadable file is reported as a
        checkpoint-load-error and also yields None so the job starts fresh.
        """
        if not self.path.exists():
            return None
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return self.record_cls.model_validate(data)
        except (OSError, ValueError, ValidationError) as e:
            logger.warning(f"⚠️ checkpoint-load-error: {self.path} unreadable, starting fresh: {e}")
            return None

    def save(self, record: R) -> None:
        """Overwrite the checkpoint with the full record"""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(record.model_dump(by_alias=True), f, indent=2, ensure_ascii=False)
        os.replace(tmp_path, self.path)
        logger.debug(f"💾 Checkpoint saved: {self.path}")

    def clear(self) -> bool:
        """Delete the checkpoint file; returns True if one was removed"""
        if not self.path.exists():
            return False
        self.path.unlink()
        logger.info(f"🗑️ Checkpoint removed: {self.path}")
        return True


def checkpoint_path(base_file: Union[str, Path], entity_name: str) -> Path:
    """geocoding-progress.json -> geocoding-progress-partners.json"""
    base = Path(base_file)
    return base.with_name(f"{base.stem}-{entity_name}{base.suffix}")
