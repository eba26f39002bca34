"""
Image Migration Background Job
Copies scraped 960p gallery images of venues and partners to R2
"""

import asyncio
import logging
from typing import Callable, Optional

import httpx
from sqlalchemy.orm import Session

from ..config import (
    BACKFILL_BATCH_PAUSE_SECONDS,
    BACKFILL_BATCH_SIZE,
    CHECKPOINT_EVERY,
    IMAGE_CHECKPOINT_FILE,
    IMAGE_UPLOAD_DELAY_SECONDS,
    PROGRESS_LOG_EVERY,
)
from ..database import SessionLocal
from ..domain.media.repository import MEDIA_MODELS, MediaRepository
from ..domain.media.service import ImageUploader
from ..domain.media.storage import R2ImageStorage
from .batch_job import ResumableBatchJob, WorkOutcome
from .checkpoint import CheckpointRecord, CheckpointStore, ImageUploadCheckpoint, checkpoint_path
from .pacing import DelaySchedule, SleepFunc

logger = logging.getLogger(__name__)

IMAGE_MODES = {
    "stats": [],
    "establishments": ["establishments"],
    "partners": ["partners"],
    "all": ["establishments", "partners"],
}

SAVERS = {
    "establishments": MediaRepository.save_establishment_images,
    "partners": MediaRepository.save_partner_images,
}


def image_store(entity_name: str, base_file: str = IMAGE_CHECKPOINT_FILE) -> CheckpointStore:
    return CheckpointStore(checkpoint_path(base_file, entity_name), ImageUploadCheckpoint)


async def migrate_entity_images(
    db: Session,
    entity,
    category: str,
    uploader: ImageUploader,
    schedule: DelaySchedule,
    save: Callable,
) -> WorkOutcome:
    """Upload every source image of one entity, one at a time"""
    sources = entity.source_images or []
    if not sources:
        return WorkOutcome.skip("No source images")
    if category == "partners" and not entity.storefronts:
        return WorkOutcome.skip("No storefront")

    logger.info(f"  📸 {len(sources)} images to migrate")
    urls: list[str] = []
    errors: list[str] = []
    for index, source_url in enumerate(sources, start=1):
        result = await uploader.upload(source_url, category, entity.id, index)
        if result.success:
            urls.append(result.url)
        else:
            errors.append(f"image {index}: {result.error}")
            logger.warning(f"  ❌ Image {index} failed: {result.error} {result.detail or ''}")
        if not result.reused and index < len(sources):
            await schedule.throttle()

    save(db, entity, urls, not errors)
    logger.info(f"  💾 {len(urls)}/{len(sources)} images saved for {category}/{entity.id}")
    return WorkOutcome(
        succeeded=len(urls),
        failed=len(errors),
        error="; ".join(errors) if errors else None,
    )


def build_image_job(
    entity_name: str,
    uploader: ImageUploader,
    schedule: DelaySchedule,
    store: Optional[CheckpointStore] = None,
    batch_size: int = BACKFILL_BATCH_SIZE,
    checkpoint_every: int = CHECKPOINT_EVERY,
    progress_every: int = PROGRESS_LOG_EVERY,
) -> ResumableBatchJob:
    model = MEDIA_MODELS[entity_name]
    save = SAVERS[entity_name]

    async def work(db: Session, entity) -> WorkOutcome:
        return await migrate_entity_images(db, entity, entity_name, uploader, schedule, save)

    return ResumableBatchJob(
        name=f"images:{entity_name}",
        scanner=MediaRepository.scanner(model),
        work=work,
        store=store or image_store(entity_name),
        schedule=schedule,
        batch_size=batch_size,
        checkpoint_every=checkpoint_every,
        progress_every=progress_every,
        label=lambda entity: entity.display_name,
    )


def log_image_stats(db: Session) -> None:
    logger.info("📊 IMAGE MIGRATION STATISTICS")
    logger.info("=" * 50)
    for entity_name in MEDIA_MODELS:
        stats = MediaRepository.coverage(db, entity_name)
        logger.info(f"{entity_name.upper()}:")
        logger.info(f"  - Total: {stats.total}")
        logger.info(f"  - With source images: {stats.with_source_images}")
        logger.info(f"  - Migrated: {stats.migrated}")
        logger.info(f"  - Pending: {stats.pending}")


def parse_image_argument(argument: Optional[str]) -> tuple[str, Optional[str]]:
    """A mode keyword, or a partner id to resume exactly after"""
    if not argument:
        return "stats", None
    if argument in IMAGE_MODES:
        return argument, None
    return "partners", argument


async def run_image_migration(
    argument: Optional[str] = None,
    db: Optional[Session] = None,
    http_client: Optional[httpx.AsyncClient] = None,
    storage: Optional[R2ImageStorage] = None,
    sleep: SleepFunc = asyncio.sleep,
) -> dict[str, CheckpointRecord]:
    mode, resume_from = parse_image_argument(argument)
    logger.info(f"📤 Image migration - mode: {mode}")

    own_db = db is None
    db = db or SessionLocal()
    own_client = http_client is None
    http_client = http_client or httpx.AsyncClient()
    results: dict[str, CheckpointRecord] = {}
    try:
        log_image_stats(db)
        schedule = DelaySchedule(IMAGE_UPLOAD_DELAY_SECONDS, BACKFILL_BATCH_PAUSE_SECONDS, sleep=sleep)
        uploader = ImageUploader(http_client, storage or R2ImageStorage(http_client))
        for entity_name in IMAGE_MODES[mode]:
            job = build_image_job(entity_name, uploader, schedule)
            results[entity_name] = await job.run(db, resume_from=resume_from)
        if IMAGE_MODES[mode]:
            log_image_stats(db)
    finally:
        if own_client:
            await http_client.aclose()
        if own_db:
            db.close()
    return results
