"""Checkpoint inspection and reset for the backfill jobs"""

import logging
from pathlib import Path
from typing import Optional

from sqlalchemy.orm import Session

from ..config import GEOCODING_DELAY_SECONDS, IMAGE_UPLOAD_DELAY_SECONDS
from .checkpoint import CheckpointStore
from .geocoding_worker import geocoding_store, log_geocoding_stats
from .image_worker import image_store, log_image_stats

logger = logging.getLogger(__name__)

ENTITY_NAMES = ["establishments", "partners"]


def job_stores() -> dict[str, list[CheckpointStore]]:
    return {
        "geocoding": [geocoding_store(name) for name in ENTITY_NAMES],
        "images": [image_store(name) for name in ENTITY_NAMES],
    }


def describe_checkpoint(store: CheckpointStore, seconds_per_entity: float) -> Optional[dict]:
    """Summary of one saved checkpoint, or None when the job is not in progress"""
    record = store.load()
    if record is None:
        return None
    return {
        "path": str(store.path),
        "processed": record.processed_entities,
        "total": record.total_entities,
        "succeeded": record.succeeded,
        "failed": record.failed,
        "success_rate": record.success_rate,
        "remaining": record.remaining,
        "last_processed_id": record.last_processed_id,
        "estimated_hours": record.remaining * seconds_per_entity / 3600,
    }


def report_progress(db: Session) -> dict[str, list[dict]]:
    """Log coverage and the state of every checkpoint file"""
    log_geocoding_stats(db)
    log_image_stats(db)

    delays = {"geocoding": GEOCODING_DELAY_SECONDS, "images": IMAGE_UPLOAD_DELAY_SECONDS}
    in_progress: dict[str, list[dict]] = {}
    for job, stores in job_stores().items():
        summaries = [s for s in (describe_checkpoint(store, delays[job]) for store in stores) if s]
        in_progress[job] = summaries
        if not summaries:
            logger.info(f"📂 {job}: no saved progress")
            continue
        for summary in summaries:
            logger.info(f"📂 {job}: {summary['path']}")
            logger.info(f"  📍 Processed: {summary['processed']}/{summary['total']}")
            logger.info(f"  ✅ Succeeded: {summary['succeeded']}  ❌ Failed: {summary['failed']}")
            logger.info(f"  📈 Success rate: {summary['success_rate']:.2f}%")
            logger.info(f"  🔄 Last processed id: {summary['last_processed_id']}")
            logger.info(
                f"  ⏳ Remaining: {summary['remaining']} (~{summary['estimated_hours']:.1f} h)"
            )
    return in_progress


RESET_TARGETS = {
    "geocoding": ["geocoding"],
    "images": ["images"],
    "all": ["geocoding", "images"],
}


def reset_progress(target: str = "all") -> list[Path]:
    """Delete saved checkpoints so the next run starts from the beginning"""
    if target not in RESET_TARGETS:
        raise ValueError(f"Unknown target '{target}', expected one of: {', '.join(RESET_TARGETS)}")
    stores = job_stores()
    removed = []
    for job in RESET_TARGETS[target]:
        for store in stores[job]:
            if store.clear():
                removed.append(store.path)
    if not removed:
        logger.info("ℹ️ No progress file found")
    logger.info("🔄 The next run will start from the beginning")
    return removed

