"""
Geocoding Background Job
Fills latitude/longitude of venues and partners through Nominatim
"""

import asyncio
import logging
from typing import Optional

import httpx
from sqlalchemy.orm import Session

from ..config import (
    BACKFILL_BATCH_PAUSE_SECONDS,
    BACKFILL_BATCH_SIZE,
    CHECKPOINT_EVERY,
    GEOCODING_CHECKPOINT_FILE,
    GEOCODING_DELAY_SECONDS,
    PROGRESS_LOG_EVERY,
)
from ..database import SessionLocal
from ..domain.geocoding.repository import GEOCODABLE_MODELS, GeocodingRepository
from ..domain.geocoding.resolver import AddressResolver
from ..domain.geocoding.schemas import AddressQuery
from .batch_job import ResumableBatchJob, WorkOutcome
from .checkpoint import CheckpointRecord, CheckpointStore, GeocodingCheckpoint, checkpoint_path
from .pacing import DelaySchedule, SleepFunc

logger = logging.getLogger(__name__)

GEOCODING_MODES = {
    "stats": [],
    "establishments": ["establishments"],
    "est": ["establishments"],
    "partners": ["partners"],
    "part": ["partners"],
    "all": ["establishments", "partners"],
}


def geocoding_store(entity_name: str, base_file: str = GEOCODING_CHECKPOINT_FILE) -> CheckpointStore:
    return CheckpointStore(checkpoint_path(base_file, entity_name), GeocodingCheckpoint)


async def geocode_entity(db: Session, entity, resolver: AddressResolver) -> WorkOutcome:
    """Resolve one entity's address and store the coordinates"""
    result = await resolver.resolve(AddressQuery(**entity.address_fields))
    if not result.success:
        reason = result.error.value if result.error else "unknown"
        if result.detail:
            reason = f"{reason} ({result.detail})"
        return WorkOutcome.failure(reason)

    GeocodingRepository.save_coordinates(db, entity, result.latitude, result.longitude)
    logger.info(f"  ✅ Coordinates: {result.latitude}, {result.longitude}")
    return WorkOutcome.success()


def build_geocoding_job(
    entity_name: str,
    resolver: AddressResolver,
    schedule: DelaySchedule,
    store: Optional[CheckpointStore] = None,
    batch_size: int = BACKFILL_BATCH_SIZE,
    checkpoint_every: int = CHECKPOINT_EVERY,
    progress_every: int = PROGRESS_LOG_EVERY,
) -> ResumableBatchJob:
    model = GEOCODABLE_MODELS[entity_name]

    async def work(db: Session, entity) -> WorkOutcome:
        return await geocode_entity(db, entity, resolver)

    return ResumableBatchJob(
        name=f"geocoding:{entity_name}",
        scanner=GeocodingRepository.scanner(model),
        work=work,
        store=store or geocoding_store(entity_name),
        schedule=schedule,
        batch_size=batch_size,
        checkpoint_every=checkpoint_every,
        progress_every=progress_every,
        label=lambda entity: entity.display_name,
    )


def log_geocoding_stats(db: Session) -> None:
    logger.info("📊 GEOCODING STATISTICS")
    logger.info("=" * 50)
    total = with_coordinates = 0
    for entity_name in GEOCODABLE_MODELS:
        stats = GeocodingRepository.coverage(db, entity_name)
        total += stats.total
        with_coordinates += stats.with_coordinates
        logger.info(f"{entity_name.upper()}:")
        logger.info(f"  - Total: {stats.total}")
        logger.info(f"  - With coordinates: {stats.with_coordinates}")
        logger.info(f"  - Without coordinates: {stats.without_coordinates}")
        logger.info(f"  - Coverage: {stats.coverage_percent:.1f}%")
    overall = with_coordinates / total * 100 if total else 0.0
    logger.info(f"OVERALL: {with_coordinates}/{total} geocoded ({overall:.1f}%)")


async def run_geocoding(
    mode: str = "stats",
    db: Optional[Session] = None,
    http_client: Optional[httpx.AsyncClient] = None,
    sleep: SleepFunc = asyncio.sleep,
) -> dict[str, CheckpointRecord]:
    """
    Run the geocoding jobs selected by mode.

    Args:
        mode: stats | establishments (est) | partners (part) | all
        db: Session to use; a new one is opened and closed when omitted
        http_client: Client for Nominatim; a new one is created when omitted
        sleep: Sleep coroutine used for pacing

    Returns:
        Final record of every job that ran
    """
    if mode not in GEOCODING_MODES:
        raise ValueError(f"Unknown mode '{mode}', expected one of: {', '.join(GEOCODING_MODES)}")

    logger.info(f"🌍 Geocoding - mode: {mode}")
    logger.info(
        f"Batch size: {BACKFILL_BATCH_SIZE}, delay: {GEOCODING_DELAY_SECONDS}s, "
        f"batch pause: {BACKFILL_BATCH_PAUSE_SECONDS}s"
    )

    own_db = db is None
    db = db or SessionLocal()
    own_client = http_client is None
    http_client = http_client or httpx.AsyncClient()
    results: dict[str, CheckpointRecord] = {}
    try:
        log_geocoding_stats(db)
        schedule = DelaySchedule(GEOCODING_DELAY_SECONDS, BACKFILL_BATCH_PAUSE_SECONDS, sleep=sleep)
        resolver = AddressResolver(http_client, throttle=schedule.throttle)
        for entity_name in GEOCODING_MODES[mode]:
            job = build_geocoding_job(entity_name, resolver, schedule)
            results[entity_name] = await job.run(db)
        if GEOCODING_MODES[mode]:
            log_geocoding_stats(db)
            logger.info(f"🌐 Nominatim requests sent: {resolver.request_count}")
    finally:
        if own_client:
            await http_client.aclose()
        if own_db:
            db.close()
    return results
