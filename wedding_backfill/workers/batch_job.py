"""
Resumable batch job

Generic scan → process → checkpoint → delay loop shared by the geocoding and
image migration jobs. Each job only supplies the scanner, the unit of work and
the pacing; everything about resuming lives here.
"""

import logging
from typing import Awaitable, Callable, Generic, Optional, TypeVar

from pydantic import BaseModel
from sqlalchemy.orm import Session

from .checkpoint import CheckpointRecord, CheckpointStore
from .pacing import DelaySchedule
from .scanner import EntityScanner

logger = logging.getLogger(__name__)

T = TypeVar("T")


class WorkOutcome(BaseModel):
    """What one unit of work did to the job counters"""

    succeeded: int = 0
    failed: int = 0
    skipped: bool = False
    error: Optional[str] = None

    @classmethod
    def success(cls, count: int = 1) -> "WorkOutcome":
        return cls(succeeded=count)

    @classmethod
    def failure(cls, error: str, count: int = 1) -> "WorkOutcome":
        return cls(failed=count, error=error)

    @classmethod
    def skip(cls, reason: str) -> "WorkOutcome":
        return cls(skipped=True, error=reason)


WorkFunc = Callable[[Session, T], Awaitable[WorkOutcome]]


class ResumableBatchJob(Generic[T]):
    """
    Process every unresolved entity once, in ascending id order.

    Args:
        name: Label used in logs
        scanner: Yields batches of unresolved entities after a cursor
        work: Coroutine handling one entity; returns a WorkOutcome and never
            raises for expected per-entity failures
        store: Checkpoint file for this job
        schedule: Delay per entity and pause per full batch
        batch_size: Entities fetched per scan
        checkpoint_every: Save the checkpoint every N processed entities
        progress_every: Log running totals every N processed entities
        label: Human-readable name of an entity for logs and the checkpoint
    """

    def __init__(
        self,
        name: str,
        scanner: EntityScanner,
        work: WorkFunc,
        store: CheckpointStore,
        schedule: DelaySchedule,
        batch_size: int = 100,
        checkpoint_every: int = 10,
        progress_every: int = 50,
        label: Callable[[T], str] = lambda entity: str(entity.id),
    ):
        self.name = name
        self.scanner = scanner
        self.work = work
        self.store = store
        self.schedule = schedule
        self.batch_size = max(1, batch_size)
        self.checkpoint_every = max(1, checkpoint_every)
        self.progress_every = max(1, progress_every)
        self.label = label

    def start(self, db: Session, resume_from: Optional[str] = None) -> CheckpointRecord:
        """Load the saved progress or start a fresh record"""
        record = self.store.load()
        if record is not None:
            # Counters and cursor come from the file; the total is re-derived
            # from what is actually left after the cursor
            remaining = self.scanner.count_remaining(db, record.last_processed_id)
            record.total_entities = record.processed_entities + remaining
            logger.info(
                f"📂 [{self.name}] Resuming after id {record.last_processed_id}: "
                f"{record.processed_entities}/{record.total_entities} processed, "
                f"✅ {record.succeeded} ❌ {record.failed}"
            )
        else:
            record = self.store.record_cls()
            record.total_entities = self.scanner.count_remaining(db, None)
            logger.info(f"📊 [{self.name}] {record.total_entities} entities to process")

        if resume_from is not None:
            record.last_processed_id = resume_from
            record.total_entities = record.processed_entities + self.scanner.count_remaining(
                db, resume_from
            )
            logger.info(f"🔄 [{self.name}] Resuming exactly after id {resume_from}")
        return record

    async def run(self, db: Session, resume_from: Optional[str] = None) -> CheckpointRecord:
        record = self.start(db, resume_from)
        try:
            await self._process_all(db, record)
        except BaseException:
            self.store.save(record)
            logger.error(
                f"💾 [{self.name}] Progress saved after id {record.last_processed_id}; "
                f"run the same command to resume"
            )
            raise

        logger.info(f"✅ [{self.name}] All entities processed")
        self.store.clear()
        self.log_summary(record)
        return record

    async def _process_all(self, db: Session, record: CheckpointRecord) -> None:
        while True:
            batch = self.scanner.next_batch(db, record.last_processed_id, self.batch_size)
            if not batch:
                break

            for entity in batch:
                record.current_entity = self.label(entity)
                position = record.processed_entities + 1
                logger.info(
                    f"📍 [{self.name}] [{position}/{record.total_entities}] {record.current_entity}"
                )

                outcome = await self.work(db, entity)
                self._apply(record, outcome)
                record.last_processed_id = entity.id

                if record.processed_entities % self.checkpoint_every == 0:
                    self.store.save(record)
                if record.processed_entities % self.progress_every == 0:
                    self.log_progress(record)

                # A skipped entity made no request
                if not outcome.skipped:
                    await self.schedule.after_item()

            if len(batch) == self.batch_size:
                await self.schedule.after_batch()

    def _apply(self, record: CheckpointRecord, outcome: WorkOutcome) -> None:
        record.processed_entities += 1
        record.succeeded += outcome.succeeded
        record.failed += outcome.failed
        if outcome.skipped:
            record.skipped_entities += 1
            logger.info(f"  ⏭️ Skipped: {outcome.error}")
        elif outcome.failed:
            logger.info(f"  ❌ Failed: {outcome.error}")

    def log_progress(self, record: CheckpointRecord) -> None:
        percent = (
            record.processed_entities / record.total_entities * 100 if record.total_entities else 100.0
        )
        logger.info(
            f"📈 [{self.name}] Progress: {record.processed_entities}/{record.total_entities} "
            f"({percent:.1f}%) - Success: {record.succeeded}, Failures: {record.failed}"
        )

    def log_summary(self, record: CheckpointRecord) -> None:
        logger.info(f"📊 [{self.name}] Final statistics:")
        logger.info(f"  📍 Processed: {record.processed_entities}")
        logger.info(f"  ✅ Succeeded: {record.succeeded}")
        logger.info(f"  ⏭️ Skipped: {record.skipped_entities}")
        logger.info(f"  ❌ Failed: {record.failed}")
        logger.info(f"  📈 Success rate: {record.success_rate:.2f}%")
