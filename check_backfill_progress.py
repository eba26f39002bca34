"""
Show geocoding / image migration coverage and saved progress
Usage: python check_backfill_progress.py
"""

import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from wedding_backfill.database import SessionLocal, init_db
from wedding_backfill.workers.progress_report import report_progress

logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)

if __name__ == "__main__":
    init_db()
    db = SessionLocal()
    try:
        in_progress = report_progress(db)
        if any(in_progress.values()):
            logger.info("\n💡 Resume: python run_geocoding.py all / python run_image_migration.py all")
            logger.info("🗑️ Start over: python reset_backfill_progress.py [geocoding|images|all]")
    except Exception as e:
        logger.error(f"❌ Progress check failed: {e}")
        sys.exit(1)
    finally:
        db.close()
