"""
Attach scraped 960p image URLs to venues and partners
Usage: python import_source_images.py [data_dir]
"""

import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from wedding_backfill.config import SOURCE_DATA_DIR
from wedding_backfill.database import SessionLocal, init_db
from wedding_backfill.domain.media.catalog import import_source_images

logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)

if __name__ == "__main__":
    data_dir = Path(sys.argv[1] if len(sys.argv) > 1 else SOURCE_DATA_DIR)
    if not data_dir.is_dir():
        logger.error(f"Data directory not found: {data_dir}")
        sys.exit(1)

    init_db()
    db = SessionLocal()
    try:
        counts = import_source_images(db, data_dir)
        logger.info(
            f"✅ Source images imported: {counts['establishments']} establishments, "
            f"{counts['partners']} partners"
        )
    except Exception as e:
        logger.error(f"❌ Import failed: {e}")
        sys.exit(1)
    finally:
        db.close()
