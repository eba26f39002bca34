"""
Delete saved backfill progress so the next run starts over
Usage: python reset_backfill_progress.py [geocoding|images|all]
"""

import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from wedding_backfill.workers.progress_report import RESET_TARGETS, reset_progress

logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)

if __name__ == "__main__":
    target = sys.argv[1] if len(sys.argv) > 1 else "all"
    if target not in RESET_TARGETS:
        logger.error(f"Usage: python reset_backfill_progress.py [{'|'.join(RESET_TARGETS)}]")
        sys.exit(1)

    for path in reset_progress(target):
        logger.info(f"✅ Removed {path}")
