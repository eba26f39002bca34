"""
Image migration runner
Usage: python run_image_migration.py [stats|establishments|partners|all|<partner id to resume after>]
"""

import asyncio
import logging
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent))

from wedding_backfill.database import init_db
from wedding_backfill.workers.image_worker import run_image_migration

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("botocore").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)

if __name__ == "__main__":
    argument = sys.argv[1] if len(sys.argv) > 1 else None

    logger.info("🚀 Starting image migration...")
    try:
        init_db()
        asyncio.run(run_image_migration(argument))
        logger.info("🎉 Image migration finished")
    except KeyboardInterrupt:
        logger.info("👋 Image migration stopped by user - run the same command to resume")
        sys.exit(1)
    except Exception as e:
        logger.error(f"💥 Image migration crashed: {e}")
        sys.exit(1)
