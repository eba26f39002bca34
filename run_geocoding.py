"""
Geocoding runner
Usage: python run_geocoding.py [stats|establishments|est|partners|part|all]
"""

import asyncio
import logging
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent))

from wedding_backfill.database import init_db
from wedding_backfill.workers.geocoding_worker import GEOCODING_MODES, run_geocoding

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)

if __name__ == "__main__":
    mode = sys.argv[1] if len(sys.argv) > 1 else "stats"
    if mode not in GEOCODING_MODES:
        logger.error(f"Usage: python run_geocoding.py [{'|'.join(GEOCODING_MODES)}]")
        sys.exit(1)

    logger.info("🚀 Starting geocoding...")
    try:
        init_db()
        asyncio.run(run_geocoding(mode))
        logger.info("🎉 Geocoding finished")
    except KeyboardInterrupt:
        logger.info("👋 Geocoding stopped by user - run the same command to resume")
        sys.exit(1)
    except Exception as e:
        logger.error(f"💥 Geocoding crashed: {e}")
        sys.exit(1)
