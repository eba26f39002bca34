import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./wedding_backfill.db")

# Nominatim (OpenStreetMap) geocoding
NOMINATIM_BASE_URL = os.getenv("NOMINATIM_BASE_URL", "https://nominatim.openstreetmap.org").rstrip(
    "/"
)
# Required by Nominatim policy (include a way to contact you)
NOMINATIM_USER_AGENT = os.getenv("NOMINATIM_USER_AGENT", "MonMariage-AI/1.0 (contact@monmariage.ai)")
GEOCODING_COUNTRY_CODES = os.getenv("GEOCODING_COUNTRY_CODES", "fr")
GEOCODING_TIMEOUT_SECONDS = float(os.getenv("GEOCODING_TIMEOUT_SECONDS", "10"))

# Batch pacing - Nominatim allows at most 1 request per second
GEOCODING_DELAY_SECONDS = float(os.getenv("GEOCODING_DELAY_SECONDS", "1.1"))
IMAGE_UPLOAD_DELAY_SECONDS = float(os.getenv("IMAGE_UPLOAD_DELAY_SECONDS", "1.0"))
BACKFILL_BATCH_SIZE = int(os.getenv("BACKFILL_BATCH_SIZE", "100"))
BACKFILL_BATCH_PAUSE_SECONDS = float(os.getenv("BACKFILL_BATCH_PAUSE_SECONDS", "5"))
CHECKPOINT_EVERY = int(os.getenv("CHECKPOINT_EVERY", "10"))
PROGRESS_LOG_EVERY = int(os.getenv("PROGRESS_LOG_EVERY", "50"))

# Checkpoint files, relative to the working directory
GEOCODING_CHECKPOINT_FILE = os.getenv("GEOCODING_CHECKPOINT_FILE", "geocoding-progress.json")
IMAGE_CHECKPOINT_FILE = os.getenv("IMAGE_CHECKPOINT_FILE", "upload-progress.json")

# Cloudflare R2 Configuration
R2_ACCOUNT_ID = os.getenv("R2_ACCOUNT_ID")
R2_ACCESS_KEY_ID = os.getenv("R2_ACCESS_KEY_ID")
R2_SECRET_ACCESS_KEY = os.getenv("R2_SECRET_ACCESS_KEY")
R2_BUCKET_NAME = os.getenv("R2_BUCKET_NAME", "monmariage-media")
# Public bucket domain (r2.dev or custom domain) used to build image URLs
R2_PUBLIC_BASE_URL = os.getenv("R2_PUBLIC_BASE_URL", "https://media.monmariage.ai").rstrip("/")

# Scraped gallery images
IMAGE_RESOLUTION = os.getenv("IMAGE_RESOLUTION", "960")
IMAGE_SOURCE_REFERER = os.getenv("IMAGE_SOURCE_REFERER", "https://www.mariages.net/")
IMAGE_DOWNLOAD_TIMEOUT_SECONDS = float(os.getenv("IMAGE_DOWNLOAD_TIMEOUT_SECONDS", "30"))
SOURCE_DATA_DIR = os.getenv("SOURCE_DATA_DIR", "data")
