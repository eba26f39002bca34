import logging
import os

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import DATABASE_URL

logger = logging.getLogger(__name__)

POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "5"))
MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", "10"))
POOL_RECYCLE = int(os.getenv("DB_POOL_RECYCLE", "300"))


def _engine_options(url: str) -> dict:
    options = {"pool_pre_ping": True, "echo": False}
    # SQLite has no server-side pool to tune
    if not url.startswith("sqlite"):
        options.update(pool_recycle=POOL_RECYCLE, pool_size=POOL_SIZE, max_overflow=MAX_OVERFLOW)
    return options


try:
    engine = create_engine(DATABASE_URL, **_engine_options(DATABASE_URL))
    logger.info("✅ Database engine created successfully")
except Exception as e:
    logger.error(f"❌ Failed to create database engine: {e}")
    raise

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """Create missing tables (local SQLite runs); existing tables are left alone"""
    from . import models  # noqa: F401 - register models with Base

    Base.metadata.create_all(bind=engine, checkfirst=True)
