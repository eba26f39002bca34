"""
Shared fixtures: in-memory database, recording sleep, mocked HTTP.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

import httpx
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from wedding_backfill import models  # noqa: F401 - register models with Base
from wedding_backfill.database import Base
from wedding_backfill.workers.pacing import DelaySchedule


class RecordingSleep:
    """Async sleep replacement that only records the requested delays"""

    def __init__(self):
        self.calls = []

    async def __call__(self, seconds):
        self.calls.append(seconds)


class FakeS3:
    """Stands in for the boto3 R2 client"""

    def __init__(self, error=None):
        self.error = error
        self.objects = {}

    def put_object(self, **kwargs):
        if self.error is not None:
            raise self.error
        self.objects[kwargs["Key"]] = kwargs


@pytest.fixture
def db():
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def schedule(recording_sleep):
    return DelaySchedule(item_delay=1.0, batch_pause=5.0, sleep=recording_sleep)


@pytest.fixture
def fake_s3():
    return FakeS3()


def mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def nominatim_hit(lat="48.8698", lon="2.3319"):
    return httpx.Response(200, json=[{"lat": lat, "lon": lon, "display_name": "Paris"}])


def nominatim_miss():
    return httpx.Response(200, json=[])
