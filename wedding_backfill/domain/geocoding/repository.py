"""Geocoding repository - Database operations for coordinates"""

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from ...models import Establishment, Partner
from ...workers.scanner import EntityScanner
from .schemas import CoverageStats

GEOCODABLE_MODELS = {
    "establishments": Establishment,
    "partners": Partner,
}


class GeocodingRepository:
    """Repository for coordinate reads and writes"""

    @staticmethod
    def unresolved_filter(model):
        """Rows whose coordinates are missing or outside the valid ranges"""
        return or_(
            model.latitude.is_(None),
            model.longitude.is_(None),
            model.latitude < -90,
            model.latitude > 90,
            model.longitude < -180,
            model.longitude > 180,
        )

    @staticmethod
    def resolved_filter(model):
        return and_(
            model.latitude.isnot(None),
            model.longitude.isnot(None),
            model.latitude.between(-90, 90),
            model.longitude.between(-180, 180),
        )

    @classmethod
    def scanner(cls, model) -> EntityScanner:
        return EntityScanner(model, lambda: cls.unresolved_filter(model))

    @staticmethod
    def save_coordinates(db: Session, entity, latitude: float, longitude: float) -> None:
        """Single-row update, committed on its own"""
        entity.latitude = latitude
        entity.longitude = longitude
        db.commit()

    @classmethod
    def coverage(cls, db: Session, entity_name: str) -> CoverageStats:
        model = GEOCODABLE_MODELS[entity_name]
        total = db.query(model).count()
        with_coordinates = db.query(model).filter(cls.resolved_filter(model)).count()
        return CoverageStats(entity=entity_name, total=total, with_coordinates=with_coordinates)
