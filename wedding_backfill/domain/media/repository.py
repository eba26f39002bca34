"""Media repository - Database operations for hosted galleries"""

from datetime import datetime, timezone

from sqlalchemy import String, and_, cast
from sqlalchemy.orm import Session

from ...models import Establishment, Partner, PartnerStorefront
from ...workers.scanner import EntityScanner
from .schemas import ImageCoverageStats

MEDIA_MODELS = {
    "establishments": Establishment,
    "partners": Partner,
}

# JSON renderings of "no source images"
EMPTY_SOURCES = ["[]", "null", ""]


class MediaRepository:
    """Repository for gallery reads and writes"""

    @staticmethod
    def unresolved_filter(model):
        """Rows with source images still to host (and, for partners, a storefront to host them on)"""
        condition = and_(
            model.images_uploaded_at.is_(None),
            model.source_images.isnot(None),
            ~cast(model.source_images, String).in_(EMPTY_SOURCES),
        )
        if model is Partner:
            condition = and_(condition, Partner.storefronts.any())
        return condition

    @classmethod
    def scanner(cls, model) -> EntityScanner:
        return EntityScanner(model, lambda: cls.unresolved_filter(model))

    @staticmethod
    def save_establishment_images(
        db: Session, establishment: Establishment, urls: list[str], complete: bool
    ) -> None:
        """Replace the hosted gallery; mark migrated only when every image is hosted"""
        establishment.images = list(urls)
        if complete:
            establishment.images_uploaded_at = datetime.now(timezone.utc)
        db.commit()

    @staticmethod
    def save_partner_images(db: Session, partner: Partner, urls: list[str], complete: bool) -> int:
        """
        Write the hosted gallery on every storefront of the partner.

        The partner is marked migrated only if at least one storefront holds the URLs.
        """
        updated = (
            db.query(PartnerStorefront)
            .filter(PartnerStorefront.partner_id == partner.id)
            .update({PartnerStorefront.images: list(urls)}, synchronize_session="fetch")
        )
        if complete and updated:
            partner.images_uploaded_at = datetime.now(timezone.utc)
        db.commit()
        return updated

    @staticmethod
    def coverage(db: Session, entity_name: str) -> ImageCoverageStats:
        model = MEDIA_MODELS[entity_name]
        total = db.query(model).count()
        with_sources = sum(1 for (sources,) in db.query(model.source_images) if sources)
        migrated = db.query(model).filter(model.images_uploaded_at.isnot(None)).count()
        return ImageCoverageStats(
            entity=entity_name, total=total, with_source_images=with_sources, migrated=migrated
        )
