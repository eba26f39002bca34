"""
Marketplace entities touched by the backfill jobs.

Only the columns the geocoding and image migration jobs read or write are
declared here; the rest of the marketplace schema lives with the web app.
"""

import uuid

from sqlalchemy import JSON, Column, DateTime, Float, ForeignKey, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


def generate_entity_id():
    """Generate a string identifier that sorts like the existing ids"""
    return uuid.uuid4().hex


class Establishment(Base):
    """Wedding venue (chateau, domaine, salle de reception...)"""

    __tablename__ = "establishments"

    id = Column(String(64), primary_key=True, default=generate_entity_id)
    name = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=True)

    # Postal address as scraped
    address = Column(String(500), nullable=True)
    city = Column(String(255), nullable=True)
    region = Column(String(255), nullable=True)
    postal_code = Column(String(20), nullable=True)
    country = Column(String(100), nullable=True, default="France")

    # Set by the geocoding job
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)

    # Scraped gallery URLs (external) and their hosted copies
    source_images = Column(JSON, default=list, nullable=True)
    images = Column(JSON, default=list, nullable=True)
    images_uploaded_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    @property
    def display_name(self) -> str:
        return self.name or self.id

    @property
    def address_fields(self) -> dict:
        return {
            "street": self.address,
            "city": self.city,
            "postal_code": self.postal_code,
            "country": self.country,
        }


class Partner(Base):
    """Service provider (photographer, caterer, florist...)"""

    __tablename__ = "partners"

    id = Column(String(64), primary_key=True, default=generate_entity_id)
    company_name = Column(String(255), nullable=False, index=True)
    service_type = Column(String(100), nullable=True)

    billing_street = Column(String(500), nullable=True)
    billing_city = Column(String(255), nullable=True)
    billing_postal_code = Column(String(20), nullable=True)
    billing_country = Column(String(100), nullable=True, default="France")

    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)

    source_images = Column(JSON, default=list, nullable=True)
    images_uploaded_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    storefronts = relationship(
        "PartnerStorefront", back_populates="partner", cascade="all, delete-orphan"
    )

    @property
    def display_name(self) -> str:
        return self.company_name or self.id

    @property
    def address_fields(self) -> dict:
        return {
            "street": self.billing_street,
            "city": self.billing_city,
            "postal_code": self.billing_postal_code,
            "country": self.billing_country,
        }


class PartnerStorefront(Base):
    """Public profile page of a partner; holds the hosted gallery"""

    __tablename__ = "partner_storefronts"

    id = Column(String(64), primary_key=True, default=generate_entity_id)
    partner_id = Column(String(64), ForeignKey("partners.id"), nullable=False, index=True)
    company_name = Column(String(255), nullable=True)
    images = Column(JSON, default=list, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    partner = relationship("Partner", back_populates="storefronts")
